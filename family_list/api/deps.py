from typing import Generator
from fastapi import Depends, Header, Query, Request
from sqlalchemy.orm import Session, sessionmaker
from ..db.session import SessionLocal
from ..models.user import User
from ..services.broadcaster import Broadcaster
from ..services.user_service import resolve_user


def get_session_factory() -> sessionmaker:
    return SessionLocal


def get_db(factory: sessionmaker = Depends(get_session_factory)) -> Generator[Session, None, None]:
    db = factory()
    try:
        yield db
    finally:
        db.close()


def get_claimed_user_id(
    x_user_id: str | None = Header(default=None),
    user_id: str | None = Query(default=None, alias="userId"),
) -> str | None:
    # EventSource cannot send headers, hence the query parameter fallback
    return x_user_id or user_id


def get_current_user(
    claimed_id: str | None = Depends(get_claimed_user_id),
    db: Session = Depends(get_db),
) -> User:
    return resolve_user(db, claimed_id)


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster
