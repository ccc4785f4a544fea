from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import logging
from ..core.errors import Conflict, Unauthenticated, UnknownUser, ValidationError
from ..models.user import User
from .security import hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(db: Session, *, name: str, email: str, password: str) -> User:
    name = (name or "").strip()
    if not name:
        raise ValidationError("name is required")
    if not password:
        raise ValidationError("password is required")
    email = normalize_email(email)
    if get_by_email(db, email):
        logger.warning(f"Signup failed: email already registered - {email}")
        raise Conflict("Email already registered")

    user = User(name=name, email=email, hashed_password=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent signup for the same address
        db.rollback()
        raise Conflict("Email already registered")
    db.refresh(user)
    logger.info(f"User created: id={user.id}, email={user.email}")
    return user


def get_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = get_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def resolve_user(db: Session, user_id: str | None) -> User:
    """Map the identity asserted by the caller to a stored user.

    Runs on every request; nothing is cached between calls.
    """
    if not user_id:
        raise Unauthenticated()
    user = db.get(User, user_id)
    if not user:
        raise UnknownUser(f"Unknown user: {user_id}")
    return user
