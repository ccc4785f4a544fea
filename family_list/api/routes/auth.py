import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ...core.errors import Unauthenticated
from ...schemas.auth import SignupIn, LoginIn
from ...schemas.user import UserOut
from ...services.user_service import create_user, authenticate
from ..deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=UserOut, status_code=201)
def signup(payload: SignupIn, db: Session = Depends(get_db)):
    logger.info(f"Signup attempt for email: {payload.email}")
    return create_user(db, name=payload.name, email=payload.email, password=payload.password)


@router.post("/login", response_model=UserOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    # the returned id is what the client sends back as X-User-Id
    user = authenticate(db, email=payload.email, password=payload.password)
    if not user:
        logger.warning(f"Login failed for email: {payload.email}")
        raise Unauthenticated("Incorrect credentials")
    return user
