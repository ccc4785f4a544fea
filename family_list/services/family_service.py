import logging
import secrets
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import AlreadyInFamily, FamilyNotFound, NameMismatch, NotInFamily, ValidationError
from ..models.family import Family
from ..models.user import User

logger = logging.getLogger(__name__)

INVITE_WORDS = (
    "OAK", "PINE", "BLUE", "RIVER", "MAPLE", "CEDAR", "STONE", "FERN",
    "BIRCH", "CLOUD", "LAKE", "EMBER", "SAGE", "WREN", "HAZEL", "CORAL",
    "AMBER", "OTTER", "ROBIN", "TULIP", "MEADOW", "HARBOR", "LEMON", "PLUM",
)


def _sample_code() -> str:
    return f"{secrets.choice(INVITE_WORDS)}-{secrets.randbelow(10_000):04d}"


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _normalize_name(name: str) -> str:
    return name.strip().casefold()


def code_exists(db: Session, code: str) -> bool:
    return db.execute(select(Family.id).where(Family.code == code)).first() is not None


def generate_invite_code(db: Session, *, sample: Callable[[], str] = _sample_code) -> str:
    """Draw codes until one is not already taken.

    The word/number space is large next to the number of families, so the
    loop is left unbounded.
    """
    while True:
        code = sample()
        if not code_exists(db, code):
            return code
        logger.debug(f"Invite code collision on {code}, resampling")


def create_family(db: Session, *, user: User, name: str, sample: Callable[[], str] = _sample_code) -> Family:
    if user.family_id:
        raise AlreadyInFamily()
    name = (name or "").strip()
    if not name:
        raise ValidationError("Family name is required")

    while True:
        code = generate_invite_code(db, sample=sample)
        fam = Family(name=name, code=code, owner_id=user.id)
        db.add(fam)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if not code_exists(db, code):
                raise
            # a concurrent create took the same code between check and insert
            logger.warning(f"Invite code {code} taken concurrently, retrying")
            continue
        break

    # a failure here leaves an unreferenced family row behind, which is harmless
    user.family_id = fam.id
    db.commit()
    db.refresh(fam)
    logger.info(f"Family created: id={fam.id}, owner={user.id}")
    return fam


def join_family(db: Session, *, user: User, code: str, name: str) -> Family:
    if user.family_id:
        raise AlreadyInFamily()
    fam = db.execute(select(Family).where(Family.code == normalize_code(code or ""))).scalar_one_or_none()
    if not fam:
        raise FamilyNotFound()
    # the name is a second shared secret: a code alone is not enough to join
    if _normalize_name(name or "") != _normalize_name(fam.name):
        raise NameMismatch()
    user.family_id = fam.id
    db.commit()
    logger.info(f"User {user.id} joined family {fam.id}")
    return fam


def leave_family(db: Session, *, user: User) -> str:
    """Detach the user from their family; the family and its items stay."""
    if not user.family_id:
        raise NotInFamily()
    family_id = user.family_id
    user.family_id = None
    db.commit()
    logger.info(f"User {user.id} left family {family_id}")
    return family_id


def get_family_for(db: Session, *, user: User) -> Family:
    if not user.family_id:
        raise NotInFamily()
    fam = db.get(Family, user.family_id)
    if not fam:
        raise NotInFamily()
    return fam


def list_members(db: Session, *, user: User) -> list[User]:
    if not user.family_id:
        raise NotInFamily()
    q = select(User).where(User.family_id == user.family_id).order_by(User.created_at)
    return list(db.execute(q).scalars())
