from passlib.context import CryptContext
from ..core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def _bcrypt_safe(p: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return p.encode("utf-8")[:72].decode("utf-8", errors="ignore")


def hash_password(p: str) -> str:
    return pwd_context.hash(_bcrypt_safe(p))


def verify_password(p: str, hashed: str) -> bool:
    return pwd_context.verify(_bcrypt_safe(p), hashed)
