from pydantic import EmailStr
from .common import ORMModel
from .family import FamilyOut


class UserOut(ORMModel):
    id: str
    name: str
    email: EmailStr
    family_id: str | None = None


class MeOut(UserOut):
    family: FamilyOut | None = None
