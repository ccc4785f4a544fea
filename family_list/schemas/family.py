from pydantic import BaseModel
from .common import ORMModel


class FamilyCreate(BaseModel):
    name: str


class FamilyJoin(BaseModel):
    code: str
    name: str


class FamilyOut(ORMModel):
    id: str
    name: str
    code: str
