from datetime import datetime
from pydantic import BaseModel
from .common import ORMModel


class ItemCreate(BaseModel):
    # checked against Category/Urgency in the item service
    name: str
    category: str
    urgency: str | None = None
    note: str | None = None


class ItemUpdate(BaseModel):
    name: str | None = None
    category: str | None = None
    urgency: str | None = None
    note: str | None = None
    done: bool | None = None


class ItemOut(ORMModel):
    id: str
    family_id: str
    name: str
    who: str
    created_by: str | None = None
    category: str
    urgency: str
    note: str
    done: bool
    created_at: datetime
