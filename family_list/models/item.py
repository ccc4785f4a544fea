from enum import StrEnum
from sqlalchemy import String, DateTime, ForeignKey, Text, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import uuid4

from .family import Family
from ..db.base_class import Base
from . import utcnow


class Category(StrEnum):
    FOOD = "Food"
    HOUSEHOLD = "Household"
    HEALTH = "Health"
    KIDS = "Kids"
    PETS = "Pets"
    OTHER = "Other"


class Urgency(StrEnum):
    LOW = "low"
    NORMAL = "normal"
    URGENT = "urgent"


class Item(Base):
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    family_id: Mapped[str] = mapped_column(String(36), ForeignKey("family.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # creator's display name at the time the item was added
    who: Mapped[str] = mapped_column(String(128), nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(36), ForeignKey("user.id", ondelete="SET NULL"))
    # plain strings, not Enum columns: older rows may hold values no longer in Category/Urgency
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    urgency: Mapped[str] = mapped_column(String(16), default=Urgency.NORMAL.value, nullable=False)
    note: Mapped[str] = mapped_column(Text, default="", nullable=False)
    done: Mapped[bool] = mapped_column(Boolean, default=False, index=True, nullable=False)
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, index=True, nullable=False)

    family: Mapped["Family"] = relationship(back_populates="items")
