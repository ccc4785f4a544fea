from typing import TYPE_CHECKING
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid import uuid4
from ..db.base_class import Base
from . import utcnow

if TYPE_CHECKING:
    from .user import User
    from .item import Item


class Family(Base):
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(128), index=True, nullable=False)
    code: Mapped[str] = mapped_column(String(24), unique=True, index=True, nullable=False)
    # user.family_id points back here, so this side is added after both tables exist
    owner_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("user.id", ondelete="SET NULL", use_alter=True, name="fk_family_owner_id_user")
    )
    created_at: Mapped["DateTime"] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    members: Mapped[list["User"]] = relationship(back_populates="family", foreign_keys="User.family_id")
    items: Mapped[list["Item"]] = relationship(back_populates="family", cascade="all,delete-orphan")
