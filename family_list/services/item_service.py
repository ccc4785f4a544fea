import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..core.errors import Forbidden, NotFound, NotInFamily, ValidationError
from ..models.item import Category, Item, Urgency
from ..models.user import User

logger = logging.getLogger(__name__)

CATEGORIES = frozenset(c.value for c in Category)
URGENCIES = frozenset(u.value for u in Urgency)
EDITABLE_FIELDS = ("name", "category", "urgency", "note", "done")


def _required_text(field: str, value: Any) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def _check_category(value: Any) -> str:
    category = _required_text("category", value)
    if category not in CATEGORIES:
        raise ValidationError(f"Unknown category '{category}'. Expected one of: {', '.join(sorted(CATEGORIES))}")
    return category


def _check_urgency(value: Any) -> str:
    urgency = _required_text("urgency", value)
    if urgency not in URGENCIES:
        raise ValidationError(f"Unknown urgency '{urgency}'. Expected one of: {', '.join(sorted(URGENCIES))}")
    return urgency


def list_items(db: Session, *, user: User) -> list[Item]:
    # ungrouped users simply have nothing to see
    if not user.family_id:
        return []
    q = select(Item).where(Item.family_id == user.family_id).order_by(Item.created_at.desc())
    return list(db.execute(q).scalars())


def create_item(
    db: Session, *,
    user: User,
    name: str | None,
    category: str | None,
    urgency: str | None = None,
    note: str | None = None,
) -> Item:
    if not user.family_id:
        raise NotInFamily()
    item = Item(
        family_id=user.family_id,
        name=_required_text("name", name),
        category=_check_category(category),
        urgency=_check_urgency(urgency) if urgency is not None else Urgency.NORMAL.value,
        note=note or "",
        done=False,
        who=user.name,
        created_by=user.id,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info(f"Item created: id={item.id}, family={item.family_id}, by={user.id}")
    return item


def get_item_for(db: Session, *, user: User, item_id: str, lock: bool = False) -> Item:
    """Load an item the caller is allowed to touch.

    A missing item is ``NotFound``; an item of another family is ``Forbidden``.
    """
    item = db.get(Item, item_id, with_for_update=lock or None)
    if not item:
        raise NotFound("Item not found")
    if item.family_id != user.family_id:
        raise Forbidden("Item belongs to another family")
    return item


def update_item(db: Session, *, user: User, item_id: str, changes: dict[str, Any]) -> Item:
    item = get_item_for(db, user=user, item_id=item_id, lock=True)

    updates = {}
    for field in EDITABLE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if field == "name":
            value = _required_text("name", value)
        elif field == "category":
            value = _check_category(value)
        elif field == "urgency":
            value = _check_urgency(value)
        elif field == "note":
            value = value or ""
        elif field == "done":
            if value is None:
                raise ValidationError("done must be true or false")
            value = bool(value)
        updates[field] = value

    # validated as a whole before the row is touched
    for field, value in updates.items():
        setattr(item, field, value)

    try:
        db.commit()
    except StaleDataError:
        # deleted by a concurrent request after we loaded it
        db.rollback()
        raise NotFound("Item not found")
    db.refresh(item)
    return item


def delete_item(db: Session, *, user: User, item_id: str) -> None:
    item = get_item_for(db, user=user, item_id=item_id, lock=True)
    result = db.execute(delete(Item).where(Item.id == item.id, Item.family_id == item.family_id))
    db.commit()
    if result.rowcount == 0:
        raise NotFound("Item not found")
    logger.info(f"Item deleted: id={item_id}, family={user.family_id}, by={user.id}")


def delete_done_items(db: Session, *, user: User) -> int:
    if not user.family_id:
        return 0
    result = db.execute(delete(Item).where(Item.family_id == user.family_id, Item.done.is_(True)))
    db.commit()
    logger.info(f"Cleared {result.rowcount} done item(s) for family {user.family_id}")
    return result.rowcount
