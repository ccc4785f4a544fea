from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...models.user import User
from ...schemas.item import ItemCreate, ItemUpdate, ItemOut
from ...services.broadcaster import Broadcaster, EventKind
from ...services.item_service import (
    list_items,
    create_item,
    update_item,
    delete_item,
    delete_done_items,
)
from ..deps import get_db, get_current_user, get_broadcaster

router = APIRouter()

# broadcasts run as background tasks on the event loop, after the response


@router.get("", response_model=list[ItemOut])
def list_family_items(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return list_items(db, user=current)


@router.post("", response_model=ItemOut, status_code=201)
def create(
    payload: ItemCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    item = create_item(
        db,
        user=current,
        name=payload.name,
        category=payload.category,
        urgency=payload.urgency,
        note=payload.note,
    )
    background_tasks.add_task(broadcaster.publish, item.family_id, EventKind.ITEM_ADDED)
    return item


# registered before "/{item_id}" so "done" is not taken for an id
@router.delete("/done/all")
def delete_done(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    deleted = delete_done_items(db, user=current)
    if current.family_id:
        background_tasks.add_task(broadcaster.publish, current.family_id, EventKind.ITEMS_CLEARED)
    return {"ok": True, "deleted": deleted}


@router.patch("/{item_id}", response_model=ItemOut)
def update(
    item_id: str,
    payload: ItemUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    item = update_item(db, user=current, item_id=item_id, changes=payload.model_dump(exclude_unset=True))
    background_tasks.add_task(broadcaster.publish, item.family_id, EventKind.ITEM_UPDATED)
    return item


@router.delete("/{item_id}")
def delete(
    item_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    delete_item(db, user=current, item_id=item_id)
    background_tasks.add_task(broadcaster.publish, current.family_id, EventKind.ITEM_DELETED)
    return {"ok": True}
