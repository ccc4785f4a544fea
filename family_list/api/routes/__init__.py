from fastapi import APIRouter
from . import auth, users, families, items, events

router = APIRouter(prefix="/api")

router.include_router(auth.router, prefix="/auth", tags=["Auth"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(families.router, prefix="/families", tags=["Families"])
router.include_router(items.router, prefix="/items", tags=["Items"])
router.include_router(events.router, prefix="/events", tags=["Events"])
