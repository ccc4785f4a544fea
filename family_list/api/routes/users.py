from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.family import FamilyOut
from ...schemas.user import MeOut, UserOut
from ...models.family import Family
from ...models.user import User
from ..deps import get_db, get_current_user

router = APIRouter()


@router.get("/me", response_model=MeOut)
def me(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    family = db.get(Family, current.family_id) if current.family_id else None
    user_out = UserOut.model_validate(current)
    return MeOut(
        **user_out.model_dump(),
        family=FamilyOut.model_validate(family) if family else None,
    )
