from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...schemas.family import FamilyCreate, FamilyJoin, FamilyOut
from ...schemas.member import MemberOut
from ...services.family_service import create_family, join_family, leave_family, get_family_for, list_members
from ...models.user import User
from ..deps import get_db, get_current_user

router = APIRouter()


@router.post("", response_model=FamilyOut, status_code=201)
def create(payload: FamilyCreate, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return create_family(db, user=current, name=payload.name)


@router.post("/join", response_model=FamilyOut)
def join(payload: FamilyJoin, db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return join_family(db, user=current, code=payload.code, name=payload.name)


@router.post("/leave")
def leave(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    leave_family(db, user=current)
    return {"ok": True}


@router.get("/me", response_model=FamilyOut)
def my_family(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return get_family_for(db, user=current)


@router.get("/members", response_model=list[MemberOut])
def members(db: Session = Depends(get_db), current: User = Depends(get_current_user)):
    return list_members(db, user=current)
