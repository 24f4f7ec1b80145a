# kitchen/routers/profile.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kitchen.database import get_db
from kitchen.guards import require_user
from kitchen.models import Profile
from kitchen.schemas import ProfileOut, ProfileUpdate

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileOut)
def get_profile(user: Profile = Depends(require_user)):
    return user


@router.patch("", response_model=ProfileOut)
def update_profile(payload: ProfileUpdate, db: Session = Depends(get_db), user: Profile = Depends(require_user)):
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(user, field, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(user)
    return user
