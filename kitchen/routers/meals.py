# kitchen/routers/meals.py
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from kitchen.config import get_settings
from kitchen.database import get_db
from kitchen.guards import require_user
from kitchen.models import Profile
from kitchen.schemas import MealToggle
from kitchen.services.confirmations import confirmation_out, get_confirmation, upsert_confirmation
from kitchen.services.cutoff import is_locked, is_past
from kitchen.services.menus import get_daily_menu, menu_out

router = APIRouter(prefix="/meals", tags=["meals"])


def _cutoff_label() -> str:
    return get_settings().cutoff_time.strftime("%I:%M %p").lstrip("0")


@router.get("/{menu_date}")
def get_meals(menu_date: date, db: Session = Depends(get_db), user: Profile = Depends(require_user)):
    """Menu posted for the date (or null), the user's opt-ins and the lock state."""
    return {
        "date": menu_date.isoformat(),
        "menu": menu_out(get_daily_menu(db, menu_date)),
        "confirmation": confirmation_out(get_confirmation(db, user.id, menu_date)),
        "locked": is_locked(menu_date),
    }


@router.put("/{menu_date}")
def set_meals(menu_date: date, payload: MealToggle,
              db: Session = Depends(get_db), user: Profile = Depends(require_user)):
    if is_past(menu_date):
        raise HTTPException(status_code=400, detail="Past dates are read-only.")
    if is_locked(menu_date):
        raise HTTPException(
            status_code=423,
            detail=f"The {_cutoff_label()} cut-off time has passed. Selections for today are now locked.",
        )
    if get_daily_menu(db, menu_date) is None:
        raise HTTPException(status_code=404, detail="The menu for this date has not been posted yet.")

    row = upsert_confirmation(db, user.id, menu_date, payload.model_dump(exclude_none=True))
    return {"date": menu_date.isoformat(), "confirmation": confirmation_out(row), "locked": False}
