# kitchen/routers/admin.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from kitchen.config import get_settings
from kitchen.database import get_db
from kitchen.guards import require_admin
from kitchen.models import Profile
from kitchen.schemas import AdminProfileUpdate, MenuItems, ProfileOut
from kitchen.services.confirmations import daily_counts
from kitchen.services.cutoff import local_today
from kitchen.services.menus import (
    DAY_NAMES,
    empty_items,
    get_menu_for_date,
    list_templates,
    menu_out,
    save_daily_menu,
    save_template,
)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ---------------- Dashboard ----------------
@router.get("/dashboard")
def dashboard(day: Optional[date] = Query(default=None, alias="date"), db: Session = Depends(get_db)):
    d = day or local_today()
    return daily_counts(db, d, location=get_settings().REMINDER_LOCATION)


# ---------------- Daily menu planner ----------------
@router.get("/menu/{menu_date}")
def get_planner_menu(menu_date: date, db: Session = Depends(get_db)):
    items, source = get_menu_for_date(db, menu_date)
    return {"menu_date": menu_date.isoformat(), "source": source, **items}


@router.put("/menu/{menu_date}")
def put_planner_menu(menu_date: date, payload: MenuItems, db: Session = Depends(get_db)):
    row = save_daily_menu(db, menu_date, payload.model_dump())
    return menu_out(row)


# ---------------- Weekly templates ----------------
@router.get("/templates")
def get_templates(db: Session = Depends(get_db)):
    stored = list_templates(db)
    return [
        {"day_of_week": dow, "day": DAY_NAMES[dow], "saved": dow in stored,
         **stored.get(dow, empty_items())}
        for dow in range(7)
    ]


@router.put("/templates/{dow}")
def put_template(payload: MenuItems, dow: int = Path(..., ge=0, le=6), db: Session = Depends(get_db)):
    row = save_template(db, dow, payload.model_dump())
    return {
        "day_of_week": row.day_of_week,
        "day": DAY_NAMES[row.day_of_week],
        "item_breakfast": row.item_breakfast,
        "item_lunch": row.item_lunch,
        "item_snack": row.item_snack,
        "item_dinner": row.item_dinner,
    }


# ---------------- Users ----------------
@router.get("/users", response_model=list[ProfileOut])
def list_users(db: Session = Depends(get_db)):
    return db.query(Profile).order_by(Profile.full_name.asc()).all()


@router.patch("/users/{user_id}", response_model=ProfileOut)
def update_user(user_id: int, payload: AdminProfileUpdate, db: Session = Depends(get_db)):
    user = db.get(Profile, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    for field, value in payload.model_dump(exclude_none=True).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user
