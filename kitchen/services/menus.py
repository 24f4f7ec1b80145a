# kitchen/services/menus.py
from datetime import date
from typing import Dict, Optional, Tuple

from sqlalchemy.orm import Session

from kitchen.models import DailyMenu, MenuTemplate, MEAL_SLOTS

ITEM_FIELDS = tuple(f"item_{slot}" for slot in MEAL_SLOTS)
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def day_of_week(d: date) -> int:
    # Python: Monday=0 ... Sunday=6; templates use Sunday=0
    return (d.weekday() + 1) % 7


def _items(row) -> Dict[str, str]:
    return {f: (getattr(row, f, None) or "") for f in ITEM_FIELDS}


def empty_items() -> Dict[str, str]:
    return {f: "" for f in ITEM_FIELDS}


def get_daily_menu(db: Session, d: date) -> Optional[DailyMenu]:
    return db.query(DailyMenu).filter(DailyMenu.menu_date == d).first()


def get_menu_for_date(db: Session, d: date) -> Tuple[Dict[str, str], str]:
    """
    Menu for the planner: the stored daily row, else the weekday template,
    else blanks. Returns (items, source) with source daily|template|empty.
    """
    row = get_daily_menu(db, d)
    if row:
        return _items(row), "daily"
    tpl = db.query(MenuTemplate).filter(MenuTemplate.day_of_week == day_of_week(d)).first()
    if tpl:
        return _items(tpl), "template"
    return empty_items(), "empty"


def save_daily_menu(db: Session, d: date, items: Dict[str, Optional[str]]) -> DailyMenu:
    row = get_daily_menu(db, d)
    if not row:
        row = DailyMenu(menu_date=d, **empty_items())
        db.add(row)
    for f in ITEM_FIELDS:
        if items.get(f) is not None:
            setattr(row, f, items[f].strip())
    db.commit()
    db.refresh(row)
    return row


def list_templates(db: Session) -> Dict[int, Dict[str, str]]:
    rows = db.query(MenuTemplate).order_by(MenuTemplate.day_of_week.asc()).all()
    return {r.day_of_week: _items(r) for r in rows}


def save_template(db: Session, dow: int, items: Dict[str, Optional[str]]) -> MenuTemplate:
    if not 0 <= dow <= 6:
        raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
    row = db.query(MenuTemplate).filter(MenuTemplate.day_of_week == dow).first()
    if not row:
        row = MenuTemplate(day_of_week=dow)
        db.add(row)
    # a template save writes all four slots, blanks included
    for f in ITEM_FIELDS:
        setattr(row, f, (items.get(f) or "").strip())
    db.commit()
    db.refresh(row)
    return row


def menu_out(row: Optional[DailyMenu]) -> Optional[dict]:
    if row is None:
        return None
    return {"menu_date": row.menu_date.isoformat(), **_items(row)}
