# kitchen/services/confirmations.py
from datetime import date
from typing import Dict, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kitchen.models import Confirmation, Profile, MEAL_SLOTS

FLAG_FIELDS = tuple(f"opt_in_{slot}" for slot in MEAL_SLOTS)


def get_confirmation(db: Session, user_id: int, d: date) -> Optional[Confirmation]:
    return (
        db.query(Confirmation)
        .filter(Confirmation.user_id == user_id, Confirmation.menu_date == d)
        .first()
    )


def _merge(row: Confirmation, changes: Dict[str, Optional[bool]]) -> None:
    for f in FLAG_FIELDS:
        if changes.get(f) is not None:
            setattr(row, f, bool(changes[f]))


def upsert_confirmation(db: Session, user_id: int, d: date, changes: Dict[str, Optional[bool]]) -> Confirmation:
    """Merge the given flags over the stored row (or an all-False one).

    Two first toggles for the same date can race on the insert. The loser
    hits uq_confirmation_user_date, rolls back and merges into the winner's row.
    """
    row = get_confirmation(db, user_id, d)
    if not row:
        row = Confirmation(user_id=user_id, menu_date=d, **{f: False for f in FLAG_FIELDS})
        _merge(row, changes)
        db.add(row)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            row = get_confirmation(db, user_id, d)
            if row is None:
                raise
        else:
            db.refresh(row)
            return row
    _merge(row, changes)
    db.commit()
    db.refresh(row)
    return row


def confirmation_out(row: Optional[Confirmation]) -> Optional[dict]:
    if row is None:
        return None
    out = {"menu_date": row.menu_date.isoformat(), "user_id": row.user_id}
    out.update({f: bool(getattr(row, f)) for f in FLAG_FIELDS})
    return out


def daily_counts(db: Session, d: date, location: str = "Main Office") -> dict:
    """Aggregate opt-ins for the admin dashboard."""
    sums = (
        db.query(
            func.count(Confirmation.id),
            *[func.sum(case((getattr(Confirmation, f), 1), else_=0)) for f in FLAG_FIELDS],
        )
        .filter(Confirmation.menu_date == d)
        .one()
    )
    responded = sums[0] or 0
    meals = {slot: int(v or 0) for slot, v in zip(MEAL_SLOTS, sums[1:])}

    pending = (
        db.query(func.count(Profile.id))
        .outerjoin(
            Confirmation,
            (Confirmation.user_id == Profile.id) & (Confirmation.menu_date == d),
        )
        .filter(Profile.work_location == location, Profile.role == "employee", Confirmation.id.is_(None))
        .scalar()
    ) or 0

    return {"date": d.isoformat(), "responded": responded, "pending": pending, "meals": meals}
