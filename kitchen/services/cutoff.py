# kitchen/services/cutoff.py
"""
Meal-selection cutoff.

Today's selections become read-only once local time reaches the cutoff
(12:30 by default). Every check reads the clock again; nothing is cached
at import time. Naive datetimes are taken as local wall-clock time.
"""
from datetime import date, datetime

from kitchen.config import Settings, get_settings


def local_now(now: datetime | None = None, settings: Settings | None = None) -> datetime:
    settings = settings or get_settings()
    tz = settings.tz
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def local_today(now: datetime | None = None, settings: Settings | None = None) -> date:
    return local_now(now, settings).date()


def is_locked(menu_date: date, now: datetime | None = None, settings: Settings | None = None) -> bool:
    """True iff menu_date is today and the cutoff has been reached."""
    settings = settings or get_settings()
    current = local_now(now, settings)
    return menu_date == current.date() and current.time() >= settings.cutoff_time


def is_past(menu_date: date, now: datetime | None = None, settings: Settings | None = None) -> bool:
    return menu_date < local_today(now, settings)
