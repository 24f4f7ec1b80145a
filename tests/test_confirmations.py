import warnings
from datetime import timedelta, timezone

from kitchen import database
from kitchen.models import Confirmation, utcnow
from kitchen.services import confirmations
from kitchen.services.confirmations import upsert_confirmation
from kitchen.services.cutoff import local_today


def test_upsert_merges_into_row_inserted_by_another_session(db, make_profile, monkeypatch):
    p = make_profile()
    day = local_today() + timedelta(days=1)
    other = database.SessionLocal()
    real_get = confirmations.get_confirmation
    calls = {"n": 0}

    def racing_get(session, user_id, d):
        calls["n"] += 1
        if calls["n"] == 1:
            # our read misses, then another request inserts first
            other.add(Confirmation(user_id=user_id, menu_date=d, opt_in_lunch=True))
            other.commit()
            return None
        return real_get(session, user_id, d)

    monkeypatch.setattr(confirmations, "get_confirmation", racing_get)
    try:
        row = upsert_confirmation(db, p.id, day, {"opt_in_snack": True, "opt_in_lunch": None})
    finally:
        other.close()

    assert row.opt_in_lunch is True
    assert row.opt_in_snack is True
    assert row.opt_in_breakfast is False
    assert db.query(Confirmation).filter_by(user_id=p.id, menu_date=day).count() == 1


def test_upsert_creates_then_merges(db, make_profile):
    p = make_profile()
    day = local_today() + timedelta(days=2)

    first = upsert_confirmation(db, p.id, day, {"opt_in_dinner": True})
    second = upsert_confirmation(db, p.id, day, {"opt_in_dinner": False, "opt_in_breakfast": True})

    assert first.id == second.id
    assert second.opt_in_dinner is False
    assert second.opt_in_breakfast is True


def test_timestamps_use_aware_utc_clock(db, make_profile):
    assert utcnow().tzinfo is timezone.utc

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        p = make_profile()
        row = upsert_confirmation(db, p.id, local_today() + timedelta(days=1), {"opt_in_lunch": True})

    assert p.created_at is not None
    assert row.updated_at is not None
    assert not [w for w in caught if "utcnow" in str(w.message)]
