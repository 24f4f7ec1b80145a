import asyncio

from scripts.init_db import seed_templates, upsert_admin

from kitchen import scheduler
from kitchen.models import DispatchLog, MenuTemplate, Profile
from kitchen.security import verify_password
from kitchen.services.cutoff import local_today
from kitchen.services.dispatcher import reminder_already_sent, run_daily_reminders


def test_reminder_job_runs_once_per_day(db, make_profile, fake_push):
    make_profile()
    db.commit()

    asyncio.run(scheduler.reminder_job())
    asyncio.run(scheduler.reminder_job())

    assert len(fake_push.sent) == 1
    logs = db.query(DispatchLog).filter_by(kind="reminder", run_date=local_today()).all()
    assert len(logs) == 1


def test_reminder_job_retries_after_every_send_failed(db, make_profile, fake_push):
    p = make_profile()
    db.commit()
    fake_push.broken.add(f"https://push.example/{p.id}")

    asyncio.run(scheduler.reminder_job())
    assert fake_push.sent == []

    fake_push.broken.clear()
    asyncio.run(scheduler.reminder_job())
    assert len(fake_push.sent) == 1


def test_manual_pass_does_not_suppress_reminder_job(db, make_profile, fake_push):
    make_profile()
    db.commit()

    asyncio.run(run_daily_reminders(db))
    asyncio.run(scheduler.reminder_job())

    assert len(fake_push.sent) == 2
    assert reminder_already_sent(db, local_today())


def test_start_and_stop_scheduler():
    async def _cycle():
        sched = scheduler.start_scheduler()
        job = sched.get_job(scheduler.JOB_ID)
        assert job is not None
        assert str(job.trigger.timezone) == "Asia/Kolkata"
        scheduler.stop_scheduler()

    asyncio.run(_cycle())
    assert scheduler.scheduler is None


def test_init_db_seeds(db):
    admin = upsert_admin(db, "Chef@karmic.co.in", "pw", "Chef")
    assert admin.role == "admin"
    assert upsert_admin(db, "chef@karmic.co.in", "other", "Chef").id == admin.id
    assert verify_password("pw", db.get(Profile, admin.id).password_hash)

    upsert_admin(db, "chef@karmic.co.in", "other", "Chef", force_reset=True)
    assert verify_password("other", db.get(Profile, admin.id).password_hash)

    assert upsert_admin(db, None, None) is None

    assert seed_templates(db) == 7
    assert seed_templates(db) == 0
    assert db.query(MenuTemplate).count() == 7
