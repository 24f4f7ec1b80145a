# kitchen/scheduler.py
import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError

from kitchen import database
from kitchen.config import get_settings
from kitchen.services.cutoff import local_today
from kitchen.services.dispatcher import reminder_already_sent, run_daily_reminders

logger = logging.getLogger(__name__)

JOB_ID = "daily-food-reminders"

# Global scheduler instance
scheduler = None


def get_scheduler() -> AsyncIOScheduler:
    """Get the global scheduler instance."""
    global scheduler
    if scheduler is None:
        scheduler = AsyncIOScheduler(timezone=get_settings().tz)
    return scheduler


async def reminder_job() -> None:
    """Scheduled reminder pass; skips a date an earlier scheduled pass already covered."""
    with database.SessionLocal() as db:
        today = local_today()
        try:
            if await asyncio.to_thread(reminder_already_sent, db, today):
                logger.info("reminders for %s already sent, skipping", today)
                return
            report = await run_daily_reminders(db, trigger="scheduled")
        except SQLAlchemyError:
            logger.exception("scheduled reminder pass failed")
            return
        logger.info("scheduled reminders: %s", report.as_dict())


def start_scheduler() -> AsyncIOScheduler:
    """Start the scheduler with the daily reminder job."""
    settings = get_settings()
    sched = get_scheduler()
    at = settings.reminder_time
    sched.add_job(
        reminder_job,
        CronTrigger(hour=at.hour, minute=at.minute, timezone=settings.tz),
        id=JOB_ID,
        replace_existing=True,
        coalesce=True,
        misfire_grace_time=15 * 60,
    )
    if not sched.running:
        sched.start()
    logger.info("Scheduler started: reminders daily at %s %s", at.strftime("%H:%M"), settings.TIMEZONE)
    return sched


def stop_scheduler() -> None:
    """Stop the scheduler."""
    global scheduler
    if scheduler:
        if scheduler.running:
            scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler stopped")
