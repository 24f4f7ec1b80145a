"""One-shot reminder pass for an external cron (exit code 1 on store errors)."""
import asyncio
import json
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from kitchen import database
from kitchen.config import ConfigError, validate_settings
from kitchen.services.dispatcher import run_daily_reminders

logger = logging.getLogger("send_reminders")


async def _run() -> dict:
    with database.SessionLocal() as db:
        report = await run_daily_reminders(db)
    return report.as_dict()


def main() -> int:
    try:
        settings = validate_settings()
    except ConfigError as exc:
        logging.basicConfig(level="ERROR")
        logger.error("%s", exc)
        return 2
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    database.configure_engine(settings.DATABASE_URL)
    try:
        out = asyncio.run(_run())
    except SQLAlchemyError:
        logger.exception("reminder pass failed")
        return 1
    print(json.dumps(out))
    return 0


if __name__ == "__main__":
    sys.exit(main())
