import logging
import os

from sqlalchemy import func
from sqlalchemy.orm import Session

from kitchen import database
from kitchen.config import get_settings
from kitchen.models import MenuTemplate, Profile
from kitchen.security import get_password_hash

logger = logging.getLogger("init_db")


def upsert_admin(db: Session, email: str | None, password: str | None,
                 name: str = "Admin", force_reset: bool = False) -> Profile | None:
    if not (email and password):
        logger.info("ADMIN_EMAIL/ADMIN_PASS not set; skipping admin seed")
        return None

    email = email.strip().lower()
    u = db.query(Profile).filter(func.lower(Profile.email) == email).first()
    if u:
        if force_reset:
            u.full_name = name
            u.password_hash = get_password_hash(password)
            u.role = "admin"
            db.commit()
            logger.info("admin updated: %s", email)
        else:
            logger.info("admin already exists (unchanged): %s", email)
        return u

    u = Profile(email=email, full_name=name, password_hash=get_password_hash(password),
                role="admin", work_location="Main Office")
    db.add(u)
    db.commit()
    logger.info("admin created: %s", email)
    return u


def seed_templates(db: Session) -> int:
    """Blank template rows for the days that have none yet."""
    have = {dow for (dow,) in db.query(MenuTemplate.day_of_week).all()}
    missing = [dow for dow in range(7) if dow not in have]
    for dow in missing:
        db.add(MenuTemplate(day_of_week=dow))
    db.commit()
    return len(missing)


def main():
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    if settings.DATABASE_URL:
        database.configure_engine(settings.DATABASE_URL)
    database.init_db()

    force_reset = os.getenv("ADMIN_FORCE_RESET", "0").lower() in ("1", "true", "yes")
    with database.SessionLocal() as db:
        upsert_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASS, settings.ADMIN_NAME or "Admin", force_reset)
        n = seed_templates(db)
        logger.info("seeded %s template rows", n)


if __name__ == "__main__":
    main()
