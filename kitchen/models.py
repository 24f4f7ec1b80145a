# kitchen/models.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from kitchen.database import Base

WORK_LOCATIONS = ("Main Office", "WFH", "Other")
ROLES = ("admin", "employee")
MEAL_SLOTS = ("breakfast", "lunch", "snack", "dinner")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------
# Profiles
# ---------------------------
class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=False, default="")
    employee_id = Column(String(64), nullable=True)
    mobile_number = Column(String(32), nullable=True)
    password_hash = Column(String(255), nullable=False)
    work_location = Column(String(20), nullable=False, default="Main Office", index=True)
    role = Column(String(20), nullable=False, default="employee")  # "admin" | "employee"

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    push_subscription = relationship(
        "PushSubscription",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ---------------------------
# Web Push (one per user, latest wins)
# ---------------------------
class PushSubscription(Base):
    __tablename__ = "push_subscriptions"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), unique=True, nullable=False)
    endpoint = Column(String, nullable=False)
    p256dh = Column(String, nullable=False)
    auth = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    user = relationship("Profile", back_populates="push_subscription")

    def as_webpush(self) -> dict:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}


# ---------------------------
# Menus
# ---------------------------
class DailyMenu(Base):
    __tablename__ = "daily_menu"

    id = Column(Integer, primary_key=True)
    menu_date = Column(Date, unique=True, index=True, nullable=False)
    item_breakfast = Column(String(255), nullable=False, default="")
    item_lunch = Column(String(255), nullable=False, default="")
    item_snack = Column(String(255), nullable=False, default="")
    item_dinner = Column(String(255), nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class MenuTemplate(Base):
    __tablename__ = "menu_templates"

    id = Column(Integer, primary_key=True)
    day_of_week = Column(Integer, unique=True, nullable=False)  # 0 = Sunday
    item_breakfast = Column(String(255), nullable=False, default="")
    item_lunch = Column(String(255), nullable=False, default="")
    item_snack = Column(String(255), nullable=False, default="")
    item_dinner = Column(String(255), nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_template_dow"),)


# ---------------------------
# Meal confirmations
# ---------------------------
class Confirmation(Base):
    __tablename__ = "confirmations"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False)
    menu_date = Column(Date, index=True, nullable=False)
    opt_in_breakfast = Column(Boolean, nullable=False, default=False)
    opt_in_lunch = Column(Boolean, nullable=False, default=False)
    opt_in_snack = Column(Boolean, nullable=False, default=False)
    opt_in_dinner = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (UniqueConstraint("user_id", "menu_date", name="uq_confirmation_user_date"),)


# ---------------------------
# Dispatcher runs (reminders / broadcasts)
# ---------------------------
class DispatchLog(Base):
    __tablename__ = "dispatch_logs"

    id = Column(Integer, primary_key=True)
    kind = Column(String(20), nullable=False)  # "reminder" | "broadcast"
    trigger = Column(String(20), nullable=False, default="manual")  # "manual" | "scheduled"
    run_date = Column(Date, index=True, nullable=False)
    attempted = Column(Integer, nullable=False, default=0)
    sent = Column(Integer, nullable=False, default=0)
    failed = Column(Integer, nullable=False, default=0)
    pruned = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
