# kitchen/services/dispatcher.py
"""
Reminder and broadcast dispatcher.

A pass reads the tables, computes who to notify and fans the pushes out
concurrently. Every send settles into a PushOutcome; one bad subscription
never hides whether the others were delivered. Subscriptions the push
service reports as gone are pruned.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional, Set

from pywebpush import WebPushException
from sqlalchemy import or_
from sqlalchemy.orm import Session

from kitchen.config import get_settings
from kitchen.models import Confirmation, DispatchLog, Profile, PushSubscription
from kitchen.services.cutoff import local_today
from kitchen.utils.push import classify_push_error, send_web_push

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Karmic Kitchen Reminder"
REMINDER_BODY = "Are you working from home today? If not, please register for food before 12:30 PM."
BROADCAST_TITLE = "Karmic Kitchen Alert"


class EmptyMessageError(ValueError):
    pass


@dataclass(frozen=True)
class Recipient:
    user_id: int
    subscription: dict


@dataclass
class PushOutcome:
    user_id: int
    status: str  # "sent" | "gone" | "failed"
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "sent"


@dataclass
class DispatchReport:
    kind: str
    run_date: date
    outcomes: List[PushOutcome] = field(default_factory=list)
    pruned: int = 0

    @property
    def attempted(self) -> int:
        return len(self.outcomes)

    @property
    def sent(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return self.attempted - self.sent

    def as_dict(self) -> dict:
        return {
            "kind": self.kind,
            "date": self.run_date.isoformat(),
            "attempted": self.attempted,
            "sent": self.sent,
            "failed": self.failed,
            "pruned": self.pruned,
            "failures": [
                {"user_id": o.user_id, "status": o.status, "reason": o.reason}
                for o in self.outcomes if not o.ok
            ],
        }


# ---------------- Queries ----------------
def load_location_recipients(db: Session, location: str) -> List[Recipient]:
    """Profiles at `location` that have a push subscription (inner join)."""
    rows = (
        db.query(Profile.id, PushSubscription)
        .join(PushSubscription, PushSubscription.user_id == Profile.id)
        .filter(Profile.work_location == location)
        .all()
    )
    return [Recipient(user_id=uid, subscription=sub.as_webpush()) for uid, sub in rows]


def load_all_recipients(db: Session) -> List[Recipient]:
    subs = db.query(PushSubscription).all()
    return [Recipient(user_id=s.user_id, subscription=s.as_webpush()) for s in subs]


def load_confirmed_ids(db: Session, day: date) -> Set[int]:
    rows = db.query(Confirmation.user_id).filter(Confirmation.menu_date == day).all()
    return {uid for (uid,) in rows}


def compute_notify_set(recipients: Iterable[Recipient], confirmed_ids: Set[int]) -> List[Recipient]:
    """Subscribed recipients minus everyone who already has a confirmation row."""
    seen = set()
    out = []
    for r in recipients:
        if r.user_id in confirmed_ids or r.user_id in seen:
            continue
        seen.add(r.user_id)
        out.append(r)
    return out


# ---------------- Delivery ----------------
async def deliver(recipients: List[Recipient], title: str, body: str,
                  concurrency: Optional[int] = None) -> List[PushOutcome]:
    payload = {"title": title, "body": body}
    sem = asyncio.Semaphore(max(1, concurrency or get_settings().PUSH_CONCURRENCY))

    async def _one(r: Recipient) -> PushOutcome:
        async with sem:
            try:
                # pywebpush is blocking (requests)
                await asyncio.to_thread(send_web_push, r.subscription, payload)
            except WebPushException as exc:
                status, reason = classify_push_error(exc)
                logger.warning("push to user_id=%s %s: %s", r.user_id, status, reason)
                return PushOutcome(r.user_id, status, reason)
            except Exception as exc:  # connection errors from requests
                logger.warning("push to user_id=%s failed: %r", r.user_id, exc)
                return PushOutcome(r.user_id, "failed", repr(exc))
            return PushOutcome(r.user_id, "sent")

    return list(await asyncio.gather(*(_one(r) for r in recipients)))


def prune_gone(db: Session, outcomes: List[PushOutcome]) -> int:
    gone = [o.user_id for o in outcomes if o.status == "gone"]
    if not gone:
        return 0
    n = (
        db.query(PushSubscription)
        .filter(PushSubscription.user_id.in_(gone))
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("pruned %s expired push subscriptions", n)
    return n


def _record(db: Session, report: DispatchReport, trigger: str = "manual") -> None:
    db.add(DispatchLog(
        kind=report.kind,
        trigger=trigger,
        run_date=report.run_date,
        attempted=report.attempted,
        sent=report.sent,
        failed=report.failed,
        pruned=report.pruned,
    ))
    db.commit()


def reminder_already_sent(db: Session, day: date) -> bool:
    """A scheduled reminder pass for `day` reached someone, or had nobody to remind.

    Manual passes and passes where every send failed do not count.
    """
    return (
        db.query(DispatchLog.id)
        .filter(
            DispatchLog.kind == "reminder",
            DispatchLog.trigger == "scheduled",
            DispatchLog.run_date == day,
            or_(DispatchLog.sent > 0, DispatchLog.attempted == 0),
        )
        .first()
    ) is not None


# ---------------- Passes ----------------
def _reminder_inputs(db: Session, location: str, day: date):
    return load_location_recipients(db, location), load_confirmed_ids(db, day)


async def _settle(db: Session, report: DispatchReport, recipients: List[Recipient],
                  title: str, body: str, trigger: str) -> None:
    # store calls stay off the event loop
    if recipients:
        report.outcomes = await deliver(recipients, title, body)
        report.pruned = await asyncio.to_thread(prune_gone, db, report.outcomes)
    await asyncio.to_thread(_record, db, report, trigger)


async def run_daily_reminders(db: Session, now: Optional[datetime] = None,
                              trigger: str = "manual") -> DispatchReport:
    settings = get_settings()
    today = local_today(now, settings)

    recipients, confirmed = await asyncio.to_thread(
        _reminder_inputs, db, settings.REMINDER_LOCATION, today
    )
    notify = compute_notify_set(recipients, confirmed)

    report = DispatchReport(kind="reminder", run_date=today)
    await _settle(db, report, notify, REMINDER_TITLE, REMINDER_BODY, trigger)

    logger.info(
        "%s reminder pass %s: %s subscribed at %s, %s confirmed, sent %s/%s",
        trigger, today, len(recipients), settings.REMINDER_LOCATION, len(confirmed),
        report.sent, report.attempted,
    )
    return report


async def broadcast(db: Session, message: str, now: Optional[datetime] = None) -> DispatchReport:
    text = (message or "").strip()
    if not text:
        raise EmptyMessageError("Message content is required.")

    recipients = await asyncio.to_thread(load_all_recipients, db)
    report = DispatchReport(kind="broadcast", run_date=local_today(now))
    await _settle(db, report, recipients, BROADCAST_TITLE, text, "manual")

    logger.info("broadcast: sent %s/%s", report.sent, report.attempted)
    return report
