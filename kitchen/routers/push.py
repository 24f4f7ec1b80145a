# kitchen/routers/push.py
from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kitchen.database import get_db
from kitchen.guards import require_user
from kitchen.models import Profile, PushSubscription
from kitchen.schemas import SubscriptionIn
from kitchen.utils.push import get_vapid_public_key

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

router = APIRouter(tags=["push"])


@router.get("/push/pubkey")
def pubkey():
    return {"vapid_public_key": get_vapid_public_key()}


def _find_subscription(db: Session, user_id: int):
    return db.query(PushSubscription).filter_by(user_id=user_id).first()


def _apply(sub: PushSubscription, payload: SubscriptionIn) -> None:
    sub.endpoint = payload.endpoint
    sub.p256dh = payload.keys.p256dh
    sub.auth = payload.keys.auth


@router.post("/push/subscribe")
def subscribe(payload: SubscriptionIn, db: Session = Depends(get_db), user: Profile = Depends(require_user)):
    # one subscription per user: re-subscribing overwrites it
    user_id = user.id
    sub = _find_subscription(db, user_id)
    if not sub:
        sub = PushSubscription(user_id=user_id)
        _apply(sub, payload)
        db.add(sub)
        try:
            db.commit()
            return {"ok": True}
        except IntegrityError:
            # another device subscribed first; overwrite its row
            db.rollback()
            sub = _find_subscription(db, user_id)
            if sub is None:
                raise
    _apply(sub, payload)
    db.commit()
    return {"ok": True}


@router.delete("/push/subscribe")
def unsubscribe(db: Session = Depends(get_db), user: Profile = Depends(require_user)):
    n = db.query(PushSubscription).filter_by(user_id=user.id).delete()
    db.commit()
    return {"ok": True, "removed": n}


@router.get("/sw.js", include_in_schema=False)
def service_worker():
    return FileResponse(STATIC_DIR / "sw.js", media_type="application/javascript")
