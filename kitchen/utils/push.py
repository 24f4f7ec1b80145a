# kitchen/utils/push.py
import json
import logging

from pywebpush import webpush, WebPushException

from kitchen.config import get_settings

logger = logging.getLogger(__name__)

# Push services answer 404/410 once a subscription has expired or was revoked
GONE_STATUSES = (404, 410)
PUSH_TTL_SECONDS = 12 * 60 * 60
PUSH_TIMEOUT_SECONDS = 10


def get_vapid_public_key() -> str:
    return get_settings().VAPID_PUBLIC_KEY or ""


def send_web_push(subscription: dict, payload: dict) -> None:
    """Deliver one signed message. Raises WebPushException on delivery errors."""
    settings = get_settings()
    webpush(
        subscription_info=subscription,
        data=json.dumps(payload),
        vapid_private_key=settings.VAPID_PRIVATE_KEY,
        # pywebpush adds aud/exp to the claims dict, so never share one
        vapid_claims={"sub": settings.VAPID_SUBJECT},
        ttl=PUSH_TTL_SECONDS,
        timeout=PUSH_TIMEOUT_SECONDS,
    )


def classify_push_error(exc: Exception) -> tuple[str, str]:
    """Map a delivery error to ("gone" | "failed", reason)."""
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(exc, WebPushException) and status in GONE_STATUSES:
        return "gone", f"subscription expired ({status})"
    if status is not None:
        return "failed", f"push service returned {status}"
    return "failed", str(exc) or exc.__class__.__name__
