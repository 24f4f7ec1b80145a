# kitchen/guards.py
import hmac
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from kitchen.config import get_settings
from kitchen.database import get_db
from kitchen.models import Profile
from kitchen.security import COOKIE_NAME, decode_token


# ---- Helpers ----
def _bearer(request: Request) -> Optional[str]:
    auth = request.headers.get("Authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def _is_service_key(token: Optional[str]) -> bool:
    key = get_settings().SERVICE_KEY
    return bool(key and token and hmac.compare_digest(token, key))


def _load_user(request: Request, db: Session) -> Optional[Profile]:
    # bearer header first; the cookie may be stale while the header is fresh
    tokens = [t for t in (_bearer(request), request.cookies.get(COOKIE_NAME)) if t]
    if not tokens or _is_service_key(tokens[0]):
        return None
    error = None
    for token in tokens:
        try:
            return _user_from_token(token, db)
        except HTTPException as exc:
            error = exc
    raise error


def _user_from_token(token: str, db: Session) -> Profile:
    claims = decode_token(token)
    try:
        uid = int(claims.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = db.get(Profile, uid)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


# ---- Public guards ----
def require_user(request: Request, db: Session = Depends(get_db)) -> Profile:
    """Any signed-in profile (401 otherwise)."""
    user = _load_user(request, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


def require_admin(user: Profile = Depends(require_user)) -> Profile:
    """Admin role (403 otherwise)."""
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admins only")
    return user


def require_admin_or_service(request: Request, db: Session = Depends(get_db)) -> Optional[Profile]:
    """
    Dispatcher triggers: an admin session, or the service key as a bearer
    token (cron / scheduled callers). Returns None for the service caller.
    """
    if _is_service_key(_bearer(request)):
        return None
    user = _load_user(request, db)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admins only")
    return user
