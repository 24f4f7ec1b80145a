# kitchen/security.py
import os
import hmac
import base64
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import jwt
from fastapi import HTTPException, status
from fastapi.responses import Response

from kitchen.config import get_settings

logger = logging.getLogger(__name__)

# ================== Config ==================
JWT_ALG = "HS256"
ACCESS_TOKEN_TTL_MIN = int(os.getenv("ACCESS_TOKEN_TTL_MIN", str(60 * 24 * 7)))

COOKIE_NAME = os.getenv("COOKIE_NAME", "access_token")
COOKIE_PATH = "/"
COOKIE_HTTPONLY = True
COOKIE_SAMESITE = "lax"

# ================== Password Hash (PBKDF2) ==================
# Format: pbkdf2$<iterations>$<salt_b64>$<hash_b64>
PBKDF2_ITER = int(os.getenv("PBKDF2_ITER", "260000"))
PBKDF2_ALG = "sha256"
PBKDF2_SALT_BYTES = 16


def _b64(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _unb64(s: str) -> bytes:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + pad)


def get_password_hash(password: str, iterations: Optional[int] = None) -> str:
    iters = iterations or PBKDF2_ITER
    salt = os.urandom(PBKDF2_SALT_BYTES)
    dk = hashlib.pbkdf2_hmac(PBKDF2_ALG, password.encode("utf-8"), salt, iters)
    return "pbkdf2${}${}${}".format(iters, _b64(salt), _b64(dk))


def verify_password(password: str, stored: str) -> bool:
    if not stored:
        return False
    parts = stored.split("$")
    if len(parts) != 4 or parts[0] != "pbkdf2":
        return False
    _, iters_s, salt_b64, dk_b64 = parts
    try:
        iters = int(iters_s)
        salt = _unb64(salt_b64)
        expected = _unb64(dk_b64)
    except ValueError:
        return False
    test = hashlib.pbkdf2_hmac(PBKDF2_ALG, password.encode("utf-8"), salt, iters)
    return hmac.compare_digest(expected, test)


# ================== JWT helpers ==================
def create_access_token(data: Dict[str, Any], expires_minutes: Optional[int] = ACCESS_TOKEN_TTL_MIN) -> str:
    to_encode = data.copy()
    if expires_minutes is not None:
        expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
        to_encode.update({"exp": expire})
    return jwt.encode(to_encode, get_settings().JWT_SECRET, algorithm=JWT_ALG)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, get_settings().JWT_SECRET, algorithms=[JWT_ALG])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.debug("invalid token: %r", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


# ================== Cookie helpers ==================
def issue_access_cookie_for_user(response: Response, user_id: int, email: str, role: str) -> str:
    """Sign a JWT for the user and set it on the SAME response."""
    token = create_access_token({"sub": str(user_id), "email": email, "role": role})
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        path=COOKIE_PATH,
        secure=get_settings().COOKIE_SECURE,
        httponly=COOKIE_HTTPONLY,
        samesite=COOKIE_SAMESITE,
        max_age=ACCESS_TOKEN_TTL_MIN * 60,
    )
    return token


def clear_access_cookie(response: Response) -> None:
    response.delete_cookie(
        key=COOKIE_NAME,
        path=COOKIE_PATH,
        samesite=COOKIE_SAMESITE,
        secure=get_settings().COOKIE_SECURE,
        httponly=COOKIE_HTTPONLY,
    )
