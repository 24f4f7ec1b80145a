# kitchen/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from kitchen.config import get_settings
from kitchen.database import get_db
from kitchen.guards import require_user
from kitchen.models import Profile
from kitchen.schemas import LoginIn, ProfileOut, RegisterIn
from kitchen.security import (
    clear_access_cookie,
    get_password_hash,
    issue_access_cookie_for_user,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------- Helpers ----------------
def _norm_email(e: str) -> str:
    return (e or "").strip().lower()


def _check_domain(email: str) -> None:
    domain = (get_settings().ALLOWED_EMAIL_DOMAIN or "").strip().lower().lstrip("@")
    if domain and not email.endswith("@" + domain):
        raise HTTPException(
            status_code=400,
            detail=f"Registration is only allowed with a @{domain} email address.",
        )


# ---------------- JSON APIs ----------------
@router.post("/register", response_model=ProfileOut, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    email = _norm_email(payload.email)
    _check_domain(email)
    if not payload.password:
        raise HTTPException(status_code=400, detail="Password required")

    exists = db.query(Profile).filter(func.lower(Profile.email) == email).first()
    if exists:
        raise HTTPException(status_code=409, detail="Email already registered")

    user = Profile(
        email=email,
        full_name=payload.full_name.strip(),
        employee_id=payload.employee_id.strip(),
        mobile_number=payload.mobile_number.strip(),
        password_hash=get_password_hash(payload.password),
        work_location="Main Office",
        role="employee",
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("registered profile id=%s", user.id)
    return user


@router.post("/login")
def login(payload: LoginIn, response: Response, db: Session = Depends(get_db)):
    email = _norm_email(payload.email)
    user = db.query(Profile).filter(func.lower(Profile.email) == email).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = issue_access_cookie_for_user(response, user.id, user.email, user.role)
    response.headers["Cache-Control"] = "no-store"
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": ProfileOut.model_validate(user).model_dump(),
    }


@router.post("/logout")
def logout(response: Response):
    clear_access_cookie(response)
    response.headers["Cache-Control"] = "no-store"
    return {"ok": True}


@router.get("/me", response_model=ProfileOut)
def me(user: Profile = Depends(require_user)):
    return user
