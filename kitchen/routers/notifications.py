# kitchen/routers/notifications.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kitchen.database import get_db
from kitchen.guards import require_admin_or_service
from kitchen.schemas import BroadcastIn
from kitchen.services.dispatcher import EmptyMessageError, broadcast, run_daily_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=CORS_HEADERS)


@router.options("/broadcast", include_in_schema=False)
@router.options("/reminders", include_in_schema=False)
def preflight():
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post("/broadcast")
async def send_broadcast(payload: Optional[BroadcastIn] = None, db: Session = Depends(get_db),
                         _caller=Depends(require_admin_or_service)):
    try:
        report = await broadcast(db, payload.message if payload else "")
    except EmptyMessageError as exc:
        return _error(str(exc), 400)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("broadcast failed")
        return _error(str(exc), 500)

    body = {"message": f"Sent broadcast to {report.sent} users.", **report.as_dict()}
    return JSONResponse(body, headers=CORS_HEADERS)


@router.post("/reminders")
async def send_reminders(db: Session = Depends(get_db), _caller=Depends(require_admin_or_service)):
    try:
        report = await run_daily_reminders(db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("reminder pass failed")
        return _error(str(exc), 500)

    if report.attempted == 0:
        message = "All users have confirmed. No notifications sent."
    else:
        message = f"Sent {report.sent} push reminders."
    return JSONResponse({"message": message, **report.as_dict()}, headers=CORS_HEADERS)
