# app/routers/health.py
"""
System health check endpoint.
Reports the database, the payment collaborator and the expiry monitor setup.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.config import settings
from app.models.parking_session import ParkingSession
from app.services.session_lifecycle import OPEN_STATUSES
from datetime import datetime

router = APIRouter()


def _payment_service_status() -> str:
    if settings.PAYMENT_MODE != "http" or not settings.PAYMENT_SERVICE_URL:
        return "not_used"
    try:
        resp = requests.get(f"{settings.PAYMENT_SERVICE_URL.rstrip('/')}/health", timeout=3)
    except requests.exceptions.ConnectionError:
        return "unreachable"
    except requests.exceptions.RequestException as e:
        return f"error: {str(e)}"
    return "ok" if resp.status_code == 200 else f"http_{resp.status_code}"


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "unknown",
        "open_sessions": None,
        "payment_mode": settings.PAYMENT_MODE,
        "payment_service": _payment_service_status(),
        "expiry_monitor": "enabled" if settings.EXPIRY_MONITOR_ENABLED else "disabled",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        result["open_sessions"] = db.query(ParkingSession).filter(
            ParkingSession.status.in_(OPEN_STATUSES),
            ParkingSession.scheduled_end_time > datetime.utcnow(),
        ).count()
    except Exception as e:
        result["database"] = f"error: {str(e)}"

    if result["database"] != "ok" or result["payment_service"] not in ("ok", "not_used"):
        result["status"] = "degraded"
    return result
