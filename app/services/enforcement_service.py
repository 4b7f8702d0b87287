# app/services/enforcement_service.py
"""
Enforcement officer lookups.
  - validate_session: does this plate have paid time in this zone right now?
  - list_expired_sessions: who is over time, and is the grace period used up?
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from app.config import settings
from app.models.parking_session import ParkingSession
from app.models.vehicle import Vehicle
from app.services.session_lifecycle import (
    OPEN_STATUSES, RUNNING_STATUSES, SessionStatus, minutes_remaining, refresh_status,
)
from app.services.session_repository import SessionRepository
from app.services.vehicle_service import normalize_plate
from app.services.zone_service import get_zone_by_number
from app.utils.logger import get_logger

logger = get_logger(__name__)


def validate_session(db: Session, license_plate: str, state: str, zone_number: str,
                     now: Optional[datetime] = None) -> dict:
    now = now or datetime.utcnow()
    zone = get_zone_by_number(db, zone_number)
    if not zone:
        return {"valid_session": False, "message": "Zone not found"}

    session = (
        db.query(ParkingSession)
        .join(Vehicle, Vehicle.id == ParkingSession.vehicle_id)
        .filter(
            Vehicle.license_plate == normalize_plate(license_plate),
            Vehicle.state == state.upper(),
            ParkingSession.zone_id == zone.id,
            ParkingSession.status.in_(OPEN_STATUSES),
        )
        .order_by(ParkingSession.start_time.desc())
        .first()
    )
    if not session:
        return {"valid_session": False, "message": "No active parking session found"}

    if refresh_status(session, now):
        SessionRepository(db).save(session)

    is_valid = session.status in RUNNING_STATUSES
    logger.info(f"[ENFORCEMENT] {license_plate} ({state}) zone {zone_number}: valid={is_valid}")
    return {
        "valid_session": is_valid,
        "session_id": session.id,
        "status": session.status,
        "start_time": session.start_time,
        "scheduled_end_time": session.scheduled_end_time,
        "time_remaining_minutes": minutes_remaining(session, now),
        "paid_amount": session.total_cost,
    }


def list_expired_sessions(db: Session, zone_id: Optional[int] = None, limit: int = 50,
                          now: Optional[datetime] = None) -> list[dict]:
    """Expired sessions, oldest first, with grace-period eligibility for a citation."""
    now = now or datetime.utcnow()
    repo = SessionRepository(db)
    for session in repo.list_overdue(now):
        if refresh_status(session, now):
            repo.save(session)

    q = db.query(ParkingSession).filter(ParkingSession.status == SessionStatus.EXPIRED.value)
    if zone_id:
        q = q.filter(ParkingSession.zone_id == zone_id)
    sessions = q.order_by(ParkingSession.scheduled_end_time.asc()).limit(min(limit, 100)).all()

    results = []
    for session in sessions:
        minutes_expired = max(0, int((now - session.scheduled_end_time).total_seconds() // 60))
        results.append({
            "session_id": session.id,
            "vehicle_id": session.vehicle_id,
            "zone_id": session.zone_id,
            "scheduled_end_time": session.scheduled_end_time,
            "minutes_expired": minutes_expired,
            "violation_eligible": minutes_expired >= settings.ENFORCEMENT_GRACE_MINUTES,
        })
    return results
