# app/routers/alerts.py
"""
Alerts raised by the expiry monitor and the refund path.
Admins see everything; a driver sees the notifications of their own session.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.alert import Alert
from app.schemas.alert import AlertOut
from app.services import session_service
from app.services.alert_service import resolve_alert
from app.services.exceptions import NotFoundError
from app.services.session_repository import SessionRepository
from app.utils.identity import get_user_id
from typing import Optional

router = APIRouter()

# Alert types a driver is shown for their own session
DRIVER_ALERT_TYPES = ("expiry_warning", "session_expired")


@router.get("/alerts", response_model=list[AlertOut], summary="All alerts — filterable")
def get_all_alerts(
    alert_type: Optional[str] = None,
    zone_id: Optional[int] = None,
    is_resolved: Optional[int] = None,
    limit: int = 50,
    db: Session = Depends(get_db)
):
    q = db.query(Alert)
    if alert_type:
        q = q.filter(Alert.alert_type == alert_type)
    if zone_id is not None:
        q = q.filter(Alert.zone_id == zone_id)
    if is_resolved is not None:
        q = q.filter(Alert.is_resolved == is_resolved)
    return q.order_by(Alert.triggered_at.desc()).limit(min(limit, 200)).all()


@router.get("/sessions/{session_id}/notifications", response_model=list[AlertOut],
            summary="Expiry notifications for one of my sessions")
def session_notifications(session_id: int, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    session_service.load_session(SessionRepository(db), session_id, user_id)
    return (
        db.query(Alert)
        .filter(Alert.session_id == session_id, Alert.alert_type.in_(DRIVER_ALERT_TYPES))
        .order_by(Alert.triggered_at.asc())
        .all()
    )


@router.put("/alerts/{alert_id}/resolve", response_model=AlertOut, summary="Mark an alert resolved")
def resolve(alert_id: int, db: Session = Depends(get_db)):
    alert = resolve_alert(db, alert_id)
    if not alert:
        raise NotFoundError(f"Alert {alert_id} not found")
    return alert
