# app/services/alert_service.py
"""
Shared alert creation service.
Used by the session service (failed refunds) and the expiry monitor
(expiry warnings, expired sessions).
"""

from datetime import datetime
from sqlalchemy.orm import Session
from app.models.alert import Alert
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def create_alert(db, alert_type, session_id, zone_id, description, warning_minutes=None):
    """Create and persist an alert record. Always commits immediately."""
    db.add(Alert(alert_type=alert_type, session_id=session_id, zone_id=zone_id,
                 warning_minutes=warning_minutes, description=description,
                 is_resolved=0, triggered_at=datetime.utcnow()))
    db.commit()
    logger.warning(f"[ALERT][{alert_type.upper()}] {description}")


def warning_already_sent(db: Session, session_id: int, warning_minutes: int) -> bool:
    """True if this session already got the expiry warning for this mark."""
    return db.query(Alert).filter(
        Alert.session_id == session_id,
        Alert.alert_type == "expiry_warning",
        Alert.warning_minutes == warning_minutes,
    ).first() is not None


def resolve_alert(db: Session, alert_id: int):
    alert = db.query(Alert).filter(Alert.id == alert_id).first()
    if not alert:
        return None
    alert.is_resolved = 1
    alert.resolved_at = datetime.utcnow()
    db.commit()
    return alert
