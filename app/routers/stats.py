"""Admin dashboard — revenue and session counts."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func
from app.database import get_db
from app.models.parking_session import ParkingSession
from app.models.transaction import Transaction
from app.services.session_lifecycle import OPEN_STATUSES, refresh_status
from app.services.session_repository import SessionRepository
from datetime import date, datetime, timedelta
from app.config import settings

router = APIRouter()


def settle_stale_sessions(db: Session, now: datetime) -> int:
    """Apply lazy expiry to overdue sessions and abandoned checkouts before counting."""
    repo = SessionRepository(db)
    stale = repo.list_overdue(now) + repo.list_abandoned_checkouts(
        now - timedelta(minutes=settings.PENDING_TIMEOUT_MINUTES), now
    )
    changed = 0
    for session in stale:
        if refresh_status(session, now):
            repo.save(session)
            changed += 1
    return changed


@router.get("/stats/dashboard", summary="Revenue and session totals")
def get_dashboard_stats(target_date: str = None, db: Session = Depends(get_db)):
    """
    Revenue is the sum of completed transactions, refunds included
    (they are stored as negative amounts).
    """
    now = datetime.utcnow()
    settle_stale_sessions(db, now)
    target = target_date or str(date.today())
    total_revenue = db.query(func.sum(Transaction.amount)).filter(
        Transaction.status == "COMPLETED",
    ).scalar() or 0
    todays_revenue = db.query(func.sum(Transaction.amount)).filter(
        Transaction.status == "COMPLETED",
        func.date(Transaction.created_at) == target,
    ).scalar() or 0
    open_sessions = db.query(func.count(ParkingSession.id)).filter(
        ParkingSession.status.in_(OPEN_STATUSES),
        ParkingSession.scheduled_end_time > now,
    ).scalar()
    total_sessions = db.query(func.count(ParkingSession.id)).scalar()
    return {
        "date": target,
        "total_revenue": total_revenue,
        "todays_revenue": todays_revenue,
        "open_sessions": open_sessions,
        "total_sessions": total_sessions,
    }


@router.get("/stats/sessions-by-status", summary="Session count per status")
def get_sessions_by_status(db: Session = Depends(get_db)):
    settle_stale_sessions(db, datetime.utcnow())
    rows = db.query(ParkingSession.status, func.count(ParkingSession.id)).group_by(ParkingSession.status).all()
    return {status: count for status, count in rows}
