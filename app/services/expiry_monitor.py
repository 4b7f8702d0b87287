# app/services/expiry_monitor.py
"""
Expiry monitor — background sweep over running sessions.

Every EXPIRY_CHECK_INTERVAL_SECONDS:
  - paid sessions past their scheduled end → EXPIRED + session_expired alert
  - unpaid checkouts past their end or the pending timeout → CANCELLED
  - sessions within an EXPIRY_WARNING_MINUTES mark → one expiry_warning alert per mark

Reads already expire sessions lazily (session_service.load_session); this
sweep makes sure nobody has to read a session for it to expire.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from app.config import settings
from app.database import SessionLocal
from app.services.alert_service import create_alert, warning_already_sent
from app.services.session_lifecycle import SessionStatus, minutes_remaining, refresh_status
from app.services.session_repository import SessionRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def expire_overdue_sessions(repo: SessionRepository, now: datetime) -> list:
    """Paid sessions past their end → EXPIRED + session_expired alert."""
    expired = []
    for session in repo.list_overdue(now):
        if not refresh_status(session, now):
            continue
        repo.save(session)
        if session.status == SessionStatus.EXPIRED.value:
            expired.append(session)
            await create_alert(repo.db, "session_expired", session.id, session.zone_id,
                               f"Session {session.id} expired at {session.scheduled_end_time}")
    return expired


def cancel_abandoned_checkouts(repo: SessionRepository, now: datetime) -> list:
    """Unpaid checkouts past their end or the pending timeout → CANCELLED. No alert."""
    cutoff = now - timedelta(minutes=settings.PENDING_TIMEOUT_MINUTES)
    cancelled = []
    for session in repo.list_abandoned_checkouts(cutoff, now):
        if refresh_status(session, now):
            repo.save(session)
            cancelled.append(session)
    return cancelled


async def send_expiry_warnings(repo: SessionRepository, now: datetime) -> int:
    """Raise the tightest not-yet-sent warning mark for each session about to end."""
    marks = sorted(settings.EXPIRY_WARNING_MINUTES)
    if not marks:
        return 0

    sent = 0
    for session in repo.list_running_ending_before(now + timedelta(minutes=marks[-1])):
        if session.scheduled_end_time <= now:
            continue
        left = minutes_remaining(session, now)
        mark = next((m for m in marks if left < m), None)
        if mark is None or warning_already_sent(repo.db, session.id, mark):
            continue
        await create_alert(repo.db, "expiry_warning", session.id, session.zone_id,
                           f"Session {session.id} expires in {left} min", warning_minutes=mark)
        sent += 1
    return sent


async def run_expiry_sweep(now: Optional[datetime] = None):
    """One sweep with a fresh DB session."""
    now = now or datetime.utcnow()
    db = SessionLocal()
    try:
        repo = SessionRepository(db)
        expired = await expire_overdue_sessions(repo, now)
        cancelled = cancel_abandoned_checkouts(repo, now)
        warned = await send_expiry_warnings(repo, now)
        if expired or cancelled or warned:
            logger.info(
                f"[EXPIRY] Sweep: {len(expired)} expired, {len(cancelled)} checkouts cancelled, "
                f"{warned} warnings sent"
            )
    finally:
        db.close()


async def start_expiry_monitor(interval_seconds: Optional[int] = None):
    """Loop forever. Started once at backend startup as an asyncio task."""
    interval = interval_seconds or settings.EXPIRY_CHECK_INTERVAL_SECONDS
    logger.info(f"⏱  Expiry monitor started (every {interval}s)")
    while True:
        try:
            await run_expiry_sweep()
        except Exception as e:
            logger.error(f"[EXPIRY] Sweep failed: {e}", exc_info=True)
        await asyncio.sleep(interval)
