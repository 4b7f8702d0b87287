# app/services/session_lifecycle.py
"""
Session state machine and wall-clock helpers.

    PENDING ──payment──▶ ACTIVE ──extend──▶ EXTENDED
       │                   │  └──────┬─────────┘
       │                   │   end early / time up
       ▼                   ▼         ▼
   CANCELLED          COMPLETED   EXPIRED

Expiry is evaluated lazily: refresh_status() must run on every read path so
no session is ever returned ACTIVE after its scheduled end. The expiry
monitor runs the same function on a timer.

All functions mutate the session object in memory only; callers persist.
"""

import enum
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from app.config import settings
from app.services.cost_calculator import Number, to_decimal
from app.services.exceptions import InvalidInputError, InvalidStateError
from app.utils.logger import get_logger

logger = get_logger(__name__)


class SessionStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    EXTENDED = "EXTENDED"
    EXPIRED = "EXPIRED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Paid and still running — can be extended, terminated, or expire
RUNNING_STATUSES = {SessionStatus.ACTIVE.value, SessionStatus.EXTENDED.value}
# Not yet finished in any way
OPEN_STATUSES = RUNNING_STATUSES | {SessionStatus.PENDING.value}
TERMINAL_STATUSES = {SessionStatus.EXPIRED.value, SessionStatus.COMPLETED.value,
                     SessionStatus.CANCELLED.value}

SECONDS_PER_HOUR = Decimal(3600)


def hours_to_timedelta(hours: Number) -> timedelta:
    return timedelta(seconds=float(to_decimal(hours) * SECONDS_PER_HOUR))


def hours_between(start: datetime, end: datetime) -> Decimal:
    """Signed elapsed hours from start to end (negative under clock skew)."""
    return Decimal(str((end - start).total_seconds())) / SECONDS_PER_HOUR


def validate_duration(duration_hours: Number, max_duration_hours: Optional[Number] = None) -> Decimal:
    """
    Check a requested parking duration: positive, on the half-hour grid,
    at least one step long and, when given, within the zone maximum.
    """
    hours = to_decimal(duration_hours)
    step = settings.DURATION_STEP_HOURS
    if hours <= 0:
        raise InvalidInputError(f"Duration must be positive, got {hours}")
    if hours % step != 0:
        raise InvalidInputError(f"Duration must be a multiple of {step} hours, got {hours}")
    if max_duration_hours is not None and hours > to_decimal(max_duration_hours):
        raise InvalidInputError(
            f"Maximum duration for this zone is {max_duration_hours} hours",
            max_duration_hours=str(max_duration_hours),
        )
    return hours


def is_past_end(session, now: datetime) -> bool:
    return now >= session.scheduled_end_time


def is_abandoned_checkout(session, now: datetime) -> bool:
    """Unpaid checkout past its scheduled end or older than PENDING_TIMEOUT_MINUTES."""
    if session.status != SessionStatus.PENDING.value:
        return False
    if is_past_end(session, now):
        return True
    return (session.created_at is not None
            and session.created_at <= now - timedelta(minutes=settings.PENDING_TIMEOUT_MINUTES))


def refresh_status(session, now: datetime) -> bool:
    """
    Bring the status up to date with the clock.
    Running sessions past their scheduled end become EXPIRED; abandoned
    checkouts become CANCELLED and never EXPIRED.
    Returns True when the status changed.
    """
    if is_abandoned_checkout(session, now):
        cancel(session, now)
        logger.info(f"[EXPIRY] Session {session.id}: unpaid checkout → CANCELLED")
        return True

    if session.status not in RUNNING_STATUSES or not is_past_end(session, now):
        return False

    previous = session.status
    session.status = SessionStatus.EXPIRED.value
    session.end_time = session.scheduled_end_time
    session.updated_at = now
    logger.info(f"[EXPIRY] Session {session.id}: {previous} → EXPIRED (ended {session.scheduled_end_time})")
    return True


def time_remaining(session, now: datetime) -> timedelta:
    """Time left until scheduled end, never negative."""
    return max(timedelta(0), session.scheduled_end_time - now)


def minutes_remaining(session, now: datetime) -> int:
    return int(time_remaining(session, now).total_seconds() // 60)


def is_expiring(session, now: datetime, warning_minutes: int = 15) -> bool:
    """True while a running session has between 0 and warning_minutes left."""
    if session.status not in RUNNING_STATUSES:
        return False
    remaining = session.scheduled_end_time - now
    return timedelta(0) < remaining <= timedelta(minutes=warning_minutes)


def _require_status(session, allowed: set, action: str):
    if session.status not in allowed:
        raise InvalidStateError(
            f"Cannot {action} a session in status {session.status}",
            session_id=session.id, status=session.status,
        )


def activate(session, now: datetime):
    """PENDING → ACTIVE once the payment is confirmed. The clock starts now."""
    _require_status(session, {SessionStatus.PENDING.value}, "activate")
    session.start_time = now
    session.scheduled_end_time = now + hours_to_timedelta(session.duration_hours)
    session.status = SessionStatus.ACTIVE.value
    session.updated_at = now


def cancel(session, now: datetime):
    """PENDING → CANCELLED (failed payment or abandoned checkout)."""
    _require_status(session, {SessionStatus.PENDING.value}, "cancel")
    session.status = SessionStatus.CANCELLED.value
    session.updated_at = now


def require_running(session, action: str):
    _require_status(session, RUNNING_STATUSES, action)
