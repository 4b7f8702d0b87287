# app/services/session_service.py
"""
Parking session workflows: checkout, payment confirmation, reads, extension
and early termination.

Each workflow makes its decision with the pure helpers first
(cost_calculator, extension_service, refund_service, session_lifecycle),
then performs the I/O: payment collaborator call, transaction row, save.
Every read goes through refresh_status() so expired sessions are never
reported as running.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from app.models.parking_session import ParkingSession
from app.models.transaction import Transaction
from app.services import extension_service, refund_service, session_lifecycle
from app.services.alert_service import create_alert
from app.services.cost_calculator import CostBreakdown, calculate_parking_cost, format_currency
from app.services.exceptions import (
    InvalidInputError, InvalidStateError, PaymentFailedError, SessionNotFoundError, ZoneRestrictedError,
)
from app.services.payment_client import PaymentProcessor
from app.services.restriction_service import RestrictionWarning, check_zone_restrictions
from app.services.session_lifecycle import SessionStatus
from app.services.session_repository import SessionRepository
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CheckoutResult:
    session: ParkingSession
    cost: CostBreakdown
    warnings: list[RestrictionWarning] = field(default_factory=list)


@dataclass
class ExtensionResult:
    session: ParkingSession
    plan: extension_service.ExtensionPlan
    transaction: Transaction


@dataclass
class TerminationResult:
    session: ParkingSession
    summary: refund_service.TerminationSummary
    refund_transactions: list[Transaction] = field(default_factory=list)

    @property
    def refund_status(self) -> Optional[str]:
        """FAILED if any part of the refund failed, None when nothing was refunded."""
        if not self.refund_transactions:
            return None
        if any(tx.status == "FAILED" for tx in self.refund_transactions):
            return "FAILED"
        return "COMPLETED"


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.utcnow()


def quote_cost(zone, duration_hours) -> CostBreakdown:
    """Price a prospective session without creating it."""
    if not zone.is_active:
        raise InvalidInputError("Invalid or inactive parking zone")
    hours = session_lifecycle.validate_duration(duration_hours, zone.max_duration_hours)
    return calculate_parking_cost(zone.rate_per_hour, hours)


def load_session(repo: SessionRepository, session_id: int, user_id: Optional[str] = None,
                 now: Optional[datetime] = None) -> ParkingSession:
    """Load a session, expiring it first if its time is up. Ownership checked when user_id is given."""
    session = repo.load(session_id)
    if not session or (user_id is not None and session.user_id != user_id):
        raise SessionNotFoundError(f"Session {session_id} not found")
    if session_lifecycle.refresh_status(session, _now(now)):
        repo.save(session)
    return session


def list_sessions(repo: SessionRepository, user_id: str, status: Optional[str] = None,
                  zone_id: Optional[int] = None, limit: int = 50, page: int = 1,
                  now: Optional[datetime] = None) -> list[ParkingSession]:
    now = _now(now)
    sessions = repo.list_for_user(user_id, status=status, zone_id=zone_id, limit=limit, page=page)
    for session in sessions:
        if session_lifecycle.refresh_status(session, now):
            repo.save(session)
    if status:
        sessions = [s for s in sessions if s.status == status]
    return sessions


def _release_previous_checkout(repo: SessionRepository, vehicle_id: int, now: datetime):
    """Refuse a second open session per vehicle. Abandoned checkouts are cancelled by refresh_status()."""
    previous = repo.find_open_for_vehicle(vehicle_id)
    if not previous:
        return
    if session_lifecycle.refresh_status(previous, now):
        repo.save(previous)
        if previous.status == SessionStatus.CANCELLED.value:
            logger.info(f"[SESSION] Abandoned checkout {previous.id} cancelled for vehicle {vehicle_id}")
        return

    if previous.status in session_lifecycle.RUNNING_STATUSES:
        raise InvalidStateError(
            "This vehicle already has an active parking session. "
            "Please end the current session before starting a new one.",
            session_id=previous.id,
        )
    raise InvalidStateError(
        "This vehicle has a pending payment. "
        "Please complete or cancel the current session before starting a new one.",
        session_id=previous.id,
    )


def start_session(repo: SessionRepository, user_id: str, vehicle_id: int, zone_id: int,
                  duration_hours, now: Optional[datetime] = None) -> CheckoutResult:
    """Create a PENDING session with its cost breakdown. Payment is confirmed separately."""
    now = _now(now)

    vehicle = repo.get_vehicle(vehicle_id)
    if not vehicle or vehicle.user_id != user_id:
        raise InvalidInputError("Vehicle not found", vehicle_id=vehicle_id)

    zone = repo.get_zone(zone_id)
    if not zone:
        raise InvalidInputError("Invalid or inactive parking zone", zone_id=zone_id)
    cost = quote_cost(zone, duration_hours)
    hours = session_lifecycle.validate_duration(duration_hours, zone.max_duration_hours)

    restriction_check = check_zone_restrictions(zone, now, hours)
    if not restriction_check.can_park:
        reasons = "; ".join(r.description for r in restriction_check.restrictions)
        raise ZoneRestrictedError(f"Cannot park due to restrictions: {reasons}", zone_id=zone_id)

    _release_previous_checkout(repo, vehicle_id, now)

    session = ParkingSession(
        user_id=user_id,
        vehicle_id=vehicle_id,
        zone_id=zone_id,
        rate_per_hour=zone.rate_per_hour,
        duration_hours=hours,
        start_time=now,
        scheduled_end_time=now + session_lifecycle.hours_to_timedelta(hours),
        base_cost=cost.base_cost,
        tax_amount=cost.tax_amount,
        processing_fee=cost.processing_fee,
        total_cost=cost.total_cost,
        status=SessionStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )
    repo.save(session)
    logger.info(
        f"[SESSION] Checkout {session.id}: vehicle={vehicle_id} zone={zone.zone_number} "
        f"{hours}h total={format_currency(cost.total_cost)}"
    )
    return CheckoutResult(session=session, cost=cost, warnings=restriction_check.warnings)


async def confirm_payment(repo: SessionRepository, payments: PaymentProcessor, session_id: int,
                          user_id: Optional[str] = None, now: Optional[datetime] = None) -> ParkingSession:
    """Charge the checkout total and start the clock (PENDING → ACTIVE)."""
    now = _now(now)
    session = load_session(repo, session_id, user_id, now)
    if session.status != SessionStatus.PENDING.value:
        raise InvalidStateError(f"Cannot pay for a session in status {session.status}",
                                session_id=session.id, status=session.status)

    try:
        processor_id = await payments.charge(session.total_cost, f"session-{session.id}")
    except PaymentFailedError as e:
        session_lifecycle.cancel(session, now)
        repo.add_transaction(_transaction(session, "CHARGE", session.total_cost, "FAILED", now,
                                          failure_reason=e.message))
        repo.save(session)
        logger.warning(f"[CHARGE] Session {session.id} payment failed: {e.message}")
        raise

    session_lifecycle.activate(session, now)
    repo.add_transaction(_transaction(session, "CHARGE", session.total_cost, "COMPLETED", now,
                                      processor_id=processor_id))
    repo.save(session)
    logger.info(f"[SESSION] Session {session.id} ACTIVE until {session.scheduled_end_time}")
    return session


def get_extension_options(repo: SessionRepository, session_id: int, user_id: Optional[str] = None,
                          now: Optional[datetime] = None) -> dict:
    session = load_session(repo, session_id, user_id, now)
    session_lifecycle.require_running(session, "extend")
    zone = repo.get_zone(session.zone_id)
    remaining = extension_service.max_additional_hours(session, zone)
    return {
        "session_id": session.id,
        "max_additional_hours": max(Decimal(0), remaining),
        "options": [
            {"hours": option, "cost": calculate_parking_cost(session.rate_per_hour, option)}
            for option in extension_service.extension_options(session, zone)
        ],
    }


async def extend_session(repo: SessionRepository, payments: PaymentProcessor, session_id: int,
                         additional_hours, user_id: Optional[str] = None,
                         now: Optional[datetime] = None) -> ExtensionResult:
    """Buy more time. The extension is charged before the session is changed."""
    now = _now(now)
    session = load_session(repo, session_id, user_id, now)
    zone = repo.get_zone(session.zone_id)
    plan = extension_service.plan_extension(session, zone, additional_hours)

    processor_id = await payments.charge(plan.cost.total_cost, f"session-{session.id}-extension")

    extension_service.apply_extension(session, plan, now)
    transaction = repo.add_transaction(_transaction(session, "CHARGE", plan.cost.total_cost, "COMPLETED",
                                                    now, processor_id=processor_id))
    repo.save(session)
    return ExtensionResult(session=session, plan=plan, transaction=transaction)


def preview_termination(repo: SessionRepository, session_id: int, user_id: Optional[str] = None,
                        now: Optional[datetime] = None) -> refund_service.RefundQuote:
    now = _now(now)
    session = load_session(repo, session_id, user_id, now)
    return refund_service.plan_termination(session, now)


async def terminate_session(repo: SessionRepository, payments: PaymentProcessor, session_id: int,
                            user_id: Optional[str] = None,
                            now: Optional[datetime] = None) -> TerminationResult:
    """
    End a running session early and refund the unused time.
    A refund the processor rejects is logged as a FAILED transaction plus a
    refund_failed alert; the session is completed regardless.
    """
    now = _now(now)
    session = load_session(repo, session_id, user_id, now)
    quote = refund_service.plan_termination(session, now)

    refund_transactions = []
    if quote.refund_amount > 0:
        refund_transactions = await _issue_refund(repo, payments, session, quote.refund_amount, now)

    summary = refund_service.apply_termination(session, quote, now)
    repo.save(session)
    logger.info(
        f"[SESSION] Session {session.id} COMPLETED early: used {summary.actual_time_used_hours}h, "
        f"charged {summary.chargeable_hours}h, refund {format_currency(summary.refund_amount)}"
    )
    return TerminationResult(session=session, summary=summary, refund_transactions=refund_transactions)


async def _issue_refund(repo: SessionRepository, payments: PaymentProcessor, session: ParkingSession,
                        amount: Decimal, now: datetime) -> list[Transaction]:
    """
    Refund `amount` across the session's charges, newest first, so the
    extension charges are drawn down before the original checkout charge.
    Whatever cannot be refunded is recorded as one FAILED refund plus an alert.
    """
    transactions = []
    remaining = amount
    failure = None
    for charge in repo.find_charges(session.id):
        if remaining <= 0:
            break
        portion = min(remaining, Decimal(charge.amount))
        if portion <= 0:
            continue
        try:
            refund_id = await payments.refund(charge.processor_transaction_id, portion, f"session-{session.id}")
        except PaymentFailedError as e:
            failure = e.message
            break
        transactions.append(repo.add_transaction(_transaction(session, "REFUND", -portion, "COMPLETED", now,
                                                              processor_id=refund_id)))
        remaining -= portion

    if remaining > 0:
        failure = failure or "No completed charge left to refund against"
        logger.error(f"[REFUND] Session {session.id} refund of {remaining} failed: {failure}")
        transactions.append(repo.add_transaction(_transaction(session, "REFUND", -remaining, "FAILED", now,
                                                              failure_reason=failure)))
        await create_alert(repo.db, "refund_failed", session.id, session.zone_id,
                           f"Refund of {format_currency(remaining)} for session {session.id} failed: {failure}")
    return transactions


def _transaction(session, kind, amount, status, now, processor_id=None, failure_reason=None) -> Transaction:
    return Transaction(
        session_id=session.id,
        user_id=session.user_id,
        kind=kind,
        amount=amount,
        status=status,
        processor_transaction_id=processor_id,
        failure_reason=failure_reason,
        created_at=now,
    )
