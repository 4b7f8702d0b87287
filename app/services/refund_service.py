# app/services/refund_service.py
"""
Early termination — refund calculation and the COMPLETED transition.

    time_used   = max(0, now - start_time)          (hours)
    chargeable  = max(MIN_CHARGE_HOURS, time_used)  (30-minute floor)
    refund      = (paid base + tax) - (base + tax for chargeable hours), ≥ 0

The processing fee is never refunded.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from app.config import settings
from app.services.cost_calculator import CostBreakdown, calculate_parking_cost, round2, to_decimal
from app.services.session_lifecycle import SessionStatus, hours_between, require_running


@dataclass(frozen=True)
class RefundQuote:
    session_id: int
    time_used_hours: Decimal
    chargeable_hours: Decimal
    should_pay: CostBreakdown
    refund_amount: Decimal


@dataclass(frozen=True)
class TerminationSummary:
    original_duration_hours: Decimal
    actual_time_used_hours: Decimal
    chargeable_hours: Decimal
    original_cost: Decimal
    final_cost: Decimal
    refund_amount: Decimal
    time_saved_hours: Decimal


def chargeable_hours(time_used_hours: Decimal) -> Decimal:
    return max(settings.MIN_CHARGE_HOURS, time_used_hours)


def quote_refund(session, now: datetime) -> RefundQuote:
    """Refund owed if the session were ended at `now`. Pure; no state change."""
    time_used = max(Decimal(0), hours_between(session.start_time, now))
    chargeable = chargeable_hours(time_used)
    should_pay = calculate_parking_cost(session.rate_per_hour, chargeable)

    if chargeable >= to_decimal(session.duration_hours):
        refund = Decimal("0.00")
    else:
        paid = to_decimal(session.base_cost) + to_decimal(session.tax_amount)
        refund = round2(max(Decimal(0), paid - should_pay.refundable_portion))

    return RefundQuote(
        session_id=session.id,
        time_used_hours=time_used,
        chargeable_hours=chargeable,
        should_pay=should_pay,
        refund_amount=refund,
    )


def plan_termination(session, now: datetime) -> RefundQuote:
    """Quote for a session that is allowed to be ended early (ACTIVE or EXTENDED)."""
    require_running(session, "terminate")
    return quote_refund(session, now)


def apply_termination(session, quote: RefundQuote, now: datetime) -> TerminationSummary:
    original_cost = to_decimal(session.total_cost)
    duration = to_decimal(session.duration_hours)

    session.status = SessionStatus.COMPLETED.value
    session.end_time = now
    session.actual_duration_hours = round2(quote.time_used_hours)
    session.refund_amount = quote.refund_amount
    session.updated_at = now

    return TerminationSummary(
        original_duration_hours=duration,
        actual_time_used_hours=round2(quote.time_used_hours),
        chargeable_hours=quote.chargeable_hours,
        original_cost=original_cost,
        final_cost=original_cost - quote.refund_amount,
        refund_amount=quote.refund_amount,
        time_saved_hours=round2(max(Decimal(0), duration - quote.time_used_hours)),
    )
