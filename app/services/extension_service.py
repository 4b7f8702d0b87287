# app/services/extension_service.py
"""
Session extension — eligibility decision and the resulting state change.

The decision is pure: plan_extension() never charges anyone. The session
service charges the extension cost first and only then calls
apply_extension() and persists.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from app.config import settings
from app.services.cost_calculator import CostBreakdown, Number, calculate_parking_cost, to_decimal
from app.services.exceptions import InvalidInputError, MaxDurationReachedError
from app.services.session_lifecycle import SessionStatus, hours_to_timedelta, require_running
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExtensionPlan:
    session_id: int
    additional_hours: Decimal
    new_duration_hours: Decimal
    new_scheduled_end_time: datetime
    cost: CostBreakdown


def max_additional_hours(session, zone) -> Decimal:
    return to_decimal(zone.max_duration_hours) - to_decimal(session.duration_hours)


def extension_options(session, zone) -> list[Decimal]:
    """Standard increments (0.5, 1, 2, 4 h) that still fit under the zone cap."""
    remaining = max_additional_hours(session, zone)
    return [option for option in settings.EXTENSION_OPTIONS if option <= remaining]


def plan_extension(session, zone, additional_hours: Number) -> ExtensionPlan:
    """
    Decide whether `additional_hours` may be added to the session.

    Raises InvalidStateError unless the session is ACTIVE or EXTENDED,
    InvalidInputError for non-positive or off-grid hours, and
    MaxDurationReachedError when the zone cap is already reached or would be
    exceeded. Requests landing exactly on the cap are accepted.
    """
    require_running(session, "extend")

    additional = to_decimal(additional_hours)
    if additional <= 0:
        raise InvalidInputError(f"Additional hours must be greater than 0, got {additional}")
    if additional % settings.DURATION_STEP_HOURS != 0:
        raise InvalidInputError(
            f"Additional hours must be a multiple of {settings.DURATION_STEP_HOURS}, got {additional}"
        )

    remaining = max_additional_hours(session, zone)
    if remaining <= 0:
        raise MaxDurationReachedError(
            f"Session already at zone maximum of {zone.max_duration_hours} hours",
            max_additional_hours="0",
        )
    if additional > remaining:
        raise MaxDurationReachedError(
            f"Total duration would exceed zone maximum of {zone.max_duration_hours} hours",
            max_additional_hours=str(remaining),
        )

    return ExtensionPlan(
        session_id=session.id,
        additional_hours=additional,
        new_duration_hours=to_decimal(session.duration_hours) + additional,
        new_scheduled_end_time=session.scheduled_end_time + hours_to_timedelta(additional),
        cost=calculate_parking_cost(session.rate_per_hour, additional),
    )


def apply_extension(session, plan: ExtensionPlan, now: datetime):
    """Move the end time, add the extension cost to the paid totals, mark EXTENDED."""
    session.duration_hours = plan.new_duration_hours
    session.scheduled_end_time = plan.new_scheduled_end_time
    session.base_cost = to_decimal(session.base_cost) + plan.cost.base_cost
    session.tax_amount = to_decimal(session.tax_amount) + plan.cost.tax_amount
    session.processing_fee = to_decimal(session.processing_fee) + plan.cost.processing_fee
    session.total_cost = to_decimal(session.total_cost) + plan.cost.total_cost
    session.status = SessionStatus.EXTENDED.value
    session.updated_at = now
    logger.info(
        f"[EXTEND] Session {session.id} +{plan.additional_hours}h → "
        f"{plan.new_duration_hours}h, ends {plan.new_scheduled_end_time}"
    )
