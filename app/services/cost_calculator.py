# app/services/cost_calculator.py
"""
Parking cost calculator — pure functions, no DB or network access.

    base_cost      = round2(rate × hours)
    tax_amount     = round2(base_cost × TAX_RATE)
    processing_fee = round2(base_cost × PROCESSING_FEE_RATE + PROCESSING_FEE_FIXED)
    total_cost     = base_cost + tax_amount + processing_fee

Every part is rounded to the cent before summing so a receipt can always be
reproduced from its own line items.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

from app.config import settings
from app.services.exceptions import InvalidInputError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")


@dataclass(frozen=True)
class CostBreakdown:
    base_cost: Decimal
    tax_amount: Decimal
    processing_fee: Decimal
    total_cost: Decimal
    tax_rate: Decimal
    processing_fee_rate: Decimal

    @property
    def refundable_portion(self) -> Decimal:
        """Base cost + tax. The processing fee is never refunded."""
        return self.base_cost + self.tax_amount


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal via str() so 0.1 stays 0.1 and not 0.1000000000000000055."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Not a number: {value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInputError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise InvalidInputError(f"Not a finite number: {value!r}")
    return result


def round2(amount: Number) -> Decimal:
    """Round to cents, half-up."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_processing_fee(base_cost: Number,
                             rate: Optional[Decimal] = None,
                             fixed: Optional[Decimal] = None) -> Decimal:
    rate = settings.PROCESSING_FEE_RATE if rate is None else rate
    fixed = settings.PROCESSING_FEE_FIXED if fixed is None else fixed
    return round2(to_decimal(base_cost) * rate + fixed)


def calculate_parking_cost(rate_per_hour: Number, duration_hours: Number,
                           tax_rate: Optional[Decimal] = None,
                           processing_fee_rate: Optional[Decimal] = None,
                           processing_fee_fixed: Optional[Decimal] = None) -> CostBreakdown:
    """
    Cost breakdown for parking `duration_hours` at `rate_per_hour`.
    Rates default to the configured TAX_RATE / PROCESSING_FEE_* settings.
    Raises InvalidInputError unless both inputs are > 0.
    """
    rate = to_decimal(rate_per_hour)
    hours = to_decimal(duration_hours)
    if rate <= 0:
        raise InvalidInputError(f"Rate per hour must be positive, got {rate}", rate_per_hour=str(rate))
    if hours <= 0:
        raise InvalidInputError(f"Duration must be positive, got {hours}", duration_hours=str(hours))

    tax_rate = settings.TAX_RATE if tax_rate is None else tax_rate
    fee_rate = settings.PROCESSING_FEE_RATE if processing_fee_rate is None else processing_fee_rate

    base_cost = round2(rate * hours)
    tax_amount = round2(base_cost * tax_rate)
    processing_fee = calculate_processing_fee(base_cost, fee_rate, processing_fee_fixed)

    return CostBreakdown(
        base_cost=base_cost,
        tax_amount=tax_amount,
        processing_fee=processing_fee,
        total_cost=base_cost + tax_amount + processing_fee,
        tax_rate=tax_rate,
        processing_fee_rate=fee_rate,
    )


def format_currency(amount: Number) -> str:
    return f"${round2(amount):,.2f}"


def format_duration(hours: Number) -> str:
    """45 min | 2 hr | 1h 30m"""
    hours = to_decimal(hours)
    if hours < 1:
        minutes = int((hours * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        return f"{minutes} min"

    whole_hours = int(hours)
    minutes = int(((hours - whole_hours) * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if minutes == 0:
        return f"{whole_hours} hr"
    return f"{whole_hours}h {minutes}m"
