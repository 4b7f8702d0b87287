"""Unit tests for early-termination refunds."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from app.models.parking_session import ParkingSession
from app.services.exceptions import InvalidStateError
from app.services.refund_service import apply_termination, plan_termination, quote_refund

START = datetime(2024, 1, 1, 10, 0, 0)


def make_session(status="ACTIVE", duration="2"):
    hours = Decimal(duration)
    return ParkingSession(
        id=3, user_id="u1", vehicle_id=1, zone_id=1,
        rate_per_hour=Decimal("3.25"), duration_hours=hours,
        start_time=START, scheduled_end_time=START + timedelta(hours=float(hours)),
        base_cost=Decimal("6.50"), tax_amount=Decimal("0.41"),
        processing_fee=Decimal("0.49"), total_cost=Decimal("7.40"),
        status=status, created_at=START,
    )


class TestQuoteRefund:
    def test_terminated_after_45_minutes(self):
        quote = quote_refund(make_session(), START + timedelta(minutes=45))
        assert quote.time_used_hours == Decimal("0.75")
        assert quote.chargeable_hours == Decimal("0.75")
        assert quote.should_pay.base_cost == Decimal("2.44")
        assert quote.should_pay.tax_amount == Decimal("0.15")
        # 6.50 + 0.41 paid, 2.44 + 0.15 owed; the 0.49 fee stays with the processor
        assert quote.refund_amount == Decimal("4.32")

    def test_immediate_termination_charges_minimum(self):
        quote = quote_refund(make_session(), START + timedelta(seconds=5))
        assert quote.chargeable_hours == Decimal("0.5")
        assert quote.refund_amount == Decimal("5.18")

    def test_clock_skew_still_charges_minimum(self):
        quote = quote_refund(make_session(), START - timedelta(minutes=10))
        assert quote.time_used_hours == Decimal("0")
        assert quote.chargeable_hours == Decimal("0.5")
        assert quote.refund_amount == Decimal("5.18")

    @pytest.mark.parametrize("minutes", [120, 150, 600])
    def test_full_duration_used_no_refund(self, minutes):
        assert quote_refund(make_session(), START + timedelta(minutes=minutes)).refund_amount == Decimal("0")

    def test_half_hour_session_never_refunds(self):
        session = make_session(duration="0.5")
        session.base_cost, session.tax_amount = Decimal("1.63"), Decimal("0.10")
        assert quote_refund(session, START + timedelta(minutes=1)).refund_amount == Decimal("0")

    def test_refund_never_negative(self):
        session = make_session()
        session.base_cost, session.tax_amount = Decimal("1.00"), Decimal("0.06")
        assert quote_refund(session, START + timedelta(minutes=60)).refund_amount == Decimal("0")

    @pytest.mark.parametrize("minutes", [0, 10, 29, 31, 60, 90, 119])
    def test_chargeable_hours_floor(self, minutes):
        assert quote_refund(make_session(), START + timedelta(minutes=minutes)).chargeable_hours >= Decimal("0.5")


class TestTermination:
    def test_completed_session_cannot_be_terminated(self):
        with pytest.raises(InvalidStateError):
            plan_termination(make_session(status="COMPLETED"), START + timedelta(minutes=30))

    def test_apply_termination(self):
        session = make_session()
        now = START + timedelta(minutes=45)
        summary = apply_termination(session, plan_termination(session, now), now)

        assert session.status == "COMPLETED"
        assert session.end_time == now
        assert session.refund_amount == Decimal("4.32")
        assert session.actual_duration_hours == Decimal("0.75")
        assert summary.original_cost == Decimal("7.40")
        assert summary.final_cost == Decimal("3.08")
        assert summary.time_saved_hours == Decimal("1.25")
