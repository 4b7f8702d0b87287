"""Unit tests for session extension eligibility."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from app.models.parking_session import ParkingSession
from app.models.zone import ParkingZone
from app.services.extension_service import apply_extension, extension_options, plan_extension
from app.services.exceptions import InvalidInputError, InvalidStateError, MaxDurationReachedError

START = datetime(2024, 1, 1, 10, 0, 0)


def make_zone(max_hours="4"):
    return ParkingZone(id=1, zone_number="A1", zone_name="Main St", location_type="STREET",
                       rate_per_hour=Decimal("3.25"), max_duration_hours=Decimal(max_hours), is_active=True)


def make_session(status="ACTIVE", duration="2"):
    hours = Decimal(duration)
    return ParkingSession(
        id=7, user_id="u1", vehicle_id=1, zone_id=1,
        rate_per_hour=Decimal("3.25"), duration_hours=hours,
        start_time=START, scheduled_end_time=START + timedelta(hours=float(hours)),
        base_cost=Decimal("6.50"), tax_amount=Decimal("0.41"),
        processing_fee=Decimal("0.49"), total_cost=Decimal("7.40"),
        status=status, created_at=START,
    )


class TestExtensionOptions:
    def test_filtered_to_remaining_hours(self):
        assert extension_options(make_session(duration="2"), make_zone("4")) == [
            Decimal("0.5"), Decimal("1"), Decimal("2"),
        ]

    def test_all_options_when_room(self):
        assert len(extension_options(make_session(duration="1"), make_zone("8"))) == 4

    def test_none_at_cap(self):
        assert extension_options(make_session(duration="4"), make_zone("4")) == []


class TestPlanExtension:
    def test_extend_exactly_to_cap(self):
        plan = plan_extension(make_session(duration="2"), make_zone("4"), 2)
        assert plan.new_duration_hours == Decimal("4")
        assert plan.new_scheduled_end_time == START + timedelta(hours=4)
        assert plan.cost.total_cost == Decimal("7.40")

    def test_extension_cost_covers_added_hours_only(self):
        plan = plan_extension(make_session(duration="2"), make_zone("4"), 0.5)
        assert plan.cost.base_cost == Decimal("1.63")

    def test_past_cap_rejected(self):
        with pytest.raises(MaxDurationReachedError) as exc:
            plan_extension(make_session(duration="2"), make_zone("4"), 2.5)
        assert exc.value.details["max_additional_hours"] == "2"

    def test_already_at_cap_rejected(self):
        with pytest.raises(MaxDurationReachedError):
            plan_extension(make_session(duration="4"), make_zone("4"), 0.5)

    @pytest.mark.parametrize("hours", [0, -1, 0.75])
    def test_invalid_hours(self, hours):
        with pytest.raises(InvalidInputError):
            plan_extension(make_session(), make_zone(), hours)

    @pytest.mark.parametrize("status", ["PENDING", "COMPLETED", "EXPIRED", "CANCELLED"])
    def test_only_running_sessions(self, status):
        with pytest.raises(InvalidStateError):
            plan_extension(make_session(status=status), make_zone(), 1)

    def test_extended_session_can_extend_again(self):
        plan = plan_extension(make_session(status="EXTENDED", duration="3"), make_zone("4"), 1)
        assert plan.new_duration_hours == Decimal("4")


class TestApplyExtension:
    def test_totals_accumulate_and_status_extended(self):
        session = make_session(duration="2")
        plan = plan_extension(session, make_zone("4"), 2)
        apply_extension(session, plan, START + timedelta(minutes=30))

        assert session.status == "EXTENDED"
        assert session.duration_hours == Decimal("4")
        assert session.scheduled_end_time == START + timedelta(hours=4)
        assert session.base_cost == Decimal("13.00")
        assert session.tax_amount == Decimal("0.82")
        assert session.processing_fee == Decimal("0.98")
        assert session.total_cost == Decimal("14.80")
