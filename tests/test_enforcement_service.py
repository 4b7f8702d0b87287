"""Unit tests for enforcement lookups (plate validation, expired-session list)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock, patch
from datetime import datetime, timedelta
from decimal import Decimal
from app.models.parking_session import ParkingSession
from app.models.zone import ParkingZone
from app.services.enforcement_service import list_expired_sessions, validate_session

NOW = datetime(2024, 1, 1, 12, 0, 0)


def make_session(ends_in_minutes, status="ACTIVE", session_id=1):
    end = NOW + timedelta(minutes=ends_in_minutes)
    return ParkingSession(
        id=session_id, user_id="u1", vehicle_id=session_id, zone_id=3,
        rate_per_hour=Decimal("2.00"), duration_hours=Decimal("1"),
        start_time=end - timedelta(hours=1), scheduled_end_time=end,
        base_cost=Decimal("2.00"), tax_amount=Decimal("0.13"),
        processing_fee=Decimal("0.36"), total_cost=Decimal("2.49"),
        status=status, created_at=end - timedelta(hours=1),
    )


def make_db(found=None, expired_rows=()):
    """found: result of the plate lookup; expired_rows: rows the EXPIRED query would see."""
    db = MagicMock()
    db.query.return_value.join.return_value.filter.return_value.order_by.return_value.first.return_value = found
    db.query.return_value.filter.return_value.order_by.return_value.limit.return_value.all.side_effect = \
        lambda: [s for s in expired_rows if s.status == "EXPIRED"]
    return db


@pytest.fixture
def zone():
    zone = ParkingZone(id=3, zone_number="A1", zone_name="Main St", location_type="STREET",
                       rate_per_hour=Decimal("2.00"), max_duration_hours=Decimal("4"), is_active=True)
    with patch("app.services.enforcement_service.get_zone_by_number", return_value=zone):
        yield zone


@pytest.fixture
def repo():
    repo = MagicMock()
    repo.list_overdue.return_value = []
    with patch("app.services.enforcement_service.SessionRepository", return_value=repo):
        yield repo


class TestValidateSession:
    def test_running_session_valid(self, zone, repo):
        result = validate_session(make_db(found=make_session(30)), "abc-123", "ct", "A1", now=NOW)
        assert result["valid_session"] is True
        assert result["time_remaining_minutes"] == 30
        repo.save.assert_not_called()

    def test_overdue_session_expired_on_lookup(self, zone, repo):
        session = make_session(-10)
        result = validate_session(make_db(found=session), "ABC123", "CT", "A1", now=NOW)
        assert result["valid_session"] is False
        assert result["status"] == "EXPIRED"
        repo.save.assert_called_once_with(session)

    def test_unpaid_checkout_not_valid(self, zone, repo):
        session = make_session(50, status="PENDING")
        result = validate_session(make_db(found=session), "ABC123", "CT", "A1", now=NOW)
        assert result["valid_session"] is False
        assert result["status"] == "CANCELLED"

    def test_no_session(self, zone, repo):
        result = validate_session(make_db(found=None), "ABC123", "CT", "A1", now=NOW)
        assert result == {"valid_session": False, "message": "No active parking session found"}

    def test_unknown_zone(self):
        with patch("app.services.enforcement_service.get_zone_by_number", return_value=None):
            result = validate_session(make_db(), "ABC123", "CT", "Z9", now=NOW)
        assert result["valid_session"] is False


class TestListExpiredSessions:
    @pytest.mark.parametrize("minutes_over,eligible", [(4, False), (5, True), (30, True)])
    def test_grace_period_boundary(self, repo, minutes_over, eligible):
        rows = [make_session(-minutes_over, status="EXPIRED")]
        result = list_expired_sessions(make_db(expired_rows=rows), now=NOW)
        assert result[0]["minutes_expired"] == minutes_over
        assert result[0]["violation_eligible"] is eligible

    def test_overdue_sessions_expired_before_listing(self, repo):
        overdue = make_session(-20)
        repo.list_overdue.return_value = [overdue]
        result = list_expired_sessions(make_db(expired_rows=[overdue]), now=NOW)
        assert overdue.status == "EXPIRED"
        assert [r["session_id"] for r in result] == [1]

    def test_unpaid_checkout_never_listed(self, repo):
        paid = make_session(-20, session_id=1)
        unpaid = make_session(-20, status="PENDING", session_id=2)
        repo.list_overdue.return_value = [paid, unpaid]

        result = list_expired_sessions(make_db(expired_rows=[paid, unpaid]), now=NOW)

        assert unpaid.status == "CANCELLED"
        assert [r["session_id"] for r in result] == [1]
