"""Unit tests for zone time restrictions."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime
from app.models.zone import ParkingZone
from app.services.restriction_service import (
    ActiveRestriction, check_zone_restrictions, format_restriction_message, sunday_based_weekday,
)

MONDAY = datetime(2024, 1, 1)
SUNDAY = datetime(2024, 1, 7)

RUSH_HOUR = {
    "start_time": "07:00", "end_time": "09:00", "days_of_week": [1, 2, 3, 4, 5],
    "restriction_type": "RUSH_HOUR", "description": "Morning rush hour",
}
OVERNIGHT = {
    "start_time": "22:00", "end_time": "02:00", "days_of_week": [1],
    "restriction_type": "STREET_CLEANING", "description": "Street cleaning",
}


def make_zone(*restrictions):
    return ParkingZone(id=1, zone_number="A1", zone_name="Main St", location_type="STREET",
                       rate_per_hour=1.25, max_duration_hours=4, is_active=True,
                       restrictions={"time_restrictions": list(restrictions)} if restrictions else None)


class TestCheckZoneRestrictions:
    def test_no_restrictions(self):
        result = check_zone_restrictions(make_zone(), MONDAY.replace(hour=8), 2)
        assert result.can_park
        assert result.restrictions == []

    def test_overlap_blocks_parking(self):
        result = check_zone_restrictions(make_zone(RUSH_HOUR), MONDAY.replace(hour=8), 1)
        assert not result.can_park
        assert result.restrictions[0].type == "RUSH_HOUR"
        assert result.restrictions[0].active_until == MONDAY.replace(hour=9)

    def test_session_spanning_window_blocked(self):
        result = check_zone_restrictions(make_zone(RUSH_HOUR), MONDAY.replace(hour=6), 4)
        assert not result.can_park

    def test_outside_window_allowed(self):
        assert check_zone_restrictions(make_zone(RUSH_HOUR), MONDAY.replace(hour=10), 2).can_park

    def test_weekday_not_listed(self):
        assert check_zone_restrictions(make_zone(RUSH_HOUR), SUNDAY.replace(hour=8), 1).can_park

    def test_upcoming_restriction_warns(self):
        result = check_zone_restrictions(make_zone(RUSH_HOUR), MONDAY.replace(hour=6), 0.5)
        assert result.can_park
        assert len(result.warnings) == 1
        assert "begins at 07:00" in result.warnings[0].message

    def test_window_crossing_midnight(self):
        result = check_zone_restrictions(make_zone(OVERNIGHT), MONDAY.replace(hour=23), 0.5)
        assert not result.can_park
        assert result.restrictions[0].active_until == datetime(2024, 1, 2, 2, 0)


class TestHelpers:
    def test_sunday_is_zero(self):
        assert sunday_based_weekday(SUNDAY) == 0
        assert sunday_based_weekday(MONDAY) == 1

    def test_format_message(self):
        restriction = ActiveRestriction(type="RUSH_HOUR", description="x", active_until=MONDAY.replace(hour=9))
        assert format_restriction_message(restriction) == "No parking during rush hour until 9:00 AM"

    def test_format_unknown_type_uses_description(self):
        assert format_restriction_message(ActiveRestriction(type="OTHER", description="Closed")) == "Closed"
