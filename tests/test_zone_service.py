"""Unit tests for zone administration."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from decimal import Decimal
from app.models.parking_session import ParkingSession
from app.models.zone import ParkingZone
from app.services.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from app.services.zone_service import DEFAULT_RATES, create_zone, delete_zone, update_zone


def make_zone(zone_id=1, zone_number="A1"):
    return ParkingZone(id=zone_id, zone_number=zone_number, zone_name="Main St", location_type="STREET",
                       rate_per_hour=Decimal("2.00"), max_duration_hours=Decimal("4"), is_active=True)


def make_db(first=None):
    """Every `db.query(...).filter(...).first()` returns the next item of `first`."""
    db = MagicMock()
    db.query.return_value.filter.return_value.first.side_effect = list(first or [None])
    return db


class TestCreateZone:
    def test_default_rate_by_location_type(self):
        db = make_db([None])
        zone = create_zone(db, zone_number="g7", zone_name="Atlantic St Lot", location_type="LOT",
                           max_duration_hours=Decimal("6"))
        assert zone.zone_number == "G7"
        assert zone.rate_per_hour == DEFAULT_RATES["LOT"]
        assert zone.is_active is True
        db.add.assert_called_once_with(zone)

    def test_explicit_rate_kept(self):
        zone = create_zone(make_db([None]), zone_number="C3", zone_name="Harbor Garage", location_type="GARAGE",
                           rate_per_hour=Decimal("3.00"), max_duration_hours=Decimal("12"))
        assert zone.rate_per_hour == Decimal("3.00")

    def test_duplicate_zone_number_rejected(self):
        db = make_db([make_zone()])
        with pytest.raises(InvalidInputError):
            create_zone(db, zone_number="a1", zone_name="Other", location_type="STREET",
                        max_duration_hours=Decimal("2"))
        db.add.assert_not_called()

    def test_unknown_location_type_rejected(self):
        with pytest.raises(InvalidInputError):
            create_zone(make_db(), zone_number="X1", zone_name="X", location_type="AIRPORT",
                        max_duration_hours=Decimal("2"))

    def test_non_positive_rate_rejected(self):
        with pytest.raises(InvalidInputError):
            create_zone(make_db(), zone_number="X1", zone_name="X", location_type="STREET",
                        rate_per_hour=Decimal("0"), max_duration_hours=Decimal("2"))


class TestUpdateZone:
    def test_update_fields(self):
        zone = make_zone()
        db = make_db([zone])
        update_zone(db, 1, rate_per_hour=Decimal("2.50"), is_active=False)
        assert zone.rate_per_hour == Decimal("2.50")
        assert zone.is_active is False
        db.commit.assert_called_once()

    def test_missing_zone(self):
        with pytest.raises(NotFoundError):
            update_zone(make_db([None]), 99, zone_name="Nowhere")


class TestDeleteZone:
    def test_refused_with_open_session(self):
        open_session = ParkingSession(id=5, zone_id=1, status="ACTIVE")
        db = make_db([make_zone(), open_session])
        with pytest.raises(InvalidStateError):
            delete_zone(db, 1)
        db.delete.assert_not_called()

    def test_deleted_without_open_sessions(self):
        zone = make_zone()
        db = make_db([zone, None])
        delete_zone(db, 1)
        db.delete.assert_called_once_with(zone)
        db.commit.assert_called_once()
