# app/services/zone_service.py
"""Zone administration — create, update, deactivate, delete."""

from datetime import datetime
from sqlalchemy.orm import Session
from app.models.parking_session import ParkingSession
from app.models.zone import ParkingZone
from app.services.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from app.services.session_lifecycle import OPEN_STATUSES
from app.utils.logger import get_logger

logger = get_logger(__name__)

LOCATION_TYPES = {"STREET", "GARAGE", "LOT", "METER"}

# Default hourly rates when a zone is created without one
DEFAULT_RATES = {"STREET": 1.25, "GARAGE": 1.00, "LOT": 1.00, "METER": 1.25}


def get_zone(db: Session, zone_id: int) -> ParkingZone:
    zone = db.query(ParkingZone).filter(ParkingZone.id == zone_id).first()
    if not zone:
        raise NotFoundError(f"Zone {zone_id} not found")
    return zone


def get_zone_by_number(db: Session, zone_number: str):
    return db.query(ParkingZone).filter(ParkingZone.zone_number == zone_number.upper()).first()


def _validate(fields: dict):
    if "location_type" in fields and fields["location_type"] not in LOCATION_TYPES:
        raise InvalidInputError(f"location_type must be one of {sorted(LOCATION_TYPES)}")
    for key in ("rate_per_hour", "max_duration_hours"):
        if key in fields and fields[key] is not None and fields[key] <= 0:
            raise InvalidInputError(f"{key} must be positive")


def create_zone(db: Session, **fields) -> ParkingZone:
    _validate(fields)
    fields["zone_number"] = fields["zone_number"].upper()
    if get_zone_by_number(db, fields["zone_number"]):
        raise InvalidInputError(f"Zone number {fields['zone_number']} already exists")
    if fields.get("rate_per_hour") is None:
        fields["rate_per_hour"] = DEFAULT_RATES[fields["location_type"]]

    now = datetime.utcnow()
    zone = ParkingZone(**fields, is_active=True, created_at=now, updated_at=now)
    db.add(zone)
    db.commit()
    db.refresh(zone)
    logger.info(f"Zone created: {zone.zone_number} rate={zone.rate_per_hour}/h max={zone.max_duration_hours}h")
    return zone


def update_zone(db: Session, zone_id: int, **fields) -> ParkingZone:
    _validate(fields)
    zone = get_zone(db, zone_id)
    for key, value in fields.items():
        setattr(zone, key, value)
    zone.updated_at = datetime.utcnow()
    db.commit()
    logger.info(f"Zone updated: {zone.zone_number} {sorted(fields)}")
    return zone


def delete_zone(db: Session, zone_id: int):
    """Only zones without open sessions can be removed."""
    zone = get_zone(db, zone_id)
    open_session = db.query(ParkingSession).filter(
        ParkingSession.zone_id == zone_id, ParkingSession.status.in_(OPEN_STATUSES)
    ).first()
    if open_session:
        raise InvalidStateError(f"Zone {zone.zone_number} has open sessions and cannot be deleted")
    db.delete(zone)
    db.commit()
    logger.info(f"Zone deleted: {zone.zone_number}")
