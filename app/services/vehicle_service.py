# app/services/vehicle_service.py
"""
Vehicle lookup and registration helpers.
Used by the vehicles router and the enforcement service.
"""

import re
from datetime import datetime
from sqlalchemy.orm import Session
from app.models.vehicle import Vehicle
from app.services.exceptions import InvalidInputError
from app.utils.logger import get_logger

logger = get_logger(__name__)


def normalize_plate(plate: str) -> str:
    """Upper-case and strip everything but letters and digits."""
    return re.sub(r"[^A-Z0-9]", "", plate.upper())


def validate_license_plate(plate: str) -> bool:
    return 2 <= len(normalize_plate(plate)) <= 8


def lookup_vehicle(db: Session, license_plate: str, state: str):
    """Find a registered vehicle by plate + state. Returns None if not found."""
    return db.query(Vehicle).filter(
        Vehicle.license_plate == normalize_plate(license_plate),
        Vehicle.state == state.upper(),
    ).first()


def register_vehicle(db: Session, user_id: str, license_plate: str, state: str, nickname=None) -> Vehicle:
    if not validate_license_plate(license_plate):
        raise InvalidInputError(f"Invalid license plate: {license_plate}")
    if lookup_vehicle(db, license_plate, state):
        raise InvalidInputError(f"Plate {license_plate} ({state.upper()}) already registered")

    vehicle = Vehicle(
        user_id=user_id,
        license_plate=normalize_plate(license_plate),
        state=state.upper(),
        nickname=nickname,
        created_at=datetime.utcnow(),
    )
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    logger.info(f"Vehicle registered: {vehicle.license_plate} ({vehicle.state}) for user {user_id}")
    return vehicle
