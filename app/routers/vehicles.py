"""Registered vehicles of the calling user."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.parking_session import ParkingSession
from app.models.vehicle import Vehicle
from app.schemas.vehicle import VehicleCreate, VehicleOut
from app.services.session_lifecycle import OPEN_STATUSES
from app.services.vehicle_service import register_vehicle
from app.utils.identity import get_user_id

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleOut], summary="List my vehicles")
def list_vehicles(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return db.query(Vehicle).filter(Vehicle.user_id == user_id).order_by(Vehicle.created_at.desc()).all()


@router.post("/vehicles", response_model=VehicleOut, summary="Register a vehicle")
def create_vehicle(body: VehicleCreate, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return register_vehicle(db, user_id, body.license_plate, body.state, body.nickname)


@router.delete("/vehicles/{vehicle_id}", summary="Remove a vehicle")
def remove_vehicle(vehicle_id: int, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id, Vehicle.user_id == user_id).first()
    if not vehicle:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    in_use = db.query(ParkingSession).filter(
        ParkingSession.vehicle_id == vehicle_id, ParkingSession.status.in_(OPEN_STATUSES)
    ).first()
    if in_use:
        raise HTTPException(status_code=409, detail="Vehicle has an open parking session")
    db.delete(vehicle)
    db.commit()
    return {"status": "removed", "vehicle_id": vehicle_id}
