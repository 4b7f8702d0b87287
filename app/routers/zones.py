"""Parking zones — public listing + admin management."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.zone import ParkingZone
from app.schemas.session import CostBreakdownOut, CostQuoteRequest
from app.schemas.zone import ZoneCreate, ZoneOut, ZoneUpdate
from app.services import zone_service
from app.services.session_service import quote_cost

router = APIRouter()


@router.get("/zones", response_model=list[ZoneOut])
def list_zones(include_inactive: bool = False, db: Session = Depends(get_db)):
    """Active zones ordered by zone number."""
    q = db.query(ParkingZone)
    if not include_inactive:
        q = q.filter(ParkingZone.is_active == True)  # noqa: E712
    return q.order_by(ParkingZone.zone_number.asc()).all()


@router.get("/zones/{zone_id}", response_model=ZoneOut)
def get_zone(zone_id: int, db: Session = Depends(get_db)):
    return zone_service.get_zone(db, zone_id)


@router.post("/zones", response_model=ZoneOut, summary="Admin — create a zone")
def create_zone(body: ZoneCreate, db: Session = Depends(get_db)):
    fields = body.model_dump(exclude_none=True)
    return zone_service.create_zone(db, **fields)


@router.put("/zones/{zone_id}", response_model=ZoneOut, summary="Admin — update a zone")
def update_zone(zone_id: int, body: ZoneUpdate, db: Session = Depends(get_db)):
    """Rate changes only affect sessions started afterwards."""
    return zone_service.update_zone(db, zone_id, **body.model_dump(exclude_unset=True))


@router.delete("/zones/{zone_id}", summary="Admin — delete a zone without open sessions")
def delete_zone(zone_id: int, db: Session = Depends(get_db)):
    zone_service.delete_zone(db, zone_id)
    return {"status": "deleted", "zone_id": zone_id}


@router.post("/zones/quote", response_model=CostBreakdownOut, summary="Price a session before checkout")
def quote(body: CostQuoteRequest, db: Session = Depends(get_db)):
    zone = zone_service.get_zone(db, body.zone_id)
    return CostBreakdownOut.model_validate(quote_cost(zone, body.duration_hours))
