"""Enforcement officer endpoints — plate validation and expired-session sweep."""

from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.session import ValidateSessionRequest
from app.services.enforcement_service import list_expired_sessions, validate_session

router = APIRouter()


@router.post("/enforcement/validate-session", summary="Is this plate paid up in this zone?")
def validate(body: ValidateSessionRequest, db: Session = Depends(get_db)):
    return validate_session(db, body.license_plate, body.state, body.zone_number)


@router.get("/enforcement/expired-sessions", summary="Expired sessions with citation eligibility")
def expired_sessions(zone_id: Optional[int] = None, limit: int = 50, db: Session = Depends(get_db)):
    return list_expired_sessions(db, zone_id=zone_id, limit=limit)
