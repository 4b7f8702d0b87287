from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class TimeRestriction(BaseModel):
    start_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    end_time: str = Field(pattern=r"^\d{2}:\d{2}$")
    days_of_week: list[int]               # 0 = Sunday
    restriction_type: str                 # RUSH_HOUR | STREET_CLEANING | PERMIT_ONLY | NO_PARKING | LOADING_ZONE
    description: Optional[str] = None


class ZoneRestrictions(BaseModel):
    time_restrictions: list[TimeRestriction] = []


class ZoneCreate(BaseModel):
    zone_number: str = Field(pattern=r"^[A-Za-z0-9]{1,10}$")
    zone_name: str
    location_type: str                    # STREET | GARAGE | LOT | METER
    rate_per_hour: Optional[Decimal] = None
    max_duration_hours: Decimal
    address: Optional[str] = None
    restrictions: Optional[ZoneRestrictions] = None


class ZoneUpdate(BaseModel):
    zone_name: Optional[str] = None
    location_type: Optional[str] = None
    rate_per_hour: Optional[Decimal] = None
    max_duration_hours: Optional[Decimal] = None
    address: Optional[str] = None
    restrictions: Optional[ZoneRestrictions] = None
    is_active: Optional[bool] = None


class ZoneOut(BaseModel):
    id: int
    zone_number: str
    zone_name: str
    location_type: str
    rate_per_hour: Decimal
    max_duration_hours: Decimal
    address: Optional[str]
    restrictions: Optional[dict]
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
