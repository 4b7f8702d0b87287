# app/models/zone.py
"""
Parking zones table.
Each zone carries its hourly rate, the longest session it allows,
and optional time-window restrictions (rush hour, street cleaning, ...).
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Boolean, JSON
from app.database import Base


class ParkingZone(Base):
    __tablename__ = "parking_zones"

    id = Column(Integer, primary_key=True, autoincrement=True)
    zone_number = Column(String(10), unique=True, nullable=False, index=True)
    zone_name = Column(String(200), nullable=False)
    location_type = Column(String(20), nullable=False)   # STREET | GARAGE | LOT | METER
    rate_per_hour = Column(Numeric(8, 2), nullable=False)
    max_duration_hours = Column(Numeric(5, 2), nullable=False)
    address = Column(String(300))
    restrictions = Column(JSON)                           # {"time_restrictions": [...]}
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<ParkingZone {self.zone_number} rate={self.rate_per_hour} max={self.max_duration_hours}h>"
