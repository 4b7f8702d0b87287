# app/models/parking_session.py
"""
Parking sessions table — one paid parking period for one vehicle in one zone.
Cost columns hold the cumulative amounts paid (initial purchase + extensions).
Status transitions are owned by app.services.session_lifecycle.
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from app.database import Base


class ParkingSession(Base):
    __tablename__ = "parking_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(100), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    zone_id = Column(Integer, ForeignKey("parking_zones.id"), nullable=False, index=True)

    rate_per_hour = Column(Numeric(8, 2), nullable=False)      # copied from zone at checkout
    duration_hours = Column(Numeric(5, 2), nullable=False)
    start_time = Column(DateTime, nullable=False)
    scheduled_end_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime)
    actual_duration_hours = Column(Numeric(6, 2))

    base_cost = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False)
    processing_fee = Column(Numeric(10, 2), nullable=False)
    total_cost = Column(Numeric(10, 2), nullable=False)
    refund_amount = Column(Numeric(10, 2))

    status = Column(String(20), nullable=False, index=True)     # see SessionStatus
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<ParkingSession {self.id} status={self.status} ends={self.scheduled_end_time}>"
