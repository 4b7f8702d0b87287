# app/models/vehicle.py
"""
Registered vehicles table.
A user registers each car by plate + issuing state before parking it.
"""

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"
    __table_args__ = (UniqueConstraint("license_plate", "state", name="uq_vehicle_plate_state"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(100), nullable=False, index=True)
    license_plate = Column(String(20), nullable=False, index=True)
    state = Column(String(2), nullable=False)
    nickname = Column(String(100))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Vehicle {self.license_plate} ({self.state}) user={self.user_id}>"
