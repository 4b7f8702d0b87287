from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class VehicleCreate(BaseModel):
    license_plate: str
    state: str                # two-letter issuing state
    nickname: Optional[str] = None


class VehicleOut(BaseModel):
    id: int
    user_id: str
    license_plate: str
    state: str
    nickname: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
