# rento/schemas/vehicle.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from rento.models.vehicle import ALL_DAYS


class WeeklyScheduleIn(BaseModel):
    days: List[str] = Field(default_factory=lambda: list(ALL_DAYS))
    start: str = "08:00"
    end: str = "20:00"


class VehicleCreate(BaseModel):
    make: str
    model: str
    year: Optional[int] = None
    location: Optional[str] = None
    pickup_timezone: Optional[str] = None    # IANA name, e.g. "Africa/Casablanca"
    schedule: Optional[WeeklyScheduleIn] = None


class VehicleOut(BaseModel):
    id: int
    host_id: str
    make: str
    model: str
    year: Optional[int]
    location: Optional[str]
    pickup_timezone: Optional[str]
    available_days: List[str]
    open_time: str
    close_time: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class OverrideIn(BaseModel):
    date: date
    available: bool


class OverrideOut(BaseModel):
    id: int
    vehicle_id: int
    date: date
    available: bool
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
