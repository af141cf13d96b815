# rento/routers/vehicles.py
"""Host-side vehicle editing: registration, weekly schedule, date overrides."""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rento.database import get_db
from rento.schemas.vehicle import OverrideIn, OverrideOut, VehicleCreate, VehicleOut, WeeklyScheduleIn
from rento.services import vehicle_service
from rento.services.availability_service import WeeklySchedule
from rento.services.identity import Identity, current_requester

router = APIRouter()


def _schedule(body: Optional[WeeklyScheduleIn]) -> Optional[WeeklySchedule]:
    if body is None:
        return None
    return WeeklySchedule(days=frozenset(body.days), start=body.start, end=body.end)


@router.post("/vehicles", response_model=VehicleOut, status_code=201, summary="List a new vehicle")
def register_vehicle(
    body: VehicleCreate,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(current_requester),
):
    """The caller becomes the vehicle's host. Schedule defaults to every day, 08:00–20:00."""
    return vehicle_service.register_vehicle(
        db, identity,
        make=body.make, model=body.model, year=body.year, location=body.location,
        pickup_timezone=body.pickup_timezone, schedule=_schedule(body.schedule),
    )


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut)
def get_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle(db, vehicle_id)


@router.put("/vehicles/{vehicle_id}/schedule", response_model=VehicleOut, summary="Replace the weekly schedule")
def set_schedule(
    vehicle_id: int,
    body: WeeklyScheduleIn,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(current_requester),
):
    return vehicle_service.set_weekly_schedule(db, vehicle_id, identity, _schedule(body))


@router.put("/vehicles/{vehicle_id}/overrides", response_model=OverrideOut, summary="Open or close a single date")
def upsert_override(
    vehicle_id: int,
    body: OverrideIn,
    db: Session = Depends(get_db),
    identity: Optional[Identity] = Depends(current_requester),
):
    """Replaces any earlier override for the same date. Booked dates stay booked."""
    return vehicle_service.upsert_override(db, vehicle_id, identity, body.date, body.available)


@router.get("/vehicles/{vehicle_id}/overrides", response_model=list[OverrideOut])
def list_overrides(vehicle_id: int, db: Session = Depends(get_db)):
    return vehicle_service.list_overrides(db, vehicle_id)
