# rento/services/vehicle_service.py
"""
Host-side vehicle editing: registration, weekly schedule, date overrides.
Used by the vehicles router. Availability reads go through
availability_service.build_availability.
"""

from datetime import date, datetime
from typing import List, Optional

import pytz
from sqlalchemy.orm import Session

from rento.config import settings
from rento.exceptions import NotFoundError, ScheduleValidationError
from rento.models.availability_override import CustomAvailabilityOverride
from rento.models.vehicle import Vehicle
from rento.services.availability_service import WeeklySchedule
from rento.services.identity import Identity, require_host, require_identity
from rento.utils.logger import get_logger

logger = get_logger(__name__)


def _check_timezone(name: str) -> str:
    try:
        pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ScheduleValidationError(f"Unknown timezone: {name!r}", {"pickup_timezone": name})
    return name


def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise NotFoundError("vehicle", vehicle_id)
    return vehicle


def vehicle_timezone(vehicle: Vehicle) -> str:
    return vehicle.pickup_timezone or settings.DEFAULT_TIMEZONE


def register_vehicle(
    db: Session,
    host: Optional[Identity],
    make: str,
    model: str,
    year: Optional[int] = None,
    location: Optional[str] = None,
    pickup_timezone: Optional[str] = None,
    schedule: Optional[WeeklySchedule] = None,
) -> Vehicle:
    host = require_identity(host)
    schedule = schedule or WeeklySchedule()
    vehicle = Vehicle(
        host_id=host.user_id,
        make=make,
        model=model,
        year=year,
        location=location,
        pickup_timezone=_check_timezone(pickup_timezone) if pickup_timezone else None,
        available_days=schedule.ordered_days(),
        open_time=schedule.start,
        close_time=schedule.end,
        created_at=datetime.utcnow(),
    )
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    logger.info(f"Vehicle {vehicle.id} registered by host {host.user_id}")
    return vehicle


def set_weekly_schedule(db: Session, vehicle_id: int, host: Optional[Identity], schedule: WeeklySchedule) -> Vehicle:
    """Replace the weekly schedule. Existing bookings keep their days regardless."""
    vehicle = get_vehicle(db, vehicle_id)
    require_host(vehicle, host)
    vehicle.available_days = schedule.ordered_days()
    vehicle.open_time = schedule.start
    vehicle.close_time = schedule.end
    db.commit()
    db.refresh(vehicle)
    logger.info(f"Vehicle {vehicle_id} schedule set to {vehicle.available_days} {schedule.start}-{schedule.end}")
    return vehicle


def upsert_override(
    db: Session, vehicle_id: int, host: Optional[Identity], day: date, available: bool
) -> CustomAvailabilityOverride:
    """
    Mark a single date open or closed. At most one override per date; a second
    call for the same date replaces the first.
    """
    vehicle = get_vehicle(db, vehicle_id)
    require_host(vehicle, host)

    override = (
        db.query(CustomAvailabilityOverride)
        .filter(CustomAvailabilityOverride.vehicle_id == vehicle_id, CustomAvailabilityOverride.date == day)
        .first()
    )
    if override:
        override.available = available
    else:
        override = CustomAvailabilityOverride(vehicle_id=vehicle_id, date=day, available=available)
        db.add(override)
    override.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(override)
    logger.info(f"Vehicle {vehicle_id} override {day} → {'open' if available else 'closed'}")
    return override


def list_overrides(db: Session, vehicle_id: int) -> List[CustomAvailabilityOverride]:
    get_vehicle(db, vehicle_id)
    return (
        db.query(CustomAvailabilityOverride)
        .filter(CustomAvailabilityOverride.vehicle_id == vehicle_id)
        .order_by(CustomAvailabilityOverride.date)
        .all()
    )
