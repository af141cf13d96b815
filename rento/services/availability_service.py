# rento/services/availability_service.py
"""
Availability model: what state is a vehicle in on a given calendar day?

Three inputs, strict precedence:
  1. an occupying booking (anything but cancelled/rejected) covering the day → booked
  2. a host override for the day                                               → its flag
  3. the weekday is in the weekly schedule                                     → available
  4. otherwise                                                                 → unavailable

A VehicleAvailability is an immutable snapshot of those inputs. Build a new
one whenever the schedule, overrides or bookings change; nothing is cached
between calls.
"""

import enum
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Optional, Tuple

from rento.exceptions import ScheduleValidationError
from rento.utils.dates import HHMM_PATTERN, WEEKDAY_LABELS, weekday_label

_TIME_RE = re.compile(HHMM_PATTERN)


class DayStatus(str, enum.Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    BOOKED = "booked"


@dataclass(frozen=True)
class WeeklySchedule:
    days: frozenset = frozenset(WEEKDAY_LABELS)
    start: str = "08:00"
    end: str = "20:00"

    def __post_init__(self):
        days = frozenset(d.strip().lower() for d in self.days)
        object.__setattr__(self, "days", days)
        if not days:
            raise ScheduleValidationError("Select at least one day")
        unknown = sorted(days - set(WEEKDAY_LABELS))
        if unknown:
            raise ScheduleValidationError(f"Unknown weekday(s): {', '.join(unknown)}", {"days": unknown})
        for name in ("start", "end"):
            if not _TIME_RE.match(getattr(self, name)):
                raise ScheduleValidationError(f"Invalid time format for {name}: {getattr(self, name)!r}")
        if _minutes(self.start) >= _minutes(self.end):
            raise ScheduleValidationError(
                f"Opening time {self.start} must be before closing time {self.end}",
                {"start": self.start, "end": self.end},
            )

    def is_open_on(self, day: date) -> bool:
        return weekday_label(day) in self.days

    def ordered_days(self) -> list:
        return [d for d in WEEKDAY_LABELS if d in self.days]


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


@dataclass(frozen=True)
class BookedRange:
    booking_id: Optional[int]
    start: date
    end: date
    status: str

    def covers(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class VehicleAvailability:
    vehicle_id: Optional[int]
    schedule: WeeklySchedule
    overrides: Mapping[date, bool] = field(default_factory=dict)
    bookings: Tuple[BookedRange, ...] = ()

    def status_of(self, day: date) -> DayStatus:
        return status_of(self, day)

    def without_booking(self, booking_id: int) -> "VehicleAvailability":
        return VehicleAvailability(
            vehicle_id=self.vehicle_id,
            schedule=self.schedule,
            overrides=self.overrides,
            bookings=tuple(b for b in self.bookings if b.booking_id != booking_id),
        )


def status_of(availability: VehicleAvailability, day: date) -> DayStatus:
    for booked in availability.bookings:
        if booked.covers(day):
            return DayStatus.BOOKED

    override = availability.overrides.get(day)
    if override is not None:
        return DayStatus.AVAILABLE if override else DayStatus.UNAVAILABLE

    if availability.schedule.is_open_on(day):
        return DayStatus.AVAILABLE
    return DayStatus.UNAVAILABLE


def schedule_of(vehicle) -> WeeklySchedule:
    """Read the weekly schedule columns off a Vehicle row."""
    return WeeklySchedule(
        days=frozenset(vehicle.available_days or ()),
        start=vehicle.open_time or "08:00",
        end=vehicle.close_time or "20:00",
    )


def occupying_ranges(bookings: Iterable) -> Tuple[BookedRange, ...]:
    """Bookings that still hold the calendar, as plain ranges."""
    return tuple(
        BookedRange(booking_id=b.id, start=b.start_date, end=b.end_date, status=b.status)
        for b in bookings
        if b.occupies_calendar
    )


def build_availability(vehicle, bookings: Iterable) -> VehicleAvailability:
    """Snapshot a vehicle's schedule, overrides and bookings for status lookups."""
    return VehicleAvailability(
        vehicle_id=vehicle.id,
        schedule=schedule_of(vehicle),
        overrides={o.date: bool(o.available) for o in vehicle.overrides},
        bookings=occupying_ranges(bookings),
    )
