# rento/services/conflict_checker.py
"""
Conflict checker: can this vehicle be booked for [start, end]?

Also builds the disabled-date set a date picker greys out. Both operations
read a fresh VehicleAvailability snapshot on every call; a disabled set built
before a booking landed elsewhere is stale and must not be reused.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import FrozenSet, List

from rento.exceptions import InvalidRangeError, PastDateError
from rento.services.availability_service import DayStatus, VehicleAvailability, status_of
from rento.utils.dates import days_in_range
from rento.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Bookability:
    ok: bool
    blocking_dates: List[date] = field(default_factory=list)


@dataclass(frozen=True)
class DisabledDates:
    """
    Dates a renter may not pick: everything before ``before`` plus ``dates``.
    The past is unbounded, so it is kept as a cutoff rather than enumerated.
    """

    before: date
    horizon_end: date
    dates: FrozenSet[date] = frozenset()

    def __contains__(self, day: date) -> bool:
        return day < self.before or day in self.dates

    def sorted_dates(self) -> List[date]:
        return sorted(self.dates)


def is_bookable(availability: VehicleAvailability, start: date, end: date, as_of: date) -> Bookability:
    """
    Check a candidate range against the availability model.

    Raises InvalidRangeError unless end is strictly after start (minimum one
    full day) and PastDateError if start is before ``as_of``. Every day in the
    inclusive range that is booked or closed is reported in blocking_dates.
    """
    if end <= start:
        raise InvalidRangeError(start, end)
    if start < as_of:
        raise PastDateError(start, as_of)

    blocking = [
        day for day in days_in_range(start, end)
        if status_of(availability, day) is not DayStatus.AVAILABLE
    ]
    if blocking:
        logger.debug(
            f"Vehicle {availability.vehicle_id} blocked on {len(blocking)} day(s) in {start}..{end}"
        )
    return Bookability(ok=not blocking, blocking_dates=blocking)


def disabled_date_set(availability: VehicleAvailability, horizon_days: int, today: date) -> DisabledDates:
    """All non-available dates in [today, today + horizon_days], plus the past."""
    if horizon_days < 0:
        raise ValueError(f"horizon_days must be >= 0, got {horizon_days}")
    horizon_end = today + timedelta(days=horizon_days)
    blocked = frozenset(
        day for day in days_in_range(today, horizon_end)
        if status_of(availability, day) is not DayStatus.AVAILABLE
    )
    return DisabledDates(before=today, horizon_end=horizon_end, dates=blocked)
