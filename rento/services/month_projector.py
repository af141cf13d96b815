# rento/services/month_projector.py
"""
Month projector: day-by-day status for calendar rendering.

Display only. It never gates a booking and is a batch wrapper over
availability_service.status_of, not a second source of truth.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from rento.models.booking import BookingStatus
from rento.services.availability_service import DayStatus, VehicleAvailability, status_of
from rento.utils.dates import add_months, days_in_range, month_bounds

DayProjection = Tuple[date, DayStatus]


@dataclass(frozen=True)
class MonthProjection:
    year: int
    month: int
    days: List[DayProjection]

    @property
    def available_count(self) -> int:
        return sum(1 for _, s in self.days if s is DayStatus.AVAILABLE)


def project_month(availability: VehicleAvailability, year: int, month: int) -> List[DayProjection]:
    first, last = month_bounds(year, month)
    return [(day, status_of(availability, day)) for day in days_in_range(first, last)]


def project_months(availability: VehicleAvailability, year: int, month: int, count: int) -> List[MonthProjection]:
    """Consecutive months starting at (year, month), for compact multi-month summaries."""
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    result = []
    for offset in range(count):
        y, m = add_months(year, month, offset)
        result.append(MonthProjection(year=y, month=m, days=project_month(availability, y, m)))
    return result


def next_return_date(bookings: Iterable, today: date) -> Optional[date]:
    """
    Earliest end date among confirmed bookings still running on or after today.

    Listing cards show this as "back on ...". It deliberately looks at
    confirmed bookings only, unlike the conflict checker where pending
    requests block too.
    """
    ends = [
        b.end_date for b in bookings
        if b.status == BookingStatus.CONFIRMED.value and b.end_date >= today
    ]
    return min(ends) if ends else None
