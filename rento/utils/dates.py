# rento/utils/dates.py
"""
Calendar-day helpers shared by the availability model, conflict checker and
month projector. Everything here works at whole-day granularity: ranges are
inclusive on both ends and time-of-day is discarded.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Tuple, Union

import pytz

from rento.exceptions import InvalidRangeError

WEEKDAY_LABELS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DateLike = Union[date, datetime, str]

# Wall-clock time of day, "8:00" or "08:00" up to "23:59"
HHMM_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"


def normalize(value: DateLike, tz: Optional[str] = None) -> date:
    """
    Truncate a date, datetime or ISO string to a calendar date.

    Aware datetimes are converted into ``tz`` (the vehicle's pickup zone)
    first, so two instants on the same local day normalize to the same date.
    Naive datetimes are taken as already local.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00")) if "T" in value else date.fromisoformat(value.strip())
    if isinstance(value, datetime):
        if value.tzinfo is not None and tz:
            value = value.astimezone(pytz.timezone(tz))
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Cannot normalize {type(value).__name__} to a calendar date")


class DateRange:
    """Inclusive, re-iterable run of calendar days from ``start`` to ``end``."""

    __slots__ = ("start", "end")

    def __init__(self, start: date, end: date):
        if end < start:
            raise InvalidRangeError(start, end, f"Range end {end} is before start {start}")
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[date]:
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __repr__(self):
        return f"<DateRange {self.start}..{self.end}>"


def days_in_range(start: date, end: date) -> DateRange:
    """Every day from start through end. Raises InvalidRangeError if end < start."""
    return DateRange(start, end)


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    # Touching on the same day counts: one car, one renter per day.
    return a_start <= b_end and b_start <= a_end


def weekday_label(day: date) -> str:
    return WEEKDAY_LABELS[day.weekday()]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def add_months(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Shift (year, month) by ``offset`` months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1
