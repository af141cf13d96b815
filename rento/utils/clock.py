# rento/utils/clock.py
"""
Injectable source of "now" and "today".

Conflict checks and calendar pickers ask the clock for today's date in the
vehicle's pickup timezone instead of reading the wall clock themselves.
Tests pass a FixedClock to get deterministic dates.
"""

from datetime import date, datetime
from typing import Optional

import pytz

from rento.config import settings


class Clock:
    def __init__(self, default_timezone: Optional[str] = None):
        self.default_timezone = default_timezone or settings.DEFAULT_TIMEZONE

    def _zone(self, tz: Optional[str]):
        return pytz.timezone(tz or self.default_timezone)

    def now(self, tz: Optional[str] = None) -> datetime:
        return datetime.now(self._zone(tz))

    def today(self, tz: Optional[str] = None) -> date:
        return self.now(tz).date()


class FixedClock(Clock):
    """Clock pinned to a single instant. Naive datetimes are read as UTC."""

    def __init__(self, instant: datetime, default_timezone: Optional[str] = None):
        super().__init__(default_timezone)
        if instant.tzinfo is None:
            instant = pytz.utc.localize(instant)
        self.instant = instant

    @classmethod
    def on(cls, day: date, default_timezone: Optional[str] = None) -> "FixedClock":
        """Noon UTC on ``day``; lands on the same date in any zone within ±11h."""
        return cls(datetime(day.year, day.month, day.day, 12, 0), default_timezone)

    def now(self, tz: Optional[str] = None) -> datetime:
        return self.instant.astimezone(self._zone(tz))
