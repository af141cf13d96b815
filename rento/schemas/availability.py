# rento/schemas/availability.py
from pydantic import BaseModel
from datetime import date
from typing import List, Optional


class DayStatusOut(BaseModel):
    date: date
    status: str


class MonthOut(BaseModel):
    year: int
    month: int
    available_days: int        # count shown on listing cards
    days: List[DayStatusOut]


class CalendarSummaryOut(BaseModel):
    vehicle_id: int
    months: List[MonthOut]
    next_return_date: Optional[date] = None


class BookabilityOut(BaseModel):
    vehicle_id: int
    start_date: date
    end_date: date
    ok: bool
    blocking_dates: List[date]


class DisabledDatesOut(BaseModel):
    vehicle_id: int
    disabled_before: date      # every date strictly before this is disabled
    horizon_end: date
    dates: List[date]
