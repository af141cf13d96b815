# rento/routers/availability.py
"""
Read-only availability endpoints: single-day status, month calendars,
range checks and the date picker's disabled set.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from rento.config import settings
from rento.dependencies import get_workflow
from rento.schemas.availability import (
    BookabilityOut,
    CalendarSummaryOut,
    DayStatusOut,
    DisabledDatesOut,
    MonthOut,
)
from rento.services.availability_service import status_of
from rento.services.booking_service import BookingWorkflow
from rento.services.conflict_checker import disabled_date_set, is_bookable
from rento.services.month_projector import MonthProjection, next_return_date, project_month, project_months

router = APIRouter()


def _month_out(projection: MonthProjection) -> MonthOut:
    return MonthOut(
        year=projection.year, month=projection.month,
        available_days=projection.available_count,
        days=[DayStatusOut(date=d, status=s.value) for d, s in projection.days],
    )


@router.get("/vehicles/{vehicle_id}/status/{day}", response_model=DayStatusOut, summary="Status of one day")
def get_day_status(vehicle_id: int, day: date, workflow: BookingWorkflow = Depends(get_workflow)):
    vehicle = workflow.store.read_vehicle(vehicle_id)
    return DayStatusOut(date=day, status=status_of(workflow.availability_for(vehicle), day).value)


@router.get("/vehicles/{vehicle_id}/calendar/{year}/{month}", response_model=MonthOut, summary="Month calendar")
def get_month(
    vehicle_id: int,
    year: int,
    month: int = Path(..., ge=1, le=12),
    workflow: BookingWorkflow = Depends(get_workflow),
):
    vehicle = workflow.store.read_vehicle(vehicle_id)
    days = project_month(workflow.availability_for(vehicle), year, month)
    return _month_out(MonthProjection(year=year, month=month, days=days))


@router.get("/vehicles/{vehicle_id}/calendar-summary", response_model=CalendarSummaryOut,
            summary="Compact multi-month summary for listing cards")
def get_calendar_summary(
    vehicle_id: int,
    months: Optional[int] = Query(None, ge=1, le=12),
    workflow: BookingWorkflow = Depends(get_workflow),
):
    """Starts at the current month in the vehicle's timezone."""
    vehicle = workflow.store.read_vehicle(vehicle_id)
    bookings = workflow.store.read_bookings(vehicle.id)
    today = workflow.today_for(vehicle)
    availability = workflow.availability_for(vehicle)
    projections = project_months(availability, today.year, today.month, months or settings.CALENDAR_SUMMARY_MONTHS)
    return CalendarSummaryOut(
        vehicle_id=vehicle.id,
        months=[_month_out(p) for p in projections],
        next_return_date=next_return_date(bookings, today),
    )


@router.get("/vehicles/{vehicle_id}/bookable", response_model=BookabilityOut, summary="Check a date range")
def check_bookable(
    vehicle_id: int,
    start_date: date,
    end_date: date,
    workflow: BookingWorkflow = Depends(get_workflow),
):
    vehicle = workflow.store.read_vehicle(vehicle_id)
    result = is_bookable(workflow.availability_for(vehicle), start_date, end_date, workflow.today_for(vehicle))
    return BookabilityOut(
        vehicle_id=vehicle.id, start_date=start_date, end_date=end_date,
        ok=result.ok, blocking_dates=result.blocking_dates,
    )


@router.get("/vehicles/{vehicle_id}/disabled-dates", response_model=DisabledDatesOut,
            summary="Dates a date picker must grey out")
def get_disabled_dates(
    vehicle_id: int,
    horizon_days: Optional[int] = Query(None, ge=0, le=730),
    workflow: BookingWorkflow = Depends(get_workflow),
):
    vehicle = workflow.store.read_vehicle(vehicle_id)
    disabled = disabled_date_set(
        workflow.availability_for(vehicle),
        settings.CALENDAR_HORIZON_DAYS if horizon_days is None else horizon_days,
        workflow.today_for(vehicle),
    )
    return DisabledDatesOut(
        vehicle_id=vehicle.id,
        disabled_before=disabled.before,
        horizon_end=disabled.horizon_end,
        dates=disabled.sorted_dates(),
    )
