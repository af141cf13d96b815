# rento/exceptions.py
"""
Domain errors raised by the availability and booking engine.

Each error carries a human-readable message, a stable code, and a details
dict (blocking dates, ids) that the API layer returns verbatim.
"""

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from fastapi import status


def _iso_dates(dates: Iterable[date]) -> List[str]:
    return [d.isoformat() for d in dates]


class BookingEngineError(Exception):
    """Base class for every error the engine raises on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, "details": self.details}


# ── Validation (400) ────────────────────────────────────────────────────────

class InvalidRangeError(BookingEngineError):
    """End date is not after the start date."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, start: date, end: date, message: Optional[str] = None):
        self.start = start
        self.end = end
        super().__init__(
            message or f"End date {end} must be after start date {start}",
            code="INVALID_RANGE",
            details={"start_date": start.isoformat(), "end_date": end.isoformat()},
        )


class PastDateError(BookingEngineError):
    """Start date lies before today in the vehicle's timezone."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, start: date, today: date):
        self.start = start
        self.today = today
        super().__init__(
            f"Start date {start} is in the past (today is {today})",
            code="PAST_DATE",
            details={"start_date": start.isoformat(), "today": today.isoformat()},
        )


class ScheduleValidationError(BookingEngineError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_SCHEDULE", details=details)


# ── Identity (401 / 403) ────────────────────────────────────────────────────

class AuthenticationRequiredError(BookingEngineError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "You must be signed in to do this"):
        super().__init__(message, code="AUTHENTICATION_REQUIRED")


class PermissionDeniedError(BookingEngineError):
    """Caller is signed in but is not a party allowed to act on this booking."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="PERMISSION_DENIED", details=details)


# ── Lookup (404) ────────────────────────────────────────────────────────────

class NotFoundError(BookingEngineError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            f"{resource.capitalize()} '{resource_id}' not found",
            code="NOT_FOUND",
            details={"resource": resource, "id": resource_id},
        )


# ── Conflicts (409) ─────────────────────────────────────────────────────────

class DateConflictError(BookingEngineError):
    """Requested range overlaps booked or closed days."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, blocking_dates: Iterable[date]):
        self.blocking_dates = sorted(blocking_dates)
        super().__init__(
            f"Vehicle is not available on {len(self.blocking_dates)} of the requested day(s)",
            code="DATE_CONFLICT",
            details={"blocking_dates": _iso_dates(self.blocking_dates)},
        )


class StaleConfirmationError(BookingEngineError):
    """
    A confirm lost the race: another booking covering some of the same days
    was confirmed first. The host has to reject this request manually.
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, booking_id: int, blocking_dates: Iterable[date], conflicting_ids: Iterable[int] = ()):
        self.booking_id = booking_id
        self.blocking_dates = sorted(blocking_dates)
        self.conflicting_ids = sorted(conflicting_ids)
        super().__init__(
            f"Booking {booking_id} overlaps an already confirmed booking",
            code="STALE_CONFIRMATION",
            details={
                "booking_id": booking_id,
                "blocking_dates": _iso_dates(self.blocking_dates),
                "conflicting_booking_ids": self.conflicting_ids,
            },
        )


class InvalidTransitionError(BookingEngineError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, booking_id: int, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(
            f"Booking {booking_id} cannot move from '{current}' to '{target}'",
            code="INVALID_TRANSITION",
            details={"booking_id": booking_id, "current_status": current, "target_status": target},
        )


# ── Persistence (503) ───────────────────────────────────────────────────────

class BookingWriteError(BookingEngineError):
    """
    The persistence layer failed or timed out. Callers must re-query the
    booking list before assuming nothing was written.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Could not save the booking, please check your trips before retrying"):
        super().__init__(message, code="BOOKING_WRITE_FAILED")
