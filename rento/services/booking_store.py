# rento/services/booking_store.py
"""
SQLAlchemy-backed persistence for the booking workflow.

All engine state lives here; the workflow holds nothing between calls.
Write failures roll the session back and surface as BookingWriteError so a
half-written booking never escapes.
"""

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rento.exceptions import BookingWriteError, NotFoundError
from rento.models.booking import Booking, BookingStatus
from rento.models.vehicle import Vehicle
from rento.utils.logger import get_logger

logger = get_logger(__name__)


class SqlBookingStore:
    def __init__(self, db: Session):
        self.db = db

    def read_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = self.db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
        if not vehicle:
            raise NotFoundError("vehicle", vehicle_id)
        return vehicle

    def read_bookings(self, vehicle_id: int) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.vehicle_id == vehicle_id)
            .order_by(Booking.start_date, Booking.id)
            .all()
        )

    def read_booking(self, booking_id: int) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("booking", booking_id)
        return booking

    def write_booking(self, booking: Booking) -> Booking:
        now = datetime.utcnow()
        booking.created_at = booking.created_at or now
        booking.updated_at = now
        try:
            self.db.add(booking)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Booking write failed for vehicle {booking.vehicle_id}: {e}", exc_info=True)
            raise BookingWriteError() from e
        self.db.refresh(booking)
        return booking

    def update_booking_status(self, booking_id: int, new_status: str, reason: Optional[str] = None) -> Booking:
        booking = self.read_booking(booking_id)
        booking.status = new_status
        booking.updated_at = datetime.utcnow()
        if reason is not None:
            booking.decision_reason = reason
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Status update to '{new_status}' failed for booking {booking_id}: {e}", exc_info=True)
            raise BookingWriteError(f"Could not update booking {booking_id}") from e
        self.db.refresh(booking)
        return booking

    def list_elapsed_confirmed(self, as_of: date) -> List[Booking]:
        """Confirmed bookings whose return day is already behind ``as_of``."""
        return (
            self.db.query(Booking)
            .filter(
                Booking.status == BookingStatus.CONFIRMED.value,
                Booking.end_date < as_of,
            )
            .order_by(Booking.end_date, Booking.id)
            .all()
        )
