# rento/models/booking.py
"""
Rental requests and their lifecycle.
start_date / end_date are inclusive calendar days; pickup/return times are
display metadata only and never take part in conflict checks.
"""

import enum

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from rento.database import Base


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


# Statuses that no longer hold the vehicle's calendar.
RELEASED_STATUSES = frozenset({BookingStatus.CANCELLED.value, BookingStatus.REJECTED.value})


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    requester_id = Column(String(100), nullable=False, index=True)
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    pickup_time = Column(String(5))
    return_time = Column(String(5))
    location = Column(String(200))
    message = Column(Text)
    prefer_whatsapp = Column(Boolean, default=False, nullable=False)
    decision_reason = Column(Text)           # host's reason on reject
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    vehicle = relationship("Vehicle", back_populates="bookings")

    @property
    def occupies_calendar(self) -> bool:
        return self.status not in RELEASED_STATUSES

    def __repr__(self):
        return f"<Booking {self.id} vehicle={self.vehicle_id} {self.start_date}..{self.end_date} status={self.status}>"
