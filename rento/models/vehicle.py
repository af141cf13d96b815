# rento/models/vehicle.py
"""
Vehicles listed by hosts.
Carries the weekly schedule inline (days + daily open/close) and owns the
per-date overrides and bookings used by the availability model.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import relationship
from rento.database import Base

ALL_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    host_id = Column(String(100), nullable=False, index=True)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer)
    location = Column(String(200))
    pickup_timezone = Column(String(64))             # IANA name, falls back to DEFAULT_TIMEZONE
    available_days = Column(JSON, nullable=False, default=lambda: list(ALL_DAYS))
    open_time = Column(String(5), nullable=False, default="08:00")    # HH:MM local
    close_time = Column(String(5), nullable=False, default="20:00")   # HH:MM local
    created_at = Column(DateTime)

    overrides = relationship(
        "CustomAvailabilityOverride", back_populates="vehicle",
        cascade="all, delete-orphan", order_by="CustomAvailabilityOverride.date",
    )
    bookings = relationship("Booking", back_populates="vehicle")

    def __repr__(self):
        return f"<Vehicle {self.id} {self.make} {self.model} host={self.host_id}>"
