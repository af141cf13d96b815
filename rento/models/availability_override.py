# rento/models/availability_override.py
"""
Per-date exceptions to a vehicle's weekly schedule.
One row per (vehicle, date); hosts upsert, last write wins.
"""

from sqlalchemy import Column, Integer, Boolean, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from rento.database import Base


class CustomAvailabilityOverride(Base):
    __tablename__ = "availability_overrides"
    __table_args__ = (UniqueConstraint("vehicle_id", "date", name="uq_override_vehicle_date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    available = Column(Boolean, nullable=False)
    updated_at = Column(DateTime)

    vehicle = relationship("Vehicle", back_populates="overrides")

    def __repr__(self):
        return f"<Override vehicle={self.vehicle_id} {self.date} available={self.available}>"
