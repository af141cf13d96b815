# rento/schemas/booking.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional

from rento.utils.dates import HHMM_PATTERN


class BookingCreate(BaseModel):
    start_date: date
    end_date: date
    pickup_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)   # display only
    return_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)   # display only
    location: Optional[str] = None
    message: Optional[str] = None
    prefer_whatsapp: bool = False


class BookingOut(BaseModel):
    id: int
    vehicle_id: int
    requester_id: str
    start_date: date
    end_date: date
    status: str
    pickup_time: Optional[str]
    return_time: Optional[str]
    location: Optional[str]
    message: Optional[str]
    prefer_whatsapp: bool
    decision_reason: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class NotificationOut(BaseModel):
    success: bool
    channel_used: str

    class Config:
        from_attributes = True


class SubmissionOut(BaseModel):
    booking: BookingOut
    notification: NotificationOut

    class Config:
        from_attributes = True


class RejectIn(BaseModel):
    reason: Optional[str] = None


class CompletedOut(BaseModel):
    as_of: Optional[date] = None     # None: each vehicle judged by its own local today
    completed: List[BookingOut]
