# rento/routers/bookings.py
"""
Booking requests and host decisions.
POST /vehicles/{id}/bookings — renter submits a request (lands as pending)
POST /bookings/{id}/confirm|reject — host decides
POST /bookings/{id}/cancel — renter or host withdraws
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from rento.dependencies import get_workflow
from rento.schemas.booking import (
    BookingCreate,
    BookingOut,
    CompletedOut,
    NotificationOut,
    RejectIn,
    SubmissionOut,
)
from rento.services.booking_service import BookingMetadata, BookingWorkflow
from rento.services.identity import Identity, current_requester

router = APIRouter()


@router.post("/vehicles/{vehicle_id}/bookings", response_model=SubmissionOut,
             status_code=201, summary="Request a booking")
async def submit_booking(
    vehicle_id: int,
    body: BookingCreate,
    workflow: BookingWorkflow = Depends(get_workflow),
    identity: Optional[Identity] = Depends(current_requester),
):
    """
    Creates a pending booking if every requested day is open.
    `notification.success=false` means the host was not told yet; the
    booking itself is still valid and the notify endpoint can retry.
    """
    result = await workflow.submit(
        vehicle_id, identity, body.start_date, body.end_date,
        BookingMetadata(
            pickup_time=body.pickup_time,
            return_time=body.return_time,
            location=body.location,
            message=body.message,
            prefer_whatsapp=body.prefer_whatsapp,
        ),
    )
    return SubmissionOut(
        booking=BookingOut.model_validate(result.booking),
        notification=NotificationOut.model_validate(result.notification),
    )


@router.get("/vehicles/{vehicle_id}/bookings", response_model=list[BookingOut])
def list_vehicle_bookings(vehicle_id: int, status: Optional[str] = None,
                          workflow: BookingWorkflow = Depends(get_workflow)):
    workflow.store.read_vehicle(vehicle_id)
    bookings = workflow.store.read_bookings(vehicle_id)
    if status:
        bookings = [b for b in bookings if b.status == status]
    return bookings


@router.get("/bookings/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int, workflow: BookingWorkflow = Depends(get_workflow)):
    return workflow.store.read_booking(booking_id)


@router.post("/bookings/{booking_id}/confirm", response_model=BookingOut, summary="Host confirms a request")
async def confirm_booking(
    booking_id: int,
    workflow: BookingWorkflow = Depends(get_workflow),
    identity: Optional[Identity] = Depends(current_requester),
):
    """Fails with 409 STALE_CONFIRMATION if an overlapping booking was confirmed first."""
    return await workflow.confirm(booking_id, identity)


@router.post("/bookings/{booking_id}/reject", response_model=BookingOut, summary="Host rejects a request")
async def reject_booking(
    booking_id: int,
    body: Optional[RejectIn] = None,
    workflow: BookingWorkflow = Depends(get_workflow),
    identity: Optional[Identity] = Depends(current_requester),
):
    return await workflow.reject(booking_id, identity, body.reason if body else None)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut, summary="Renter or host cancels")
async def cancel_booking(
    booking_id: int,
    workflow: BookingWorkflow = Depends(get_workflow),
    identity: Optional[Identity] = Depends(current_requester),
):
    return await workflow.cancel(booking_id, identity)


@router.post("/bookings/{booking_id}/notify", response_model=NotificationOut, summary="Resend host notification")
async def resend_notification(
    booking_id: int,
    channel: Optional[str] = Query(None, pattern="^(whatsapp|email)$"),
    workflow: BookingWorkflow = Depends(get_workflow),
    identity: Optional[Identity] = Depends(current_requester),
):
    """`channel` defaults to the renter's stated preference."""
    return NotificationOut.model_validate(await workflow.resend_notification(booking_id, identity, channel))


@router.post("/bookings/complete-elapsed", response_model=CompletedOut,
             summary="Mark confirmed bookings past their return date as completed")
async def complete_elapsed(as_of: Optional[date] = None, workflow: BookingWorkflow = Depends(get_workflow)):
    completed = await workflow.complete_elapsed(as_of)
    return CompletedOut(as_of=as_of, completed=[BookingOut.model_validate(b) for b in completed])
