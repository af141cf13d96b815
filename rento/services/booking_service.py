# rento/services/booking_service.py
"""
Booking submission workflow and booking state machine.

    pending → confirmed → completed
    pending → rejected
    pending | confirmed → cancelled

submit() checks the range, writes a pending booking, then notifies the host.
The check and the write are not atomic: two renters can both land a pending
request for the same days. That race is settled in confirm(), which refuses
to confirm over another confirmed booking (StaleConfirmationError) so the
host rejects the loser by hand.

Persistence and notification calls are awaited one after the other. A
notification failure is reported in the result and never undoes the booking.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from rento.exceptions import (
    DateConflictError,
    InvalidTransitionError,
    PermissionDeniedError,
    StaleConfirmationError,
)
from rento.models.booking import Booking, BookingStatus
from rento.services.availability_service import VehicleAvailability, build_availability
from rento.services.conflict_checker import is_bookable
from rento.services.identity import Identity, require_host, require_identity
from rento.services.notification_service import NotificationDispatcher, NotificationResult, channel_for
from rento.services.vehicle_service import vehicle_timezone
from rento.utils.clock import Clock
from rento.utils.dates import DateLike, days_in_range, normalize, ranges_overlap
from rento.utils.logger import get_logger

logger = get_logger(__name__)

PENDING = BookingStatus.PENDING.value
CONFIRMED = BookingStatus.CONFIRMED.value
COMPLETED = BookingStatus.COMPLETED.value
CANCELLED = BookingStatus.CANCELLED.value
REJECTED = BookingStatus.REJECTED.value

TRANSITIONS = {
    PENDING: {CONFIRMED, REJECTED, CANCELLED},
    CONFIRMED: {COMPLETED, CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
    REJECTED: set(),
}


@dataclass
class BookingMetadata:
    pickup_time: Optional[str] = None
    return_time: Optional[str] = None
    location: Optional[str] = None
    message: Optional[str] = None
    prefer_whatsapp: bool = False


@dataclass
class SubmissionResult:
    booking: Booking
    notification: NotificationResult = field(default_factory=lambda: NotificationResult(success=False))


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def _check_transition(booking: Booking, target: str):
    if not can_transition(booking.status, target):
        raise InvalidTransitionError(booking.id, booking.status, target)


def _require_party(booking: Booking, vehicle, identity: Optional[Identity]) -> Identity:
    """Renter or host of the booking."""
    identity = require_identity(identity)
    if identity.user_id not in (booking.requester_id, vehicle.host_id):
        raise PermissionDeniedError(
            f"Only the renter or host can act on booking {booking.id}",
            {"booking_id": booking.id},
        )
    return identity


def _notification_payload(booking: Booking, vehicle) -> dict:
    return {
        "car_name": f"{vehicle.make} {vehicle.model}" + (f" ({vehicle.year})" if vehicle.year else ""),
        "start_date": booking.start_date.isoformat(),
        "end_date": booking.end_date.isoformat(),
        "pickup_time": booking.pickup_time,
        "return_time": booking.return_time,
        "location": booking.location,
        "renter_id": booking.requester_id,
        "host_id": vehicle.host_id,
    }


class BookingWorkflow:
    def __init__(self, store, notifier: Optional[NotificationDispatcher] = None, clock: Optional[Clock] = None):
        self.store = store
        self.notifier = notifier or NotificationDispatcher()
        self.clock = clock or Clock()

    def availability_for(self, vehicle) -> VehicleAvailability:
        return build_availability(vehicle, self.store.read_bookings(vehicle.id))

    def today_for(self, vehicle) -> date:
        return self.clock.today(vehicle_timezone(vehicle))

    # ── Submission ────────────────────────────────────────────────────────

    async def submit(
        self,
        vehicle_id: int,
        requester: Optional[Identity],
        start_date: DateLike,
        end_date: DateLike,
        metadata: Optional[BookingMetadata] = None,
    ) -> SubmissionResult:
        metadata = metadata or BookingMetadata()
        vehicle = self.store.read_vehicle(vehicle_id)
        tz = vehicle_timezone(vehicle)
        start = normalize(start_date, tz)
        end = normalize(end_date, tz)

        check = is_bookable(self.availability_for(vehicle), start, end, self.clock.today(tz))
        if not check.ok:
            logger.warning(
                f"Booking request for vehicle {vehicle_id} {start}..{end} blocked on "
                f"{[d.isoformat() for d in check.blocking_dates]}"
            )
            raise DateConflictError(check.blocking_dates)

        requester = require_identity(requester)

        booking = self.store.write_booking(Booking(
            vehicle_id=vehicle.id,
            requester_id=requester.user_id,
            start_date=start,
            end_date=end,
            status=PENDING,
            pickup_time=metadata.pickup_time,
            return_time=metadata.return_time,
            location=metadata.location or vehicle.location,
            message=metadata.message,
            prefer_whatsapp=bool(metadata.prefer_whatsapp),
        ))
        logger.info(f"Booking {booking.id} pending: vehicle {vehicle.id} {start}..{end} renter={requester.user_id}")

        notification = await self._notify(booking, vehicle)
        return SubmissionResult(booking=booking, notification=notification)

    async def _notify(self, booking: Booking, vehicle, channel: Optional[str] = None) -> NotificationResult:
        channel = channel or channel_for(booking.prefer_whatsapp)
        try:
            return await self.notifier.notify(booking.id, channel, _notification_payload(booking, vehicle))
        except Exception as e:
            logger.warning(f"[NOTIFY] Booking {booking.id} saved but notification raised: {e}", exc_info=True)
            return NotificationResult(success=False)

    async def resend_notification(
        self, booking_id: int, actor: Optional[Identity], channel: Optional[str] = None
    ) -> NotificationResult:
        """Retry the host notification, optionally on a different channel than the renter's preference."""
        booking = self.store.read_booking(booking_id)
        vehicle = self.store.read_vehicle(booking.vehicle_id)
        _require_party(booking, vehicle, actor)
        return await self._notify(booking, vehicle, channel)

    # ── Host decisions ────────────────────────────────────────────────────

    async def confirm(self, booking_id: int, host: Optional[Identity]) -> Booking:
        booking = self.store.read_booking(booking_id)
        vehicle = self.store.read_vehicle(booking.vehicle_id)
        require_host(vehicle, host)
        _check_transition(booking, CONFIRMED)

        # Fresh snapshot minus this booking; only confirmed ranges can make it stale
        others = self.availability_for(vehicle).without_booking(booking.id)
        clashes = [
            other for other in others.bookings
            if other.status == CONFIRMED
            and ranges_overlap(booking.start_date, booking.end_date, other.start, other.end)
        ]
        if clashes:
            blocking = sorted({
                day
                for other in clashes
                for day in days_in_range(max(booking.start_date, other.start), min(booking.end_date, other.end))
            })
            clash_ids = [o.booking_id for o in clashes]
            logger.warning(
                f"Stale confirmation: booking {booking.id} overlaps confirmed {clash_ids} on vehicle {vehicle.id}"
            )
            raise StaleConfirmationError(booking.id, blocking, clash_ids)

        booking = self.store.update_booking_status(booking.id, CONFIRMED)
        logger.info(f"Booking {booking.id} confirmed by host {vehicle.host_id}")
        return booking

    async def reject(self, booking_id: int, host: Optional[Identity], reason: Optional[str] = None) -> Booking:
        booking = self.store.read_booking(booking_id)
        vehicle = self.store.read_vehicle(booking.vehicle_id)
        require_host(vehicle, host)
        _check_transition(booking, REJECTED)
        booking = self.store.update_booking_status(booking.id, REJECTED, reason=reason)
        logger.info(f"Booking {booking.id} rejected by host {vehicle.host_id}" + (f": {reason}" if reason else ""))
        return booking

    async def cancel(self, booking_id: int, actor: Optional[Identity]) -> Booking:
        booking = self.store.read_booking(booking_id)
        vehicle = self.store.read_vehicle(booking.vehicle_id)
        actor = _require_party(booking, vehicle, actor)
        _check_transition(booking, CANCELLED)
        booking = self.store.update_booking_status(booking.id, CANCELLED)
        logger.info(f"Booking {booking.id} cancelled by {actor.user_id}")
        return booking

    # ── Lifecycle sweep ───────────────────────────────────────────────────

    async def complete_elapsed(self, as_of: Optional[date] = None) -> List[Booking]:
        """
        Move confirmed bookings whose return day has passed to completed.

        With an explicit ``as_of`` every vehicle is judged against that date.
        Otherwise each booking is judged against today in its vehicle's
        pickup timezone.
        """
        if as_of is not None:
            candidates = self.store.list_elapsed_confirmed(as_of)
        else:
            # No timezone runs a full day ahead of UTC
            cutoff = self.clock.today("UTC") + timedelta(days=1)
            candidates = [
                b for b in self.store.list_elapsed_confirmed(cutoff)
                if b.end_date < self.today_for(self.store.read_vehicle(b.vehicle_id))
            ]

        completed = [self.store.update_booking_status(b.id, COMPLETED) for b in candidates]
        if completed:
            logger.info(
                f"Completed {len(completed)} booking(s) ending before "
                f"{as_of or 'local today'}: {[b.id for b in completed]}"
            )
        return completed
