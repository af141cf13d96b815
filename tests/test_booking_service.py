# tests/test_booking_service.py
"""Unit tests for the booking submission workflow and state machine."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import AsyncMock
from datetime import date, datetime
from rento.exceptions import (
    AuthenticationRequiredError,
    BookingWriteError,
    DateConflictError,
    InvalidTransitionError,
    NotFoundError,
    PastDateError,
    PermissionDeniedError,
    StaleConfirmationError,
)
from rento.models.booking import Booking
from rento.models.vehicle import Vehicle
from rento.services.booking_service import BookingMetadata, BookingWorkflow, can_transition
from rento.services.identity import Identity
from rento.services.notification_service import NotificationResult
from rento.utils.clock import FixedClock

HOST = Identity("host-1")
RENTER = Identity("renter-1")
OTHER_RENTER = Identity("renter-2")
TODAY = date(2024, 6, 1)


class FakeStore:
    """In-memory stand-in for SqlBookingStore."""

    def __init__(self, vehicle, bookings=()):
        self.vehicle = vehicle
        self.bookings = {b.id: b for b in bookings}
        self.fail_writes = False

    def read_vehicle(self, vehicle_id):
        if vehicle_id != self.vehicle.id:
            raise NotFoundError("vehicle", vehicle_id)
        return self.vehicle

    def read_bookings(self, vehicle_id):
        return [b for b in self.bookings.values() if b.vehicle_id == vehicle_id]

    def read_booking(self, booking_id):
        if booking_id not in self.bookings:
            raise NotFoundError("booking", booking_id)
        return self.bookings[booking_id]

    def write_booking(self, booking):
        if self.fail_writes:
            raise BookingWriteError()
        booking.id = max(self.bookings, default=0) + 1
        self.bookings[booking.id] = booking
        return booking

    def update_booking_status(self, booking_id, new_status, reason=None):
        booking = self.read_booking(booking_id)
        booking.status = new_status
        if reason is not None:
            booking.decision_reason = reason
        return booking

    def list_elapsed_confirmed(self, as_of):
        return [b for b in self.bookings.values() if b.status == "confirmed" and b.end_date < as_of]


class StaleSnapshotStore(FakeStore):
    """Every availability read sees the bookings as they were at construction."""

    def __init__(self, vehicle, bookings=()):
        super().__init__(vehicle, bookings)
        self._snapshot = list(self.bookings.values())

    def read_bookings(self, vehicle_id):
        return list(self._snapshot)


def make_vehicle(pickup_timezone=None):
    return Vehicle(
        id=1, host_id=HOST.user_id, make="Dacia", model="Logan", year=2022, location="Casablanca",
        pickup_timezone=pickup_timezone,
        available_days=["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"],
        open_time="08:00", close_time="20:00", overrides=[],
    )


def make_booking(booking_id, start, end, status="pending", requester=RENTER.user_id):
    return Booking(id=booking_id, vehicle_id=1, requester_id=requester,
                   start_date=start, end_date=end, status=status, prefer_whatsapp=False)


def make_workflow(bookings=(), store_cls=FakeStore, notify_result=None):
    store = store_cls(make_vehicle(), bookings)
    notifier = AsyncMock()
    notifier.notify.return_value = notify_result or NotificationResult(success=True, channel_used="email")
    return BookingWorkflow(store, notifier, FixedClock.on(TODAY)), store, notifier


class TestSubmit:
    @pytest.mark.asyncio
    async def test_creates_pending_booking_and_notifies(self):
        workflow, store, notifier = make_workflow()

        result = await workflow.submit(1, RENTER, date(2024, 6, 10), date(2024, 6, 12),
                                       BookingMetadata(pickup_time="10:00", message="Hi"))

        assert result.booking.status == "pending"
        assert result.booking.requester_id == RENTER.user_id
        assert result.booking.location == "Casablanca"
        assert result.notification.success is True
        assert len(store.bookings) == 1
        notifier.notify.assert_awaited_once()
        booking_id, channel, payload = notifier.notify.call_args[0]
        assert booking_id == result.booking.id
        assert channel == "email"
        assert payload["start_date"] == "2024-06-10"

    @pytest.mark.asyncio
    async def test_whatsapp_preference_picks_channel(self):
        workflow, _, notifier = make_workflow()
        await workflow.submit(1, RENTER, date(2024, 6, 10), date(2024, 6, 12),
                              BookingMetadata(prefer_whatsapp=True))
        assert notifier.notify.call_args[0][1] == "whatsapp"

    @pytest.mark.asyncio
    async def test_accepts_timestamps_on_same_day(self):
        workflow, _, _ = make_workflow()
        result = await workflow.submit(1, RENTER, "2024-06-10T09:30:00", "2024-06-12T18:00:00")
        assert (result.booking.start_date, result.booking.end_date) == (date(2024, 6, 10), date(2024, 6, 12))

    @pytest.mark.asyncio
    async def test_conflict_raises_without_writing(self):
        workflow, store, notifier = make_workflow([make_booking(1, date(2024, 8, 10), date(2024, 8, 12))])

        with pytest.raises(DateConflictError) as exc:
            await workflow.submit(1, OTHER_RENTER, date(2024, 8, 11), date(2024, 8, 13))

        assert exc.value.blocking_dates == [date(2024, 8, 11), date(2024, 8, 12)]
        assert exc.value.details["blocking_dates"] == ["2024-08-11", "2024-08-12"]
        assert len(store.bookings) == 1
        notifier.notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_anonymous_requester_rejected(self):
        workflow, store, _ = make_workflow()
        with pytest.raises(AuthenticationRequiredError):
            await workflow.submit(1, None, date(2024, 6, 10), date(2024, 6, 12))
        assert store.bookings == {}

    @pytest.mark.asyncio
    async def test_dates_checked_before_identity(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 8, 10), date(2024, 8, 12))])
        with pytest.raises(DateConflictError):
            await workflow.submit(1, None, date(2024, 8, 11), date(2024, 8, 13))

    @pytest.mark.asyncio
    async def test_past_start_rejected(self):
        workflow, _, _ = make_workflow()
        with pytest.raises(PastDateError):
            await workflow.submit(1, RENTER, date(2024, 5, 30), date(2024, 6, 2))

    @pytest.mark.asyncio
    async def test_unknown_vehicle(self):
        workflow, _, _ = make_workflow()
        with pytest.raises(NotFoundError):
            await workflow.submit(99, RENTER, date(2024, 6, 10), date(2024, 6, 12))

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_booking(self):
        workflow, store, _ = make_workflow(notify_result=NotificationResult(success=False))

        result = await workflow.submit(1, RENTER, date(2024, 6, 10), date(2024, 6, 12))

        assert result.notification.success is False
        assert result.notification.channel_used == "none"
        assert store.bookings[result.booking.id].status == "pending"

    @pytest.mark.asyncio
    async def test_notifier_exception_is_advisory(self):
        workflow, store, notifier = make_workflow()
        notifier.notify.side_effect = RuntimeError("webhook exploded")

        result = await workflow.submit(1, RENTER, date(2024, 6, 10), date(2024, 6, 12))

        assert result.notification.success is False
        assert result.booking.id in store.bookings

    @pytest.mark.asyncio
    async def test_write_failure_propagates_and_skips_notification(self):
        workflow, store, notifier = make_workflow()
        store.fail_writes = True

        with pytest.raises(BookingWriteError):
            await workflow.submit(1, RENTER, date(2024, 6, 10), date(2024, 6, 12))

        assert store.bookings == {}
        notifier.notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancelled_booking_frees_dates(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 1), date(2024, 6, 5))])

        with pytest.raises(DateConflictError):
            await workflow.submit(1, OTHER_RENTER, date(2024, 6, 2), date(2024, 6, 3))

        await workflow.cancel(1, RENTER)
        result = await workflow.submit(1, OTHER_RENTER, date(2024, 6, 2), date(2024, 6, 3))
        assert result.booking.status == "pending"


class TestConfirm:
    @pytest.mark.asyncio
    async def test_host_confirms_pending(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        booking = await workflow.confirm(1, HOST)
        assert booking.status == "confirmed"

    @pytest.mark.asyncio
    async def test_scenario_d_second_confirm_is_stale(self):
        workflow, store, _ = make_workflow([
            make_booking(1, date(2024, 6, 10), date(2024, 6, 14), requester=RENTER.user_id),
            make_booking(2, date(2024, 6, 13), date(2024, 6, 16), requester=OTHER_RENTER.user_id),
        ])

        await workflow.confirm(1, HOST)
        with pytest.raises(StaleConfirmationError) as exc:
            await workflow.confirm(2, HOST)

        assert exc.value.blocking_dates == [date(2024, 6, 13), date(2024, 6, 14)]
        assert exc.value.conflicting_ids == [1]
        assert store.bookings[2].status == "pending"

    @pytest.mark.asyncio
    async def test_race_at_pending_resolved_at_confirm(self):
        workflow, store, _ = make_workflow(store_cls=StaleSnapshotStore)

        first = await workflow.submit(1, RENTER, date(2024, 6, 10), date(2024, 6, 12))
        second = await workflow.submit(1, OTHER_RENTER, date(2024, 6, 11), date(2024, 6, 13))
        assert first.booking.status == second.booking.status == "pending"

        # Confirm re-reads fresh bookings
        store.read_bookings = lambda vehicle_id: list(store.bookings.values())
        await workflow.confirm(first.booking.id, HOST)
        with pytest.raises(StaleConfirmationError):
            await workflow.confirm(second.booking.id, HOST)

        rejected = await workflow.reject(second.booking.id, HOST, "Dates already taken")
        assert rejected.status == "rejected"

    @pytest.mark.asyncio
    async def test_overlapping_pending_does_not_block_confirm(self):
        workflow, _, _ = make_workflow([
            make_booking(1, date(2024, 6, 10), date(2024, 6, 14)),
            make_booking(2, date(2024, 6, 12), date(2024, 6, 16)),
        ])
        assert (await workflow.confirm(2, HOST)).status == "confirmed"

    @pytest.mark.asyncio
    async def test_cancelled_confirmed_booking_does_not_block(self):
        workflow, _, _ = make_workflow([
            make_booking(1, date(2024, 6, 10), date(2024, 6, 14), status="cancelled"),
            make_booking(2, date(2024, 6, 12), date(2024, 6, 16)),
        ])
        assert (await workflow.confirm(2, HOST)).status == "confirmed"

    @pytest.mark.asyncio
    async def test_only_host_may_confirm(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        with pytest.raises(PermissionDeniedError):
            await workflow.confirm(1, RENTER)
        with pytest.raises(AuthenticationRequiredError):
            await workflow.confirm(1, None)

    @pytest.mark.asyncio
    async def test_cannot_confirm_twice(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12), status="confirmed")])
        with pytest.raises(InvalidTransitionError):
            await workflow.confirm(1, HOST)

    @pytest.mark.asyncio
    async def test_unknown_booking(self):
        workflow, _, _ = make_workflow()
        with pytest.raises(NotFoundError):
            await workflow.confirm(42, HOST)


class TestRejectAndCancel:
    @pytest.mark.asyncio
    async def test_reject_records_reason(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        booking = await workflow.reject(1, HOST, "Car in service")
        assert booking.status == "rejected"
        assert booking.decision_reason == "Car in service"

    @pytest.mark.asyncio
    async def test_cannot_reject_confirmed(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12), status="confirmed")])
        with pytest.raises(InvalidTransitionError):
            await workflow.reject(1, HOST)

    @pytest.mark.asyncio
    async def test_renter_cancels_confirmed(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12), status="confirmed")])
        assert (await workflow.cancel(1, RENTER)).status == "cancelled"

    @pytest.mark.asyncio
    async def test_host_cancels_pending(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        assert (await workflow.cancel(1, HOST)).status == "cancelled"

    @pytest.mark.asyncio
    async def test_stranger_cannot_cancel(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        with pytest.raises(PermissionDeniedError):
            await workflow.cancel(1, OTHER_RENTER)

    @pytest.mark.asyncio
    async def test_terminal_states_are_final(self):
        workflow, _, _ = make_workflow([
            make_booking(1, date(2024, 5, 10), date(2024, 5, 12), status="completed"),
            make_booking(2, date(2024, 6, 10), date(2024, 6, 12), status="rejected"),
        ])
        with pytest.raises(InvalidTransitionError):
            await workflow.cancel(1, RENTER)
        with pytest.raises(InvalidTransitionError):
            await workflow.cancel(2, RENTER)


class TestLifecycle:
    def test_transition_table(self):
        assert can_transition("pending", "confirmed")
        assert can_transition("pending", "rejected")
        assert can_transition("pending", "cancelled")
        assert can_transition("confirmed", "completed")
        assert can_transition("confirmed", "cancelled")
        assert not can_transition("pending", "completed")
        assert not can_transition("confirmed", "rejected")
        assert not can_transition("cancelled", "pending")

    @pytest.mark.asyncio
    async def test_complete_elapsed(self):
        workflow, store, _ = make_workflow([
            make_booking(1, date(2024, 5, 20), date(2024, 5, 25), status="confirmed"),
            make_booking(2, date(2024, 5, 28), date(2024, 6, 1), status="confirmed"),
            make_booking(3, date(2024, 5, 20), date(2024, 5, 22), status="pending"),
        ])

        completed = await workflow.complete_elapsed()

        assert [b.id for b in completed] == [1]
        assert store.bookings[2].status == "confirmed"   # returns today
        assert store.bookings[3].status == "pending"

    @pytest.mark.asyncio
    async def test_complete_elapsed_uses_vehicle_local_day(self):
        # 20:00 UTC on June 2 is already June 3 on Kiritimati (UTC+14)
        store = FakeStore(make_vehicle("Pacific/Kiritimati"), [
            make_booking(1, date(2024, 5, 30), date(2024, 6, 2), status="confirmed"),
            make_booking(2, date(2024, 6, 1), date(2024, 6, 3), status="confirmed"),
        ])
        workflow = BookingWorkflow(store, AsyncMock(), FixedClock(datetime(2024, 6, 2, 20, 0)))

        completed = await workflow.complete_elapsed()

        assert [b.id for b in completed] == [1]
        assert store.bookings[2].status == "confirmed"

    @pytest.mark.asyncio
    async def test_complete_elapsed_behind_utc(self):
        # 05:00 UTC on June 2 is still June 1 in New York
        store = FakeStore(make_vehicle("America/New_York"), [
            make_booking(1, date(2024, 5, 30), date(2024, 6, 1), status="confirmed"),
        ])
        workflow = BookingWorkflow(store, AsyncMock(), FixedClock(datetime(2024, 6, 2, 5, 0)))

        assert await workflow.complete_elapsed() == []
        assert store.bookings[1].status == "confirmed"

    @pytest.mark.asyncio
    async def test_complete_elapsed_explicit_date(self):
        workflow, store, _ = make_workflow([
            make_booking(1, date(2024, 5, 28), date(2024, 6, 1), status="confirmed"),
        ])
        completed = await workflow.complete_elapsed(as_of=date(2024, 6, 2))
        assert [b.id for b in completed] == [1]

    @pytest.mark.asyncio
    async def test_resend_notification(self):
        workflow, _, notifier = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        result = await workflow.resend_notification(1, RENTER)
        assert result.success is True
        notifier.notify.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_resend_on_other_channel(self):
        workflow, _, notifier = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        await workflow.resend_notification(1, HOST, channel="whatsapp")
        assert notifier.notify.call_args[0][1] == "whatsapp"

    @pytest.mark.asyncio
    async def test_resend_requires_party(self):
        workflow, _, _ = make_workflow([make_booking(1, date(2024, 6, 10), date(2024, 6, 12))])
        with pytest.raises(PermissionDeniedError):
            await workflow.resend_notification(1, OTHER_RENTER)
