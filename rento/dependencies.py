# rento/dependencies.py
"""FastAPI dependencies shared by the routers. Tests override these."""

from fastapi import Depends
from sqlalchemy.orm import Session

from rento.database import get_db
from rento.services.booking_service import BookingWorkflow
from rento.services.booking_store import SqlBookingStore
from rento.services.notification_service import NotificationDispatcher
from rento.utils.clock import Clock


def get_clock() -> Clock:
    return Clock()


def get_notifier() -> NotificationDispatcher:
    return NotificationDispatcher()


def get_store(db: Session = Depends(get_db)) -> SqlBookingStore:
    return SqlBookingStore(db)


def get_workflow(
    store: SqlBookingStore = Depends(get_store),
    notifier: NotificationDispatcher = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> BookingWorkflow:
    return BookingWorkflow(store, notifier, clock)
