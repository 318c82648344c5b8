from fastapi import BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app.admission import BookingAdmissionController
from app.db import get_db
from app.lifecycle import BookingLifecycleManager, UnavailabilityManager
from app.notifications import BackgroundDispatcher
from app.timeutil import business_now


def get_clock():
    """Returns the clock callable; overridden in tests to pin "now"."""
    return business_now


def get_dispatcher(background_tasks: BackgroundTasks):
    return BackgroundDispatcher(background_tasks)


def get_admission_controller(
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    dispatcher=Depends(get_dispatcher),
) -> BookingAdmissionController:
    return BookingAdmissionController(db, clock=clock, dispatcher=dispatcher)


def get_lifecycle_manager(db: Session = Depends(get_db), clock=Depends(get_clock)) -> BookingLifecycleManager:
    return BookingLifecycleManager(db, clock=clock)


def get_unavailability_manager(db: Session = Depends(get_db)) -> UnavailabilityManager:
    return UnavailabilityManager(db)
