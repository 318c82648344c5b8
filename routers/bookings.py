from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.admission import BookingAdmissionController
from app.availability import build_calendar, get_taken_and_blocked_slots
from app.db import get_db
from app.dependencies import get_admission_controller, get_clock
from app.schemas import BookingCreate

router = APIRouter()


@router.get("/bookings")
def list_taken_slots(db: Session = Depends(get_db)):
    """
    Slots the booking form must disable:
      - every pending booking's (date, timeframe)
      - every blocked slot, with "all" expanded to morning and afternoon
    """
    return {"bookings": get_taken_and_blocked_slots(db)}


@router.post("/bookings", status_code=201)
def create_booking(
    body: BookingCreate,
    controller: BookingAdmissionController = Depends(get_admission_controller),
):
    """
    Admit a booking request as pending if, in order:
      - the slot starts at least 24 hours from now (400)
      - the date is inside the booking horizon (400)
      - no pending booking holds the slot (409)
      - the slot is not blocked (409)
    The SMS to the business runs after the response is sent.
    """
    booking = controller.submit_booking(body)
    return {"booking": booking.to_dict()}


@router.get("/availability")
def get_availability(
    context: str = Query(default="booking", pattern="^(booking|rebook)$"),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    return {"days": build_calendar(db, now=clock(), context=context)}
