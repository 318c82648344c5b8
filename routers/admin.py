import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.auth import require_admin
from app.db import get_db
from app.dependencies import get_lifecycle_manager, get_unavailability_manager
from app.errors import NotFoundError, ValidationError
from app.lifecycle import BookingLifecycleManager, UnavailabilityManager
from app.models import Booking
from app.notifications import review_request_message
from app.repository import CatalogRepository
from app.schemas import BookingStatusUpdate, ScentCreate, ScentDelete, ScentUpdate, SlotBatch

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/bookings", dependencies=[Depends(require_admin)])
def list_bookings(manager: BookingLifecycleManager = Depends(get_lifecycle_manager)):
    """
    Upcoming: date >= today and not completed/cancelled, soonest first.
    Past: date < today or completed/cancelled, most recent first.
    Completed bookings carry a ready-to-send reviewMessage.
    """
    split = manager.list_bookings()
    return {
        "upcoming": [_booking_view(b) for b in split["upcoming"]],
        "past": [_booking_view(b) for b in split["past"]],
    }


def _booking_view(booking: Booking) -> dict:
    data = booking.to_dict()
    if booking.status == "completed":
        data["reviewMessage"] = review_request_message(booking)
    return data


@router.patch("/bookings", dependencies=[Depends(require_admin)])
def update_booking(
    body: BookingStatusUpdate,
    manager: BookingLifecycleManager = Depends(get_lifecycle_manager),
):
    """Change status; a date and timeOfDay alongside status=pending rebooks the job."""
    booking = manager.update_status(body.id, body.status, body.date, body.timeOfDay)
    return {"booking": booking.to_dict()}


@router.get("/unavailable")
def list_unavailable(manager: UnavailabilityManager = Depends(get_unavailability_manager)):
    return {"slots": [s.to_dict() for s in manager.list_unavailable_slots()]}


@router.post("/unavailable", dependencies=[Depends(require_admin)])
def add_unavailable(body: SlotBatch, manager: UnavailabilityManager = Depends(get_unavailability_manager)):
    count = manager.add_unavailable_slots([(s.date, s.timeOfDay) for s in body.slots])
    return {"success": True, "count": count}


@router.delete("/unavailable", dependencies=[Depends(require_admin)])
def remove_unavailable(body: SlotBatch, manager: UnavailabilityManager = Depends(get_unavailability_manager)):
    # Entries that do not exist are skipped silently
    removed = manager.remove_unavailable_slots([(s.date, s.timeOfDay) for s in body.slots])
    return {"success": True, "removed": removed}


@router.get("/scents", dependencies=[Depends(require_admin)])
def list_scents(db: Session = Depends(get_db)):
    return {"scents": [s.to_dict() for s in CatalogRepository.list_scents(db)]}


@router.post("/scents", dependencies=[Depends(require_admin)])
def create_scent(body: ScentCreate, db: Session = Depends(get_db)):
    try:
        scent = CatalogRepository.create_scent(db, body.name)
    except IntegrityError:
        db.rollback()
        raise ValidationError("A scent with this name already exists") from None
    logger.info("Scent %r created", scent.name)
    return {"scent": scent.to_dict()}


@router.patch("/scents", dependencies=[Depends(require_admin)])
def toggle_scent(body: ScentUpdate, db: Session = Depends(get_db)):
    if not CatalogRepository.set_scent_enabled(db, body.id, body.enabled):
        raise NotFoundError("Scent not found")
    return {"success": True}


@router.delete("/scents", dependencies=[Depends(require_admin)])
def delete_scent(body: ScentDelete, db: Session = Depends(get_db)):
    CatalogRepository.delete_scent(db, body.id)
    return {"success": True}
