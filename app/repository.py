"""Database operations for bookings, unavailable slots and the catalog"""

import uuid
from typing import Optional

from sqlalchemy import JSON, DateTime, bindparam, or_, text
from sqlalchemy.orm import Session

from app.models import Booking, Pricing, Scent, UnavailableSlot, utcnow

# Single statement so two concurrent requests cannot both pass the check.
# The partial unique index uq_bookings_pending_slot backs it up on engines
# where the NOT EXISTS subqueries are not serialized.
RESERVE_SLOT_SQL = text("""
    INSERT INTO bookings (
        id, name, mobile, address, returning_customer, vehicle_year, vehicle_make,
        vehicle_model, service_type, scent, special_requests, attachments,
        date, time_of_day, status, created_at, updated_at
    )
    SELECT
        :id, :name, :mobile, :address, :returning_customer, :vehicle_year, :vehicle_make,
        :vehicle_model, :service_type, :scent, :special_requests, :attachments,
        :date, :time_of_day, 'pending', :created_at, :created_at
    WHERE NOT EXISTS (
        SELECT 1 FROM bookings b
        WHERE b.date = :date AND b.time_of_day = :time_of_day AND b.status = 'pending'
    )
    AND NOT EXISTS (
        SELECT 1 FROM unavailable_slots u
        WHERE u.date = :date AND (u.time_of_day = :time_of_day OR u.time_of_day = 'all')
    )
""").bindparams(
    bindparam("attachments", type_=JSON),
    bindparam("created_at", type_=DateTime(timezone=True)),
)


class BookingRepository:
    """Repository for booking rows"""

    @staticmethod
    def get(db: Session, booking_id: str) -> Optional[Booking]:
        return db.get(Booking, booking_id)

    @staticmethod
    def list_all(db: Session) -> list[Booking]:
        return db.query(Booking).all()

    @staticmethod
    def list_pending(db: Session) -> list[Booking]:
        return db.query(Booking).filter(Booking.status == "pending").all()

    @staticmethod
    def find_pending_on_slot(db: Session, date: str, time_of_day: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.date == date,
                Booking.time_of_day == time_of_day,
                Booking.status == "pending",
            )
            .first()
        )

    @staticmethod
    def reserve(db: Session, **values) -> Optional[str]:
        """Insert a pending booking only if its slot is free and not blocked.

        Returns the new id, or None when the slot was taken in the meantime.
        Does not commit.
        """
        booking_id = str(uuid.uuid4())
        res = db.execute(RESERVE_SLOT_SQL, {**values, "id": booking_id, "created_at": utcnow()})
        if res.rowcount != 1:
            return None
        return booking_id


class UnavailableSlotRepository:
    """Repository for administrator-blocked slots"""

    @staticmethod
    def list_all(db: Session) -> list[UnavailableSlot]:
        return db.query(UnavailableSlot).order_by(UnavailableSlot.date, UnavailableSlot.time_of_day).all()

    @staticmethod
    def find_covering(db: Session, date: str, time_of_day: str) -> Optional[UnavailableSlot]:
        return (
            db.query(UnavailableSlot)
            .filter(
                UnavailableSlot.date == date,
                or_(UnavailableSlot.time_of_day == time_of_day, UnavailableSlot.time_of_day == "all"),
            )
            .first()
        )

    @staticmethod
    def add_many(db: Session, entries: list[tuple[str, str]]) -> int:
        db.add_all(
            UnavailableSlot(id=str(uuid.uuid4()), date=date, time_of_day=time_of_day)
            for date, time_of_day in entries
        )
        db.commit()
        return len(entries)

    @staticmethod
    def remove_many(db: Session, entries: list[tuple[str, str]]) -> int:
        removed = 0
        for date, time_of_day in entries:
            removed += (
                db.query(UnavailableSlot)
                .filter(UnavailableSlot.date == date, UnavailableSlot.time_of_day == time_of_day)
                .delete(synchronize_session=False)
            )
        db.commit()
        return removed


class CatalogRepository:
    """Repository for scents and pricing"""

    @staticmethod
    def list_scents(db: Session, enabled_only: bool = False) -> list[Scent]:
        query = db.query(Scent)
        if enabled_only:
            query = query.filter(Scent.enabled.is_(True))
        return query.order_by(Scent.name).all()

    @staticmethod
    def get_scent(db: Session, scent_id: str) -> Optional[Scent]:
        return db.get(Scent, scent_id)

    @staticmethod
    def create_scent(db: Session, name: str) -> Scent:
        scent = Scent(id=str(uuid.uuid4()), name=name, enabled=True)
        db.add(scent)
        db.commit()
        db.refresh(scent)
        return scent

    @staticmethod
    def set_scent_enabled(db: Session, scent_id: str, enabled: bool) -> int:
        updated = db.query(Scent).filter(Scent.id == scent_id).update({"enabled": enabled})
        db.commit()
        return updated

    @staticmethod
    def delete_scent(db: Session, scent_id: str) -> int:
        deleted = db.query(Scent).filter(Scent.id == scent_id).delete()
        db.commit()
        return deleted

    @staticmethod
    def list_pricing(db: Session) -> list[Pricing]:
        return db.query(Pricing).order_by(Pricing.sort_order).all()
