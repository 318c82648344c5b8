from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    text,
)

from app.db import Base

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
SERVICE_TYPES = {
    "both": "Full Detail (Interior & Exterior)",
    "interior": "Interior Only",
    "exterior": "Exterior Only",
}


def utcnow():
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    mobile = Column(String, nullable=False)
    address = Column(String, nullable=False)
    returning_customer = Column(Boolean, nullable=False, default=False)
    vehicle_year = Column(String, nullable=False)
    vehicle_make = Column(String, nullable=False)
    vehicle_model = Column(String, nullable=False)
    service_type = Column(String, nullable=False)
    scent = Column(String, nullable=False)  # scent name, "none" or "no-preference"
    special_requests = Column(Text)
    attachments = Column(JSON)  # [{"url", "type", "name"}]
    date = Column(String, nullable=False)  # YYYY-MM-DD, business timezone
    time_of_day = Column(String, nullable=False)  # morning|afternoon
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status in ('pending','confirmed','completed','cancelled')", name="booking_status_valid"
        ),
        CheckConstraint("time_of_day in ('morning','afternoon')", name="booking_time_of_day_valid"),
        Index("ix_bookings_date", "date"),
        Index("ix_bookings_status", "status"),
        # One pending booking per slot
        Index(
            "uq_bookings_pending_slot",
            "date",
            "time_of_day",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "mobile": self.mobile,
            "address": self.address,
            "returningCustomer": self.returning_customer,
            "vehicleYear": self.vehicle_year,
            "vehicleMake": self.vehicle_make,
            "vehicleModel": self.vehicle_model,
            "serviceType": self.service_type,
            "scent": self.scent,
            "specialRequests": self.special_requests,
            "attachments": self.attachments,
            "date": self.date,
            "timeOfDay": self.time_of_day,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class UnavailableSlot(Base):
    __tablename__ = "unavailable_slots"
    id = Column(String, primary_key=True)
    date = Column(String, nullable=False, index=True)
    time_of_day = Column(String, nullable=False)  # morning|afternoon|all
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "time_of_day in ('morning','afternoon','all')", name="unavailable_time_of_day_valid"
        ),
    )

    def to_dict(self):
        return {"id": self.id, "date": self.date, "timeOfDay": self.time_of_day}


class Scent(Base):
    __tablename__ = "scents"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "enabled": self.enabled}


class Pricing(Base):
    __tablename__ = "pricing"
    id = Column(String, primary_key=True)
    vehicle_type = Column(String, nullable=False, unique=True)
    interior_price = Column(Integer, nullable=False)
    exterior_price = Column(Integer, nullable=False)
    both_price = Column(Integer, nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
