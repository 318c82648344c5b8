"""Request bodies. Field names follow the JSON the booking form and dashboard send."""

import re
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from app import config
from app.errors import ValidationError
from app.timeutil import parse_date_string

# Australian mobile: 04XXXXXXXX or +614XXXXXXXX
MOBILE_REGEX = re.compile(r"^(\+?61|0)4\d{8}$")
SCENT_NONE = "none"
SCENT_NO_PREFERENCE = "no-preference"


def normalize_mobile(value: str) -> str:
    return re.sub(r"\s", "", value)


def _check_date(value: str) -> str:
    try:
        parse_date_string(value)
    except ValidationError as e:
        raise ValueError(e.message) from None
    return value


class Attachment(BaseModel):
    url: str
    type: Literal["image", "video"]
    name: str


class BookingCreate(BaseModel):
    name: str
    mobile: str
    address: str
    returningCustomer: Optional[bool] = False
    vehicleYear: str
    vehicleMake: str
    vehicleModel: str
    serviceType: Literal["interior", "exterior", "both"]
    scent: str
    specialRequests: Optional[str] = None
    attachments: list[Attachment] = []
    date: str
    timeOfDay: Literal["morning", "afternoon"]

    @field_validator(
        "name", "mobile", "address", "vehicleYear", "vehicleMake", "vehicleModel", "scent", "date",
        mode="before",
    )
    @classmethod
    def required(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            v = str(v)
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Missing required field")
        return v.strip() if isinstance(v, str) else v

    @field_validator("mobile")
    @classmethod
    def validate_mobile(cls, v):
        v = normalize_mobile(v)
        if not MOBILE_REGEX.match(v):
            raise ValueError("Invalid mobile number")
        return v

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _check_date(v)

    @field_validator("returningCustomer")
    @classmethod
    def null_is_not_returning(cls, v):
        return bool(v)

    @field_validator("specialRequests")
    @classmethod
    def blank_to_none(cls, v):
        return v.strip() or None if v else None

    @field_validator("attachments")
    @classmethod
    def limit_attachments(cls, v):
        if len(v) > config.MAX_ATTACHMENTS:
            raise ValueError(f"At most {config.MAX_ATTACHMENTS} attachments are allowed")
        return v


class BookingStatusUpdate(BaseModel):
    id: str
    status: str
    date: Optional[str] = None
    timeOfDay: Optional[str] = None


class SlotEntry(BaseModel):
    date: str
    timeOfDay: Literal["morning", "afternoon", "all"]

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _check_date(v)


class SlotBatch(BaseModel):
    slots: list[SlotEntry]

    @field_validator("slots")
    @classmethod
    def not_empty(cls, v):
        if not v:
            raise ValueError("Missing or invalid slots array")
        return v


class ScentCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def required(cls, v):
        if not v.strip():
            raise ValueError("Scent name is required")
        return v.strip()


class ScentUpdate(BaseModel):
    id: str
    enabled: bool


class ScentDelete(BaseModel):
    id: str
