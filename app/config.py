import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid integer for {env_var}: {raw!r}") from None


def _env_flag(env_var: str, default: str = "false") -> bool:
    return os.getenv(env_var, default).strip().lower() in ("1", "true", "yes")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./detailing.db")
SKIP_DB_INIT = _env_flag("SKIP_DB_INIT")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Business info
BUSINESS_NAME = os.getenv("BUSINESS_NAME", "TJ's Detailing Dynamics")
BASE_URL = os.getenv("BASE_URL", "http://localhost:3000")
# Number that receives new-booking SMS notifications
CONTACT_NUMBER = os.getenv("CONTACT_NUMBER", "")

# Links offered in the review request sent after a completed job
REVIEW_LINKS = [
    ("Google", os.getenv("GOOGLE_REVIEW_URL", "https://g.page/r/YOUR_GOOGLE_REVIEW_LINK")),
    ("Facebook", os.getenv("FACEBOOK_REVIEW_URL", "https://facebook.com/YOUR_PAGE/reviews")),
]

# Scheduling rules
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Australia/Brisbane")
MIN_BOOKING_HOURS_AHEAD = _safe_int("MIN_BOOKING_HOURS_AHEAD", "24")
MAX_BOOKING_DAYS_AHEAD = _safe_int("MAX_BOOKING_DAYS_AHEAD", "30")
# Admin rebooks ignore the booking horizon; this only bounds the calendar view
REBOOK_CALENDAR_DAYS_AHEAD = _safe_int("REBOOK_CALENDAR_DAYS_AHEAD", "90")
MORNING_START_HOUR = _safe_int("MORNING_START_HOUR", "8")
AFTERNOON_START_HOUR = _safe_int("AFTERNOON_START_HOUR", "13")
# Off: any known status may follow any other. On: only the transition table applies.
STRICT_STATUS_TRANSITIONS = _env_flag("STRICT_STATUS_TRANSITIONS")

# Admin dashboard bearer token
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN")

# Twilio SMS
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")

# Geoapify address autocomplete
GEOAPIFY_API_KEY = os.getenv("GEOAPIFY_API_KEY")

# S3-compatible attachment storage (Cloudflare R2, AWS S3, MinIO)
STORAGE_ENDPOINT_URL = os.getenv("STORAGE_ENDPOINT_URL")
STORAGE_ACCESS_KEY_ID = os.getenv("STORAGE_ACCESS_KEY_ID")
STORAGE_SECRET_ACCESS_KEY = os.getenv("STORAGE_SECRET_ACCESS_KEY")
STORAGE_BUCKET_NAME = os.getenv("STORAGE_BUCKET_NAME", "detailing-bookings")
STORAGE_PUBLIC_URL = os.getenv("STORAGE_PUBLIC_URL", "")

# Attachments
MAX_FILE_SIZE_MB = _safe_int("MAX_FILE_SIZE_MB", "50")
MAX_ATTACHMENTS = _safe_int("MAX_ATTACHMENTS", "5")
ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp", "image/heic", "image/heif"]
ALLOWED_VIDEO_TYPES = ["video/mp4", "video/quicktime", "video/webm"]


def _validate_config() -> None:
    """Validate configuration values are within acceptable ranges."""
    if MIN_BOOKING_HOURS_AHEAD < 0:
        raise ValueError(f"MIN_BOOKING_HOURS_AHEAD must be >= 0, got {MIN_BOOKING_HOURS_AHEAD}")
    if MAX_BOOKING_DAYS_AHEAD < 1:
        raise ValueError(f"MAX_BOOKING_DAYS_AHEAD must be >= 1, got {MAX_BOOKING_DAYS_AHEAD}")
    for name, hour in [
        ("MORNING_START_HOUR", MORNING_START_HOUR),
        ("AFTERNOON_START_HOUR", AFTERNOON_START_HOUR),
    ]:
        if not 0 <= hour <= 23:
            raise ValueError(f"{name} must be between 0 and 23, got {hour}")
    if REBOOK_CALENDAR_DAYS_AHEAD < 1:
        raise ValueError(f"REBOOK_CALENDAR_DAYS_AHEAD must be >= 1, got {REBOOK_CALENDAR_DAYS_AHEAD}")
    if MORNING_START_HOUR >= AFTERNOON_START_HOUR:
        raise ValueError("MORNING_START_HOUR must be earlier than AFTERNOON_START_HOUR")
    if MAX_ATTACHMENTS < 0:
        raise ValueError(f"MAX_ATTACHMENTS must be >= 0, got {MAX_ATTACHMENTS}")


_validate_config()
