import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app import config
from app.db import init_db
from app.errors import BookingError
from app.storage import StorageError
from routers import admin, bookings, catalog, uploads
from routers.uploads import AddressLookupError

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not config.SKIP_DB_INIT:
        init_db()
        logger.info("Database initialised")
    yield


app = FastAPI(title="Detailing Booking API", version="0.1.0", lifespan=lifespan)

app.include_router(bookings.router, tags=["bookings"])
app.include_router(catalog.router, tags=["catalog"])
app.include_router(uploads.router, tags=["uploads"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    logger.warning("%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed request fields are a 400, matching the other client errors."""
    logger.warning("Validation error for %s: %s", request.url.path, exc.errors())
    first = exc.errors()[0] if exc.errors() else {}
    message = first.get("msg", "Invalid request").removeprefix("Value error, ")
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    return JSONResponse(
        status_code=400,
        content={"detail": f"{field}: {message}" if field else message},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return JSONResponse(status_code=500, content={"detail": "Failed to upload file"})


@app.exception_handler(AddressLookupError)
async def address_error_handler(request: Request, exc: AddressLookupError):
    logger.warning("Address autocomplete failed: %s", exc)
    return JSONResponse(status_code=502, content={"detail": "Failed to fetch addresses"})


@app.get("/")
def root():
    return {"ok": True, "service": "detailing-booking-api"}
