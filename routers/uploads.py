import logging

import httpx
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from app import config
from app.errors import ValidationError
from app.storage import AttachmentStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter()

GEOAPIFY_AUTOCOMPLETE_URL = "https://api.geoapify.com/v1/geocode/autocomplete"


class AddressLookupError(Exception):
    pass


@router.post("/upload")
async def upload_attachment(
    file: UploadFile = File(...),
    storage: AttachmentStorage = Depends(get_storage),
):
    """Store a photo or video for a booking and return its {url, type, name}."""
    content_type = file.content_type or ""
    if content_type not in config.ALLOWED_IMAGE_TYPES + config.ALLOWED_VIDEO_TYPES:
        raise ValidationError("Invalid file type. Only images and videos are allowed.")

    max_bytes = config.MAX_FILE_SIZE_MB * 1024 * 1024
    too_large = f"File too large. Maximum size is {config.MAX_FILE_SIZE_MB}MB."
    if file.size is not None and file.size > max_bytes:
        raise ValidationError(too_large)

    # Never buffer more than one byte past the limit
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationError(too_large)

    filename = file.filename or "upload"
    url = await run_in_threadpool(storage.put, filename, content, content_type)
    return {
        "url": url,
        "type": "video" if content_type in config.ALLOWED_VIDEO_TYPES else "image",
        "name": filename,
    }


async def fetch_address_suggestions(query: str) -> list[dict]:
    if not config.GEOAPIFY_API_KEY:
        raise AddressLookupError("Geoapify API key not configured")
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                GEOAPIFY_AUTOCOMPLETE_URL,
                params={"text": query, "apiKey": config.GEOAPIFY_API_KEY, "limit": 5},
                timeout=10.0,
            )
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise AddressLookupError(f"Geoapify request failed: {e}") from e

    return [
        {"value": f["properties"]["place_id"], "label": f["properties"]["formatted"]}
        for f in response.json().get("features", [])
    ]


@router.get("/address")
async def autocomplete_address(q: str = Query(default="")):
    if len(q) < 3:
        return {"addresses": []}
    return {"addresses": await fetch_address_suggestions(q)}
