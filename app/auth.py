import logging
import secrets
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app import config
from app.errors import UnauthorizedError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def require_admin(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> bool:
    """Allow the request only when it carries the admin bearer token."""
    if not config.ADMIN_API_TOKEN:
        logger.error("ADMIN_API_TOKEN not configured; refusing admin request")
        raise UnauthorizedError("Unauthorized")
    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), config.ADMIN_API_TOKEN.encode()
    ):
        raise UnauthorizedError("Unauthorized")
    return True
