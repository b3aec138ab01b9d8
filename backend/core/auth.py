"""Session identification for API endpoints.

Each browser session sends its ID in the X-Session-ID header; stored
configurations are keyed by it. Only UUID v4 values are accepted.
"""
import re
import uuid
import logging
from typing import Optional

from fastapi import Header

from backend.config import settings
from backend.core.audit import log_invalid_session
from backend.services.dice_config_service import ServiceError

logger = logging.getLogger(__name__)

# Valid session ID format: UUID v4
SESSION_ID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE
)


def validate_session_id(x_session_id: Optional[str] = Header(None, alias="X-Session-ID")) -> str:
    """Validate and return the caller's session ID.

    Requests without the header get a fresh anonymous ID, so they always
    see the default configuration and their writes are not shared.

    Raises:
        ServiceError: INVALID_SESSION (400) if the header is not a UUID v4
    """
    if not x_session_id or not x_session_id.strip():
        return f"anon-{uuid.uuid4()}"

    x_session_id = x_session_id.strip().lower()

    if settings.REQUIRE_SESSION_VALIDATION and not SESSION_ID_PATTERN.match(x_session_id):
        logger.warning(f"Invalid session ID format: {truncate_session_id(x_session_id)}")
        log_invalid_session(x_session_id)
        raise ServiceError(
            "INVALID_SESSION",
            "Invalid session ID format. Must be a valid UUID.",
            status_code=400,
        )

    return x_session_id[:64]


def truncate_session_id(session_id: Optional[str]) -> str:
    """Truncate session ID for safe logging."""
    if not session_id:
        return "unknown"
    return f"{session_id[:8]}..."
