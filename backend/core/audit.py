"""
Audit logging for configuration changes and rejected input.

Provides a dedicated audit log, kept apart from application logs, with
one JSON object per line.

Events Logged:
- Validation failures
- Accepted configuration changes
- Rejected session IDs
"""
import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from backend.config import settings


class AuditEvent(str, Enum):
    """Types of audited events."""
    VALIDATION_FAILED = "validation_failed"
    CONFIG_UPDATED = "config_updated"
    INVALID_SESSION = "invalid_session"


# Separate audit logger with its own file
audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)
audit_logger.propagate = False  # Don't propagate to root logger


def _ensure_handler() -> None:
    """Attach the audit file handler on first use."""
    if audit_logger.handlers:
        return
    log_dir = settings.LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / "audit.log", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
    audit_logger.addHandler(handler)


def log_audit_event(
    event: AuditEvent,
    session_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    severity: str = "info"
) -> None:
    """
    Write an event to the audit log.

    Args:
        event: Type of event
        session_id: Session ID of the caller (if available)
        details: Additional details about the event
        severity: Log level (info, warning, error)
    """
    _ensure_handler()
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event.value,
        "session_id": session_id or "anonymous",
        "details": details or {},
    }

    message = json.dumps(log_entry)

    if severity == "error":
        audit_logger.error(message)
    elif severity == "warning":
        audit_logger.warning(message)
    else:
        audit_logger.info(message)


def log_validation_failed(
    session_id: str,
    field: str,
    value: str,
    reason: str
) -> None:
    """Log rejected input. The value is truncated."""
    log_audit_event(
        AuditEvent.VALIDATION_FAILED,
        session_id=session_id,
        details={
            "field": field,
            "value": value[:100] if value else None,
            "reason": reason,
        },
        severity="warning"
    )


def log_config_updated(session_id: str, dice_sides: int, selection_method: str) -> None:
    """Log an accepted configuration change."""
    log_audit_event(
        AuditEvent.CONFIG_UPDATED,
        session_id=session_id,
        details={
            "dice_sides": dice_sides,
            "selection_method": selection_method,
        },
    )


def log_invalid_session(raw_session_id: str) -> None:
    """Log a malformed X-Session-ID header (first 8 characters only)."""
    log_audit_event(
        AuditEvent.INVALID_SESSION,
        details={"session_prefix": raw_session_id[:8]},
        severity="warning"
    )
