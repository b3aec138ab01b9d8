"""
Dice configuration service.

Validates configurations, computes their derived probability fields and
keeps the last accepted configuration per session in SQLite.
"""
import re
import uuid
import logging
import threading
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from backend.constants import (
    DEFAULT_SIDES,
    MIN_SIDES,
    MAX_SIDES,
    PREDEFINED_SIDES,
    SELECTION_PREDEFINED,
    SELECTION_METHODS,
    PRIORITY_FORMAT,
    PRIORITY_RANGE,
)
from backend.core.audit import log_config_updated, log_validation_failed
from backend.models.database import DiceConfigRecord
from backend.models.schemas import (
    DiceConfigResponse,
    ProbabilityRange,
    ValidationResultResponse,
    ValidationStatus,
)

logger = logging.getLogger(__name__)

# SQLite has no SELECT ... FOR UPDATE; serialize upserts in-process
_db_write_lock = threading.Lock()

_DIGITS_PATTERN = re.compile(r'^\d+$')

MSG_REQUIRED = "Please enter the number of sides"
MSG_NO_DECIMALS = "Enter whole numbers only, without decimals"
MSG_WHOLE_NUMBERS = "Enter whole numbers only"
MSG_TOO_FEW = f"The die must have at least {MIN_SIDES} sides"
MSG_TOO_MANY = f"A maximum of {MAX_SIDES} sides is allowed"
MSG_POSITIVE = "Dice sides must be a positive integer"
MSG_INVALID_METHOD = "Selection method must be 'predefined' or 'custom'"
MSG_NOT_PREDEFINED = "Dice sides must be one of: " + ", ".join(str(s) for s in PREDEFINED_SIDES)


class ServiceError(Exception):
    """Error with an API error code and HTTP status, raised by services.

    Attributes:
        code: Machine-readable code (e.g. VALIDATION_ERROR)
        message: Human-readable message, returned as 'detail'
        status_code: HTTP status to respond with
        details: Individual error messages, returned as 'errors'
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 400,
        details: Optional[List[str]] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or [message]
        super().__init__(message)


def _invalid(message: str, priority: int) -> ValidationResultResponse:
    return ValidationResultResponse(
        is_valid=False,
        status=ValidationStatus.INVALID,
        error_message=message,
        error_priority=priority,
    )


class DiceConfigService:
    """Service for dice configuration operations."""

    @staticmethod
    def calculate_probability(sides: int) -> Dict[str, Any]:
        """Derived fields of a die with the given number of sides."""
        return {
            "probability_range": ProbabilityRange(min=1, max=sides),
            "individual_probability": 1 / sides,
            "display_format": f"D{sides}",
        }

    def build_response(self, sides: int, selection_method: str) -> DiceConfigResponse:
        return DiceConfigResponse(
            dice_sides=sides,
            selection_method=selection_method,
            **self.calculate_probability(sides),
        )

    def get_predefined_options(self) -> List[int]:
        return list(PREDEFINED_SIDES)

    def get_config(self, db: Session, session_id: str) -> DiceConfigResponse:
        """
        Get the stored configuration for a session.

        Returns:
            The last accepted configuration, or the default D6 (predefined)
        """
        record = db.get(DiceConfigRecord, session_id)
        if record is None:
            return self.build_response(DEFAULT_SIDES, SELECTION_PREDEFINED)
        return self.build_response(record.dice_sides, record.selection_method)

    def validate_config(self, dice_sides: Any, selection_method: Any) -> None:
        """
        Check a configuration against the dice rules.

        Raises:
            ServiceError: VALIDATION_ERROR (400) with the first failing rule
        """
        method = getattr(selection_method, "value", selection_method)
        if method not in SELECTION_METHODS:
            raise ServiceError("VALIDATION_ERROR", MSG_INVALID_METHOD)

        if isinstance(dice_sides, bool) or not isinstance(dice_sides, int) or dice_sides <= 0:
            raise ServiceError("VALIDATION_ERROR", MSG_POSITIVE)

        if method == SELECTION_PREDEFINED:
            if dice_sides not in PREDEFINED_SIDES:
                raise ServiceError("VALIDATION_ERROR", MSG_NOT_PREDEFINED)
            return

        result = self.validate_custom_sides(dice_sides)
        if not result.is_valid:
            raise ServiceError("VALIDATION_ERROR", result.error_message)

    def set_config(
        self,
        db: Session,
        session_id: str,
        dice_sides: Any,
        selection_method: Any,
    ) -> DiceConfigResponse:
        """
        Validate and store a configuration for a session.

        Args:
            db: Database session
            session_id: Caller's session ID
            dice_sides: Number of sides
            selection_method: 'predefined' or 'custom'

        Returns:
            The stored configuration with recomputed probability fields

        Raises:
            ServiceError: VALIDATION_ERROR (400) when a rule fails
        """
        method = getattr(selection_method, "value", selection_method)
        try:
            self.validate_config(dice_sides, method)
        except ServiceError as e:
            log_validation_failed(session_id, "diceSides", str(dice_sides), e.message)
            raise

        sync_key = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"
        with _db_write_lock:
            record = db.get(DiceConfigRecord, session_id)
            if record is None:
                record = DiceConfigRecord(session_id=session_id)
                db.add(record)
            record.dice_sides = dice_sides
            record.selection_method = method
            record.sync_key = sync_key
            # Held through commit
            db.commit()

        logger.info(f"Session {session_id[:8]}... set D{dice_sides} ({method})")
        log_config_updated(session_id, dice_sides, method)
        return self.build_response(dice_sides, method)

    def validate_custom_sides(self, value: Any) -> ValidationResultResponse:
        """
        Validate custom input with prioritized errors.

        Priority 1 covers format (decimals, non-digits), priority 2 covers
        presence and range. Strings and numbers are accepted; anything else
        counts as missing.
        """
        if value is None or isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return _invalid(MSG_REQUIRED, PRIORITY_RANGE)

        if isinstance(value, str):
            text = value.strip()
            if not text:
                return _invalid(MSG_REQUIRED, PRIORITY_RANGE)
            if '.' in text or ',' in text:
                return _invalid(MSG_NO_DECIMALS, PRIORITY_FORMAT)
            if not _DIGITS_PATTERN.match(text):
                return _invalid(MSG_WHOLE_NUMBERS, PRIORITY_FORMAT)
            if len(text.lstrip('0')) > len(str(MAX_SIDES)):
                return _invalid(MSG_TOO_MANY, PRIORITY_RANGE)
            sides = int(text)
        elif isinstance(value, float):
            if not value.is_integer():
                return _invalid(MSG_NO_DECIMALS, PRIORITY_FORMAT)
            sides = int(value)
        else:
            sides = value

        if sides < MIN_SIDES:
            return _invalid(MSG_TOO_FEW, PRIORITY_RANGE)
        if sides > MAX_SIDES:
            return _invalid(MSG_TOO_MANY, PRIORITY_RANGE)
        return ValidationResultResponse(is_valid=True, status=ValidationStatus.VALID)


# Singleton instance
dice_config_service = DiceConfigService()
