"""Input validation utilities.

Client-side validation of dice configuration input. Mirrors the backend
rules so the form can flag problems before any request is sent:

- Priority 1: format errors (decimals, non-digit characters)
- Priority 2: presence and range errors (empty, below 2, above 1000)

All validators return DiceValidationResult objects for consistent error
handling.
"""

import re
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Union

from frontend.config.settings import config

logger = logging.getLogger(__name__)

# Validation statuses
STATUS_VALID = "valid"
STATUS_INVALID = "invalid"
STATUS_PENDING = "pending"

# Error priorities
PRIORITY_FORMAT = 1
PRIORITY_RANGE = 2

# User-facing messages
MSG_REQUIRED = "Please enter the number of sides"
MSG_NO_DECIMALS = "Enter whole numbers only, without decimals"
MSG_WHOLE_NUMBERS = "Enter whole numbers only"
MSG_TOO_FEW = f"The die must have at least {config.MIN_SIDES} sides"
MSG_TOO_MANY = f"A maximum of {config.MAX_SIDES} sides is allowed"
MSG_INVALID_METHOD = "Invalid selection method"
MSG_NOT_PREDEFINED = (
    "Dice sides must be one of: " + ", ".join(str(s) for s in config.PREDEFINED_SIDES)
)

_DIGITS_PATTERN = re.compile(r'^\d+$')
_NON_DIGITS = re.compile(r'[^0-9]')


@dataclass
class DiceValidationResult:
    """Result of validating dice input.

    Attributes:
        is_valid: Whether the validation passed
        status: 'valid', 'invalid' or 'pending'
        error_message: User-facing message (invalid only)
        error_priority: 1 for format errors, 2 for presence/range errors

    Example:
        >>> result = DiceInputValidator.validate_custom_sides("20")
        >>> if result:
        ...     apply(20)
    """
    is_valid: bool
    status: str = STATUS_VALID
    error_message: Optional[str] = None
    error_priority: Optional[int] = None

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.is_valid

    @classmethod
    def valid(cls) -> "DiceValidationResult":
        return cls(is_valid=True, status=STATUS_VALID)

    @classmethod
    def invalid(cls, message: str, priority: int) -> "DiceValidationResult":
        return cls(
            is_valid=False,
            status=STATUS_INVALID,
            error_message=message,
            error_priority=priority,
        )

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DiceValidationResult":
        """Build from the backend's camelCase response."""
        return cls(
            is_valid=bool(data.get("isValid")),
            status=data.get("status", STATUS_INVALID),
            error_message=data.get("errorMessage"),
            error_priority=data.get("errorPriority"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DiceInputValidator:
    """Validates dice side counts and selection methods."""

    @classmethod
    def validate_custom_sides(cls, value: Union[str, int, float, None]) -> DiceValidationResult:
        """Validate a custom side count.

        Format problems are reported before range problems, so "0.5"
        reports the decimal, not the minimum.

        Args:
            value: Raw input (text from the form, or a number)

        Returns:
            DiceValidationResult with status and prioritized error

        Example:
            >>> DiceInputValidator.validate_custom_sides("12.5").error_priority
            1
            >>> DiceInputValidator.validate_custom_sides("1").error_priority
            2
        """
        if value is None or isinstance(value, bool):
            return DiceValidationResult.invalid(MSG_REQUIRED, PRIORITY_RANGE)

        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DiceValidationResult.invalid(MSG_REQUIRED, PRIORITY_RANGE)
            if '.' in text or ',' in text:
                return DiceValidationResult.invalid(MSG_NO_DECIMALS, PRIORITY_FORMAT)
            if not _DIGITS_PATTERN.match(text):
                return DiceValidationResult.invalid(MSG_WHOLE_NUMBERS, PRIORITY_FORMAT)
            # Too long to be in range; int() also refuses very long digit strings
            if len(text.lstrip('0')) > len(str(config.MAX_SIDES)):
                return DiceValidationResult.invalid(MSG_TOO_MANY, PRIORITY_RANGE)
            sides = int(text)
        elif isinstance(value, float):
            if value != value or value in (float('inf'), float('-inf')):
                return DiceValidationResult.invalid(MSG_WHOLE_NUMBERS, PRIORITY_FORMAT)
            if not value.is_integer():
                return DiceValidationResult.invalid(MSG_NO_DECIMALS, PRIORITY_FORMAT)
            sides = int(value)
        elif isinstance(value, int):
            sides = value
        else:
            return DiceValidationResult.invalid(MSG_WHOLE_NUMBERS, PRIORITY_FORMAT)

        return cls.validate_range(sides)

    @classmethod
    def validate_range(cls, sides: int) -> DiceValidationResult:
        """Check an integer side count against the allowed range."""
        if sides < config.MIN_SIDES:
            return DiceValidationResult.invalid(MSG_TOO_FEW, PRIORITY_RANGE)
        if sides > config.MAX_SIDES:
            return DiceValidationResult.invalid(MSG_TOO_MANY, PRIORITY_RANGE)
        return DiceValidationResult.valid()

    @classmethod
    def validate_config(cls, dice_sides: Any, selection_method: Any) -> DiceValidationResult:
        """Validate a full configuration before it is submitted.

        Predefined selections must come from the predefined set; custom
        selections follow the custom-sides rules.
        """
        if selection_method not in ("predefined", "custom"):
            return DiceValidationResult.invalid(MSG_INVALID_METHOD, PRIORITY_RANGE)

        if selection_method == "predefined":
            if isinstance(dice_sides, bool) or dice_sides not in config.PREDEFINED_SIDES:
                return DiceValidationResult.invalid(MSG_NOT_PREDEFINED, PRIORITY_RANGE)
            return DiceValidationResult.valid()

        return cls.validate_custom_sides(dice_sides)

    @staticmethod
    def filter_numeric_input(value: Optional[str]) -> str:
        """Strip everything but digits from form input."""
        if not value:
            return ""
        filtered = _NON_DIGITS.sub('', value)
        if filtered != value:
            logger.debug("Removed non-numeric characters from dice input")
        return filtered
