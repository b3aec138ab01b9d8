"""
Pydantic schemas for API request/response validation.

JSON field names are camelCase (diceSides, selectionMethod, ...); the
Python attributes are snake_case with aliases.
"""
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class SelectionMethod(str, Enum):
    PREDEFINED = "predefined"
    CUSTOM = "custom"


class ValidationStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Dice Config Schemas
class DiceConfigSetRequest(_CamelModel):
    """Request schema for storing a configuration.

    Type checks happen here; the dice rules (predefined set, range) are
    applied by the service so they produce VALIDATION_ERROR responses.
    """

    dice_sides: StrictInt = Field(..., alias="diceSides")
    selection_method: SelectionMethod = Field(..., alias="selectionMethod")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"diceSides": 20, "selectionMethod": "predefined"}
        },
    )


class ProbabilityRange(BaseModel):
    min: int
    max: int


class DiceConfigResponse(_CamelModel):
    """Configuration with its derived probability fields."""

    dice_sides: int = Field(..., alias="diceSides")
    selection_method: SelectionMethod = Field(..., alias="selectionMethod")
    probability_range: ProbabilityRange = Field(..., alias="probabilityRange")
    individual_probability: float = Field(..., alias="individualProbability")
    display_format: str = Field(..., alias="displayFormat")


class ValidateCustomRequest(_CamelModel):
    """Raw custom input; any JSON value is accepted and judged by the service."""

    custom_sides: Optional[Any] = Field(None, alias="customSides")


class ValidationResultResponse(_CamelModel):
    """Outcome of validating custom input."""

    is_valid: bool = Field(..., alias="isValid")
    status: ValidationStatus
    error_message: Optional[str] = Field(None, alias="errorMessage")
    error_priority: Optional[int] = Field(None, alias="errorPriority")


# Health Schemas
class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    database: bool
    timestamp: datetime


# Error Schemas
class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error_code: Optional[str] = None
    errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "detail": "Dice sides must be one of: 4, 6, 8, 10, 12, 20",
                "error_code": "VALIDATION_ERROR",
                "errors": ["Dice sides must be one of: 4, 6, 8, 10, 12, 20"],
            }
        }
    )
