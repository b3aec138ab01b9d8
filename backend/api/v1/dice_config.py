"""
Dice configuration endpoints.

- GET  /dice-config                      current configuration for the session
- POST /dice-config                      validate and store a configuration
- POST /dice-config/validate-custom      validate custom input (always 200)
- GET  /dice-config/predefined-options   predefined side counts
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.core.auth import validate_session_id
from backend.core.database import get_db
from backend.models.schemas import (
    DiceConfigResponse,
    DiceConfigSetRequest,
    ErrorResponse,
    ValidateCustomRequest,
    ValidationResultResponse,
)
from backend.services import dice_config_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dice-config", tags=["Dice Config"])


@router.get("", response_model=DiceConfigResponse)
async def get_dice_config(
    db: Session = Depends(get_db),
    session_id: str = Depends(validate_session_id),
) -> DiceConfigResponse:
    """Get the session's configuration (D6 predefined when none is stored)."""
    return dice_config_service.get_config(db, session_id)


@router.post(
    "",
    response_model=DiceConfigResponse,
    responses={400: {"model": ErrorResponse}},
)
def set_dice_config(
    request: DiceConfigSetRequest,
    db: Session = Depends(get_db),
    session_id: str = Depends(validate_session_id),
) -> DiceConfigResponse:
    """
    Store a configuration for the session.

    Predefined selections must be one of 4, 6, 8, 10, 12, 20; custom
    selections must be between 2 and 1000 sides.
    """
    return dice_config_service.set_config(
        db,
        session_id,
        request.dice_sides,
        request.selection_method,
    )


@router.post(
    "/validate-custom",
    response_model=ValidationResultResponse,
    response_model_exclude_none=True,
)
async def validate_custom(request: ValidateCustomRequest) -> ValidationResultResponse:
    """Validate custom input. Invalid input is reported in the body, not the status."""
    return dice_config_service.validate_custom_sides(request.custom_sides)


@router.get("/predefined-options", response_model=List[int])
async def get_predefined_options() -> List[int]:
    return dice_config_service.get_predefined_options()
