# Services package
from backend.services.dice_config_service import (
    dice_config_service,
    DiceConfigService,
    ServiceError,
)

__all__ = [
    "dice_config_service",
    "DiceConfigService",
    "ServiceError",
]
