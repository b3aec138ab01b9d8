"""Services for the Dice Config frontend."""
from frontend.services.backend_client import (
    DiceConfigAPIClient,
    get_api_client,
    set_session_id,
    ConfigResponse,
    ValidationResponse,
)
from frontend.services.dice_config import (
    DiceConfigController,
    config_from_api,
    get_dice_controller,
)

__all__ = [
    # Backend client
    "DiceConfigAPIClient",
    "get_api_client",
    "set_session_id",
    "ConfigResponse",
    "ValidationResponse",
    # Controller
    "DiceConfigController",
    "config_from_api",
    "get_dice_controller",
]
