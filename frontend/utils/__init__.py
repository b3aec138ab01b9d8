"""Utilities for the Dice Config frontend."""
from frontend.utils.session_state import (
    SessionState,
    TAB_PREDEFINED,
    TAB_CUSTOM,
)
from frontend.utils.exceptions import (
    DiceConfigError,
    StorageError,
    SyncError,
    ConfigUpdateError,
    APIError,
    BackendUnavailableError,
)
from frontend.utils.validators import (
    DiceValidationResult,
    DiceInputValidator,
)
from frontend.utils.cache import (
    TTLCache,
    config_cache,
    options_cache,
    get_all_cache_stats,
    clear_all_caches,
)

__all__ = [
    # Session state
    "SessionState",
    "TAB_PREDEFINED",
    "TAB_CUSTOM",
    # Exceptions
    "DiceConfigError",
    "StorageError",
    "SyncError",
    "ConfigUpdateError",
    "APIError",
    "BackendUnavailableError",
    # Validators
    "DiceValidationResult",
    "DiceInputValidator",
    # Cache
    "TTLCache",
    "config_cache",
    "options_cache",
    "get_all_cache_stats",
    "clear_all_caches",
]
