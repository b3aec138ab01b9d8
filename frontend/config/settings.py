"""
Dice Config Frontend Configuration.

Frozen dataclass for immutable configuration with environment overrides.
All magic numbers and configuration values should be defined here.

Environment variables can override defaults (read at module import time):
- API_BASE_URL: Backend API URL
- API_TIMEOUT_SECONDS: Override API timeout
- APP_VERSION: Override version string
- SYNC_POLL_INTERVAL_MS: Polling interval used after repeated sync failures
- SESSION_EXPIRY_HOURS: Age after which a persisted configuration is dropped
- STORAGE_DIR: Directory shared by all sessions for the persisted configuration
- CONFIG_REFRESH_INTERVAL_MS: How often the UI re-reads the store
"""

import os
from dataclasses import dataclass, field
from typing import Tuple


def _get_int_env(name: str, default: int) -> int:
    """Get integer environment variable or return default."""
    val = os.getenv(name)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            pass
    return default


def _get_str_env(name: str, default: str) -> str:
    """Get string environment variable or return default."""
    return os.getenv(name, default)


@dataclass(frozen=True)
class DiceConfigSettings:
    """Immutable frontend configuration.

    frozen=True ensures config values cannot be accidentally modified.
    Environment variables are read at module import time.
    """

    # Application
    APP_NAME: str = "Dice Config"
    APP_ICON: str = "🎲"
    APP_VERSION: str = field(
        default_factory=lambda: _get_str_env('APP_VERSION', "1.0.0")
    )

    # Backend API
    API_BASE_URL: str = field(
        default_factory=lambda: _get_str_env('API_BASE_URL', 'http://localhost:8000')
    )
    API_TIMEOUT_SECONDS: int = field(
        default_factory=lambda: _get_int_env('API_TIMEOUT_SECONDS', 10)
    )
    MAX_RETRY_ATTEMPTS: int = 3

    # Dice rules
    DEFAULT_SIDES: int = 6
    MIN_SIDES: int = 2
    MAX_SIDES: int = 1000
    PREDEFINED_SIDES: Tuple[int, ...] = (4, 6, 8, 10, 12, 20)

    # Cross-session synchronization
    STORAGE_KEY: str = "dice-config-store"
    STORAGE_DIR: str = field(
        default_factory=lambda: _get_str_env('STORAGE_DIR', './data/storage')
    )
    SESSION_EXPIRY_HOURS: int = field(
        default_factory=lambda: _get_int_env('SESSION_EXPIRY_HOURS', 24)
    )
    SYNC_POLL_INTERVAL_MS: int = field(
        default_factory=lambda: _get_int_env('SYNC_POLL_INTERVAL_MS', 2000)
    )
    MAX_SYNC_RETRIES: int = 3

    # UI refresh of the current configuration (picks up other sessions' changes)
    CONFIG_REFRESH_INTERVAL_MS: int = field(
        default_factory=lambda: _get_int_env('CONFIG_REFRESH_INTERVAL_MS', 2000)
    )

    # Cache settings
    CONFIG_CACHE_TTL_SECONDS: int = 300
    OPTIONS_CACHE_TTL_SECONDS: int = 86400

    @property
    def SESSION_EXPIRY_MS(self) -> int:
        """Get session expiry in milliseconds."""
        return self.SESSION_EXPIRY_HOURS * 60 * 60 * 1000

    @property
    def SYNC_POLL_INTERVAL_SECONDS(self) -> float:
        """Get poll interval in seconds."""
        return self.SYNC_POLL_INTERVAL_MS / 1000.0

    @property
    def CONFIG_REFRESH_INTERVAL_SECONDS(self) -> float:
        """Get UI refresh interval in seconds."""
        return self.CONFIG_REFRESH_INTERVAL_MS / 1000.0


# Global immutable config instance
config = DiceConfigSettings()
