"""
Dice configuration controller.

Glue between the UI, the backend API and the session's sync store:

- load(): fill an empty store from the backend
- update_config(): submit through the API, then apply to the store
- validate_custom(): local rules first, then the server
- predefined_options(): cached list of predefined side counts
"""

import logging
from typing import Any, List, Optional

from frontend.config.settings import config
from frontend.services.backend_client import DiceConfigAPIClient, ConfigResponse
from frontend.sync import DiceConfig, DiceConfigStore, build_dice_config
from frontend.utils.cache import CACHE_MISS, TTLCache, config_cache, options_cache
from frontend.utils.exceptions import BackendUnavailableError, ConfigUpdateError, SyncError
from frontend.utils.session_state import CONTROLLER_KEY, SessionState
from frontend.utils.validators import DiceInputValidator, DiceValidationResult

logger = logging.getLogger(__name__)

OPTIONS_CACHE_KEY = "predefined-options"


def config_from_api(data: Any) -> DiceConfig:
    """Build a DiceConfig from the backend's camelCase payload.

    Derived fields are recomputed locally.

    Raises:
        SyncError: If the payload lacks valid sides or method
    """
    parsed = DiceConfig.from_dict(data)
    return build_dice_config(parsed.dice_sides, parsed.selection_method)


class DiceConfigController:
    """Coordinates the store and the backend for one browser session."""

    def __init__(
        self,
        store: DiceConfigStore,
        client: DiceConfigAPIClient,
        cache: TTLCache = None,
        options: TTLCache = None,
    ):
        self.store = store
        self.client = client
        self._cache = cache if cache is not None else config_cache
        self._options = options if options is not None else options_cache

    @property
    def _cache_key(self) -> str:
        return f"config:{self.client.session_id or 'anonymous'}"

    def load(self) -> Optional[DiceConfig]:
        """Return the current configuration, fetching it if the store is empty.

        Returns:
            The configuration, or None if the store is empty and the
            backend could not provide one
        """
        if self.store.config is not None:
            return self.store.config

        response = self._cache.get_or_load(
            self._cache_key,
            self.client.get_config,
            cache_if=lambda r: r.success,
        )
        if not response.success:
            logger.warning(f"Could not load configuration from backend: {response.error}")
            return None

        try:
            dice_config = config_from_api(response.data)
        except SyncError as e:
            logger.error(f"Backend returned an invalid configuration: {e}")
            self._cache.delete(self._cache_key)
            return None

        # Another session may have filled the shared medium meanwhile
        if self.store.config is None:
            self.store.set_config(dice_config)
        return self.store.config

    def update_config(self, dice_sides: Any, selection_method: str) -> DiceConfig:
        """Submit a configuration and apply it locally on success.

        Raises:
            ConfigUpdateError: If local or server validation rejects it
            BackendUnavailableError: If the backend cannot be reached
        """
        local = DiceInputValidator.validate_config(dice_sides, selection_method)
        if not local:
            raise ConfigUpdateError(local.error_message, error_code="VALIDATION_ERROR")

        response: ConfigResponse = self.client.set_config(int(dice_sides), selection_method)
        if not response.success:
            if response.status_code is None:
                raise BackendUnavailableError(f"Cannot reach backend: {response.error}")
            logger.warning(f"Configuration rejected ({response.error_code}): {response.error}")
            raise ConfigUpdateError(response.error or "Configuration update failed",
                                    error_code=response.error_code)

        try:
            dice_config = config_from_api(response.data)
        except SyncError as e:
            raise ConfigUpdateError(f"Invalid configuration from backend: {e}", error_code="INVALID_RESPONSE")

        self.store.set_config(dice_config)
        self._cache.set(self._cache_key, response)
        return dice_config

    def validate_custom(self, value: Any) -> DiceValidationResult:
        """Validate custom input, locally first and then on the server.

        When the server is unreachable the local result stands.
        """
        local = DiceInputValidator.validate_custom_sides(value)
        if not local:
            return local

        response = self.client.validate_custom(value)
        if not response.success or not isinstance(response.data, dict):
            logger.info(f"Server validation unavailable, using local result: {response.error}")
            return local
        return DiceValidationResult.from_api(response.data)

    def predefined_options(self) -> List[int]:
        """Predefined side counts from the backend, cached for a day."""
        options = self._options.get(OPTIONS_CACHE_KEY)
        if options is not CACHE_MISS:
            return options

        options = self.client.get_predefined_options()
        if options:
            self._options.set(OPTIONS_CACHE_KEY, options)
            return options
        return list(config.PREDEFINED_SIDES)

    def clear(self) -> None:
        """Forget the configuration in this session and in the shared medium."""
        self.store.clear()
        self._cache.delete(self._cache_key)


def get_dice_controller() -> DiceConfigController:
    """Get the controller for the current Streamlit session, creating it once."""
    controller = SessionState.get(CONTROLLER_KEY)
    if controller is None:
        client = DiceConfigAPIClient(session_id=SessionState.get_session_id())
        controller = DiceConfigController(SessionState.get_dice_store(), client)
        SessionState.set(CONTROLLER_KEY, controller)
    return controller
