"""
Backend API Client for the Dice Config Frontend.

Provides type-safe access to the dice configuration API with retry logic
and error handling.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from frontend.config.settings import config

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@dataclass
class ConfigResponse:
    """Response from the dice configuration endpoints."""
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    status_code: Optional[int] = None
    errors: List[str] = field(default_factory=list)

    @property
    def dice_sides(self) -> Optional[int]:
        return self.data.get("diceSides") if self.data else None

    @property
    def selection_method(self) -> Optional[str]:
        return self.data.get("selectionMethod") if self.data else None


@dataclass
class ValidationResponse:
    """Response from the custom-sides validation endpoint."""
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


def _error_from_response(response: requests.Response) -> Dict[str, Any]:
    """Extract detail/error_code/errors from an error response body."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        text = response.text[:100] if response.text else 'Unknown error'
        return {"error": f"HTTP {response.status_code}: {text}"}

    if not isinstance(body, dict):
        return {"error": f"HTTP {response.status_code}"}

    detail = body.get('detail', f"HTTP {response.status_code}")
    if not isinstance(detail, str):
        detail = f"HTTP {response.status_code}"
    return {
        "error": detail,
        "error_code": body.get('error_code'),
        "errors": [str(e) for e in body.get('errors') or []],
    }


def _build_http_session(max_retries: int) -> requests.Session:
    """Session retrying connection errors and 5xx responses with backoff."""
    retry = Retry(
        total=max_retries,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "POST"}),
    )
    http = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    for scheme in ("http://", "https://"):
        http.mount(scheme, adapter)
    return http


class DiceConfigAPIClient:
    """Client for the dice configuration API.

    Args:
        base_url: Backend root URL (default API_BASE_URL)
        timeout: Per-request timeout in seconds
        max_retries: Retries for connection errors and 5xx responses
        session_id: Sent as X-Session-ID; the backend stores one
            configuration per session
    """

    def __init__(self, base_url: str = None, timeout: int = None,
                 max_retries: int = None, session_id: str = None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip('/')
        self.timeout = timeout or config.API_TIMEOUT_SECONDS
        self.max_retries = max_retries or config.MAX_RETRY_ATTEMPTS
        self.session_id = session_id
        self.session = _build_http_session(self.max_retries)

    def _get_headers(self) -> Dict[str, str]:
        return {"X-Session-ID": self.session_id} if self.session_id else {}

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Send a request to API_PREFIX + endpoint; connection errors are logged and re-raised."""
        url = f"{self.base_url}{API_PREFIX}{endpoint}"
        kwargs['headers'] = {**self._get_headers(), **kwargs.get('headers', {})}
        kwargs.setdefault('timeout', self.timeout)
        try:
            return self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise

    def _config_call(self, method: str, endpoint: str, **kwargs) -> ConfigResponse:
        try:
            response = self._request(method, endpoint, **kwargs)
        except requests.exceptions.RequestException as e:
            return ConfigResponse(success=False, error=str(e))

        if response.status_code == 200:
            try:
                data = response.json()
            except (json.JSONDecodeError, ValueError) as e:
                logger.error(f"Invalid JSON in {endpoint} response: {e}")
                return ConfigResponse(success=False, error="Invalid response from server",
                                      status_code=response.status_code)
            return ConfigResponse(success=True, data=data, status_code=200)

        return ConfigResponse(success=False, status_code=response.status_code,
                              **_error_from_response(response))

    # Health check
    def health_check(self) -> bool:
        """Check if backend is healthy."""
        try:
            response = self._request('GET', '/health')
            return response.status_code == 200
        except requests.exceptions.RequestException:
            return False

    # Dice configuration
    def get_config(self) -> ConfigResponse:
        """Get the stored configuration for this session.

        Returns:
            ConfigResponse whose data is the camelCase configuration
        """
        return self._config_call('GET', '/dice-config')

    def set_config(self, dice_sides: int, selection_method: str) -> ConfigResponse:
        """Submit a configuration.

        Args:
            dice_sides: Number of sides
            selection_method: 'predefined' or 'custom'

        Returns:
            ConfigResponse with the server's configuration on success, or
            error/error_code/errors when rejected (HTTP 400)
        """
        payload = {"diceSides": dice_sides, "selectionMethod": selection_method}
        return self._config_call('POST', '/dice-config', json=payload)

    def validate_custom(self, custom_sides: Any) -> ValidationResponse:
        """Validate custom input on the server.

        Args:
            custom_sides: Raw input, sent as-is (string or number)

        Returns:
            ValidationResponse whose data is {isValid, status, errorMessage?, errorPriority?}
        """
        try:
            response = self._request('POST', '/dice-config/validate-custom',
                                     json={"customSides": custom_sides})
        except requests.exceptions.RequestException as e:
            return ValidationResponse(success=False, error=str(e))

        if response.status_code != 200:
            return ValidationResponse(success=False, error=_error_from_response(response)["error"])

        try:
            return ValidationResponse(success=True, data=response.json())
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Invalid JSON in validation response: {e}")
            return ValidationResponse(success=False, error="Invalid response from server")

    def get_predefined_options(self) -> List[int]:
        """Get the predefined side counts.

        Returns:
            List of side counts, empty on failure
        """
        try:
            response = self._request('GET', '/dice-config/predefined-options')
        except requests.exceptions.RequestException:
            return []

        if response.status_code != 200:
            return []
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            logger.warning("Invalid JSON in predefined options response")
            return []
        return [int(x) for x in data] if isinstance(data, list) else []


# Singleton pattern with thread-safe initialization
_api_client: Optional[DiceConfigAPIClient] = None
_api_client_lock = threading.Lock()


def get_api_client() -> DiceConfigAPIClient:
    """Get singleton API client instance (thread-safe)."""
    global _api_client
    if _api_client is None:
        with _api_client_lock:
            if _api_client is None:
                _api_client = DiceConfigAPIClient()
    return _api_client


def set_session_id(session_id: str) -> None:
    """Point the shared client at a browser session (X-Session-ID)."""
    client = get_api_client()
    client.session_id = session_id
    logger.debug(f"API client session ID set: {session_id[:8]}...")
