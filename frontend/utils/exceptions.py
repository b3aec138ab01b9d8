"""Custom exceptions for the Dice Config frontend.

Exception Hierarchy:
    DiceConfigError (base)
    ├── StorageError
    ├── SyncError
    ├── ConfigUpdateError
    └── APIError
        └── BackendUnavailableError
"""


class DiceConfigError(Exception):
    """Base exception for the Dice Config frontend.

    All custom exceptions in this application inherit from this class,
    so callers can catch application-specific errors with one clause.

    Example:
        >>> try:
        ...     controller.update_config(20, "predefined")
        ... except DiceConfigError as e:
        ...     handle_error(e)
    """

    def __init__(self, message: str = "An error occurred in Dice Config"):
        self.message = message
        super().__init__(self.message)


class StorageError(DiceConfigError):
    """Raised when a persistence medium cannot be read or written.

    Attributes:
        storage_type: Medium that failed ('localStorage', 'sessionStorage')
        key: Storage key involved (optional)

    Example:
        >>> raise StorageError("Disk full", storage_type="localStorage", key="dice-config-store")
    """

    def __init__(
        self,
        message: str = "Storage operation failed",
        storage_type: str = None,
        key: str = None
    ):
        self.storage_type = storage_type
        self.key = key
        super().__init__(message)


class SyncError(DiceConfigError):
    """Raised when a persisted or broadcast record cannot be decoded.

    Attributes:
        payload: The raw payload that failed to decode (truncated)
    """

    def __init__(self, message: str = "Invalid sync payload", payload: str = None):
        self.payload = payload[:200] if payload else payload
        super().__init__(message)

    def __repr__(self) -> str:
        return f"SyncError(message={self.message!r}, payload={self.payload!r})"


class ConfigUpdateError(DiceConfigError):
    """Raised when the backend rejects a configuration update.

    Attributes:
        error_code: Machine-readable code from the backend (e.g. VALIDATION_ERROR)
    """

    def __init__(self, message: str = "Configuration update failed", error_code: str = None):
        self.error_code = error_code
        super().__init__(message)


class APIError(DiceConfigError):
    """Raised when a backend API call fails.

    Attributes:
        status_code: HTTP status code (if applicable)

    Example:
        >>> raise APIError("API request failed", status_code=500)
    """

    def __init__(self, message: str = "API call failed", status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class BackendUnavailableError(APIError):
    """Raised when the backend API is unavailable.

    Example:
        >>> raise BackendUnavailableError("Cannot connect to backend API")
    """

    def __init__(self, message: str = "Backend API is unavailable"):
        super().__init__(message)
