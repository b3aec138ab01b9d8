"""Data model for the dice configuration sync store.

Wire format (the value persisted under the store key and carried by
change notifications) uses camelCase field names:

    {"state": {"config": {...} | null, "sessionConfig": {...} | null}}
"""

import json
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from frontend.config.settings import config
from frontend.utils.exceptions import SyncError


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SelectionMethod(str, Enum):
    PREDEFINED = "predefined"
    CUSTOM = "custom"


class StorageType(str, Enum):
    """Persistence medium that produced a record."""
    LOCAL_STORAGE = "localStorage"
    SESSION_STORAGE = "sessionStorage"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class DiceConfig:
    """User-visible die setup with derived probability fields."""
    dice_sides: int
    selection_method: SelectionMethod
    probability_min: int
    probability_max: int
    individual_probability: float
    display_format: str

    @property
    def probability_range(self) -> Tuple[int, int]:
        return self.probability_min, self.probability_max

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diceSides": self.dice_sides,
            "selectionMethod": self.selection_method.value,
            "probabilityRange": {
                "min": self.probability_min,
                "max": self.probability_max,
            },
            "individualProbability": self.individual_probability,
            "displayFormat": self.display_format,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiceConfig":
        """Build from the camelCase wire shape.

        Derived fields are recomputed when absent, so a bare
        ``{"diceSides": 8, "selectionMethod": "custom"}`` is accepted.

        Raises:
            SyncError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise SyncError(f"Configuration must be an object, got {type(data).__name__}")
        try:
            sides = data["diceSides"]
            method = SelectionMethod(data["selectionMethod"])
        except (KeyError, ValueError) as e:
            raise SyncError(f"Invalid configuration: {e}")
        if not _is_int(sides) or not config.MIN_SIDES <= sides <= config.MAX_SIDES:
            raise SyncError(f"Invalid dice sides: {sides!r}")

        built = build_dice_config(sides, method)
        prob_range = data.get("probabilityRange") or {}
        if not isinstance(prob_range, dict):
            raise SyncError(f"probabilityRange must be an object, got {type(prob_range).__name__}")
        prob_min = prob_range.get("min", built.probability_min)
        prob_max = prob_range.get("max", built.probability_max)
        if not (_is_int(prob_min) and _is_int(prob_max)):
            raise SyncError(f"Invalid probability range: {prob_range!r}")

        probability = data.get("individualProbability", built.individual_probability)
        if isinstance(probability, bool) or not isinstance(probability, (int, float)):
            raise SyncError(f"Invalid individual probability: {probability!r}")
        display_format = data.get("displayFormat", built.display_format)
        if not isinstance(display_format, str):
            raise SyncError(f"Invalid display format: {display_format!r}")

        return replace(
            built,
            probability_min=prob_min,
            probability_max=prob_max,
            individual_probability=float(probability),
            display_format=display_format,
        )


@dataclass(frozen=True)
class SessionConfig:
    """Synchronization envelope for a stored configuration."""
    dice_sides: int
    selection_method: SelectionMethod
    timestamp: int  # epoch milliseconds
    storage_type: StorageType
    sync_key: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diceSides": self.dice_sides,
            "selectionMethod": self.selection_method.value,
            "timestamp": self.timestamp,
            "storageType": self.storage_type.value,
            "syncKey": self.sync_key,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionConfig":
        if not isinstance(data, dict):
            raise SyncError(f"Session config must be an object, got {type(data).__name__}")
        try:
            timestamp = data["timestamp"]
            if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
                raise ValueError(f"timestamp must be a number, got {timestamp!r}")
            return cls(
                dice_sides=int(data["diceSides"]),
                selection_method=SelectionMethod(data["selectionMethod"]),
                timestamp=int(timestamp),
                storage_type=StorageType(data.get("storageType", StorageType.UNAVAILABLE.value)),
                sync_key=str(data.get("syncKey", "")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SyncError(f"Invalid session config: {e}")


@dataclass(frozen=True)
class PersistedRecord:
    """Decoded form of the persisted/broadcast value."""
    config: Optional[DiceConfig] = None
    session_config: Optional[SessionConfig] = None

    @property
    def timestamp(self) -> int:
        """Ordering key; 0 when the record carries no session config."""
        return self.session_config.timestamp if self.session_config else 0

    def to_json(self) -> str:
        return json.dumps({
            "state": {
                "config": self.config.to_dict() if self.config else None,
                "sessionConfig": self.session_config.to_dict() if self.session_config else None,
            }
        })

    @classmethod
    def from_json(cls, raw: str) -> "PersistedRecord":
        """Decode a persisted value.

        Raises:
            SyncError: On invalid JSON or an unexpected shape
        """
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise SyncError(f"Invalid JSON in sync payload: {e}", payload=raw if isinstance(raw, str) else None)

        if not isinstance(payload, dict):
            raise SyncError("Sync payload must be an object", payload=raw)
        state = payload.get("state")
        if state is None:
            return cls()
        if not isinstance(state, dict):
            raise SyncError("Sync payload 'state' must be an object", payload=raw)

        raw_session = state.get("sessionConfig")
        raw_config = state.get("config")
        session_config = SessionConfig.from_dict(raw_session) if raw_session is not None else None
        config = DiceConfig.from_dict(raw_config) if raw_config is not None else None

        # Configuration and metadata only travel together
        if (config is None) != (session_config is None):
            raise SyncError("Sync payload has config and sessionConfig out of step", payload=raw)
        return cls(config=config, session_config=session_config)


@dataclass(frozen=True)
class SyncStateSnapshot:
    """Immutable view of a store's state, handed to listeners and the UI."""
    config: Optional[DiceConfig]
    session_config: Optional[SessionConfig]
    storage_type: StorageType
    sync_retry_count: int = 0
    polling_active: bool = False


def build_dice_config(sides: int, selection_method=SelectionMethod.PREDEFINED) -> DiceConfig:
    """Create a configuration with its derived probability fields."""
    method = SelectionMethod(selection_method)
    return DiceConfig(
        dice_sides=sides,
        selection_method=method,
        probability_min=1,
        probability_max=sides,
        individual_probability=1 / sides,
        display_format=f"D{sides}",
    )
