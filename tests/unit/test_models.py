"""
Unit tests for the sync data model and its wire format.
"""
import json

import pytest

from frontend.sync import (
    DiceConfig,
    PersistedRecord,
    SelectionMethod,
    SessionConfig,
    StorageType,
    build_dice_config,
)
from frontend.utils.exceptions import SyncError


class TestBuildDiceConfig:
    """Tests for derived probability fields."""

    @pytest.mark.parametrize("sides", [2, 6, 20, 1000])
    def test_derived_fields(self, sides):
        dice_config = build_dice_config(sides)

        assert dice_config.probability_range == (1, sides)
        assert dice_config.individual_probability == pytest.approx(1 / sides)
        assert dice_config.display_format == f"D{sides}"
        assert dice_config.selection_method == SelectionMethod.PREDEFINED

    def test_method_from_string(self):
        assert build_dice_config(7, "custom").selection_method == SelectionMethod.CUSTOM


class TestDiceConfigWireFormat:
    def test_to_dict_is_camel_case(self):
        data = build_dice_config(20).to_dict()

        assert data == {
            "diceSides": 20,
            "selectionMethod": "predefined",
            "probabilityRange": {"min": 1, "max": 20},
            "individualProbability": 0.05,
            "displayFormat": "D20",
        }

    def test_from_dict_fills_missing_derived_fields(self):
        dice_config = DiceConfig.from_dict({"diceSides": 8, "selectionMethod": "custom"})
        assert dice_config == build_dice_config(8, "custom")

    @pytest.mark.parametrize("data", [
        None,
        [],
        {"selectionMethod": "custom"},
        {"diceSides": 8, "selectionMethod": "random"},
        {"diceSides": "8", "selectionMethod": "custom"},
        {"diceSides": 0, "selectionMethod": "custom"},
        {"diceSides": True, "selectionMethod": "custom"},
        {"diceSides": 1, "selectionMethod": "custom"},
        {"diceSides": 1001, "selectionMethod": "custom"},
        {"diceSides": 6, "selectionMethod": "predefined", "probabilityRange": 5},
        {"diceSides": 6, "selectionMethod": "predefined", "probabilityRange": "x"},
        {"diceSides": 6, "selectionMethod": "predefined", "probabilityRange": {"min": "1", "max": 6}},
        {"diceSides": 6, "selectionMethod": "predefined", "individualProbability": "high"},
        {"diceSides": 6, "selectionMethod": "predefined", "displayFormat": 6},
    ])
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(SyncError):
            DiceConfig.from_dict(data)


class TestSessionConfig:
    def test_from_dict_defaults(self):
        session_config = SessionConfig.from_dict({
            "diceSides": 6,
            "selectionMethod": "predefined",
            "timestamp": 1_700_000_000_000,
        })

        assert session_config.storage_type == StorageType.UNAVAILABLE
        assert session_config.sync_key == ""

    @pytest.mark.parametrize("timestamp", [None, "soon", True])
    def test_timestamp_must_be_numeric(self, timestamp):
        with pytest.raises(SyncError):
            SessionConfig.from_dict({"diceSides": 6, "selectionMethod": "predefined", "timestamp": timestamp})


class TestPersistedRecord:
    """Tests for the persisted/broadcast record."""

    def test_empty_state(self):
        record = PersistedRecord.from_json(json.dumps({"state": None}))

        assert record.config is None
        assert record.session_config is None
        assert record.timestamp == 0

    def test_json_shape(self):
        record = PersistedRecord(
            config=build_dice_config(12),
            session_config=SessionConfig(
                dice_sides=12,
                selection_method=SelectionMethod.PREDEFINED,
                timestamp=42,
                storage_type=StorageType.LOCAL_STORAGE,
                sync_key="dice-config-42-abc",
            ),
        )
        payload = json.loads(record.to_json())

        assert set(payload["state"]) == {"config", "sessionConfig"}
        assert payload["state"]["sessionConfig"]["storageType"] == "localStorage"
        assert PersistedRecord.from_json(record.to_json()) == record

    @pytest.mark.parametrize("raw", [
        "not json",
        "[]",
        '{"state": 5}',
        '{"state": {"config": {"diceSides": 6, "selectionMethod": "predefined"}, "sessionConfig": null}}',
    ])
    def test_malformed_payloads(self, raw):
        with pytest.raises(SyncError):
            PersistedRecord.from_json(raw)

    def test_sync_error_truncates_payload(self):
        with pytest.raises(SyncError) as exc_info:
            PersistedRecord.from_json("x" * 1000)
        assert len(exc_info.value.payload) == 200
