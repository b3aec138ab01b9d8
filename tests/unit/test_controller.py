"""
Unit tests for DiceConfigController.
"""
from unittest.mock import MagicMock

import pytest

from frontend.services.backend_client import ConfigResponse, DiceConfigAPIClient, ValidationResponse
from frontend.services.dice_config import DiceConfigController, config_from_api
from frontend.utils.cache import TTLCache
from frontend.utils.exceptions import BackendUnavailableError, ConfigUpdateError, SyncError


def config_payload(sides, method="predefined"):
    return {
        "diceSides": sides,
        "selectionMethod": method,
        "probabilityRange": {"min": 1, "max": sides},
        "individualProbability": 1 / sides,
        "displayFormat": f"D{sides}",
    }


@pytest.fixture
def client():
    mock_client = MagicMock(spec=DiceConfigAPIClient)
    mock_client.session_id = "550e8400-e29b-41d4-a716-446655440000"
    return mock_client


@pytest.fixture
def controller(make_store, client):
    store = make_store().start()
    return DiceConfigController(store, client, cache=TTLCache(), options=TTLCache())


class TestConfigFromApi:
    def test_recomputes_derived_fields(self):
        payload = config_payload(20)
        payload["displayFormat"] = "tampered"

        assert config_from_api(payload).display_format == "D20"

    def test_rejects_bad_payload(self):
        with pytest.raises(SyncError):
            config_from_api({"diceSides": "twenty"})


class TestLoad:
    """Tests for the initial fetch."""

    def test_empty_store_is_filled_from_backend(self, controller, client):
        client.get_config.return_value = ConfigResponse(success=True, data=config_payload(6), status_code=200)

        dice_config = controller.load()

        assert dice_config.dice_sides == 6
        assert controller.store.config.dice_sides == 6
        assert controller.store.session_config is not None

    def test_existing_store_config_wins(self, controller, client):
        controller.store.set_config(config_from_api(config_payload(12)))

        assert controller.load().dice_sides == 12
        client.get_config.assert_not_called()

    def test_successful_response_is_cached(self, make_store, client):
        cache = TTLCache()
        client.get_config.return_value = ConfigResponse(success=True, data=config_payload(6), status_code=200)

        DiceConfigController(make_store(), client, cache=cache).load()
        DiceConfigController(make_store(primary=None), client, cache=cache).load()

        client.get_config.assert_called_once()

    def test_backend_failure_leaves_store_empty(self, controller, client):
        client.get_config.return_value = ConfigResponse(success=False, error="refused")

        assert controller.load() is None
        assert controller.store.config is None

    def test_invalid_payload_is_not_kept(self, controller, client):
        client.get_config.return_value = ConfigResponse(success=True, data={"bogus": 1}, status_code=200)

        assert controller.load() is None
        assert "config:550e8400-e29b-41d4-a716-446655440000" not in controller._cache


class TestUpdateConfig:
    """Tests for submitting configurations."""

    def test_accepted_update_applies_to_store(self, controller, client):
        client.set_config.return_value = ConfigResponse(success=True, data=config_payload(20), status_code=200)

        dice_config = controller.update_config(20, "predefined")

        client.set_config.assert_called_once_with(20, "predefined")
        assert dice_config.display_format == "D20"
        assert controller.store.config.dice_sides == 20

    def test_custom_string_input_is_sent_as_int(self, controller, client):
        client.set_config.return_value = ConfigResponse(success=True, data=config_payload(37, "custom"), status_code=200)

        controller.update_config("37", "custom")

        client.set_config.assert_called_once_with(37, "custom")

    def test_local_rejection_skips_backend(self, controller, client):
        with pytest.raises(ConfigUpdateError) as exc_info:
            controller.update_config(7, "predefined")

        assert exc_info.value.error_code == "VALIDATION_ERROR"
        client.set_config.assert_not_called()

    def test_server_rejection(self, controller, client):
        client.set_config.return_value = ConfigResponse(
            success=False, error="Dice sides must be one of: 4, 6, 8, 10, 12, 20",
            error_code="VALIDATION_ERROR", status_code=400,
        )

        with pytest.raises(ConfigUpdateError) as exc_info:
            controller.update_config(20, "predefined")

        assert exc_info.value.error_code == "VALIDATION_ERROR"
        assert controller.store.config is None

    def test_unreachable_backend(self, controller, client):
        client.set_config.return_value = ConfigResponse(success=False, error="refused")

        with pytest.raises(BackendUnavailableError):
            controller.update_config(20, "predefined")


class TestValidateCustom:
    def test_local_failure_skips_server(self, controller, client):
        result = controller.validate_custom("12.5")

        assert result.error_priority == 1
        client.validate_custom.assert_not_called()

    def test_server_result_used(self, controller, client):
        client.validate_custom.return_value = ValidationResponse(
            success=True, data={"isValid": True, "status": "valid"},
        )

        assert controller.validate_custom("20").is_valid

    def test_local_result_when_server_down(self, controller, client):
        client.validate_custom.return_value = ValidationResponse(success=False, error="refused")

        result = controller.validate_custom("20")

        assert result.is_valid
        assert result.status == "valid"


class TestOptionsAndClear:
    def test_predefined_options_cached(self, controller, client):
        client.get_predefined_options.return_value = [4, 6, 8, 10, 12, 20]

        controller.predefined_options()
        controller.predefined_options()

        client.get_predefined_options.assert_called_once()

    def test_predefined_options_fallback(self, controller, client):
        client.get_predefined_options.return_value = []
        assert controller.predefined_options() == [4, 6, 8, 10, 12, 20]

    def test_clear(self, controller, client):
        client.set_config.return_value = ConfigResponse(success=True, data=config_payload(8), status_code=200)
        controller.update_config(8, "predefined")

        controller.clear()

        assert controller.store.config is None
        assert "config:550e8400-e29b-41d4-a716-446655440000" not in controller._cache
