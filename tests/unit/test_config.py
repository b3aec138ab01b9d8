"""
Unit tests for configuration.

Tests settings loading including:
- Backend defaults
- Environment variable overrides
- CORS origins parsing
- Frontend settings and derived values
"""
import os
from pathlib import Path
from unittest.mock import patch

import pytest


class TestSettingsDefaults:
    """Tests for default backend settings values."""

    @pytest.fixture
    def settings(self):
        from backend.config import Settings

        # Fresh settings without env file or environment
        with patch.dict(os.environ, {}, clear=True):
            return Settings(_env_file=None)

    def test_application_defaults(self, settings):
        assert settings.APP_NAME == "DiceConfig"
        assert settings.APP_VERSION == "1.0.0"
        assert settings.DEBUG is False
        assert settings.is_production is True

    def test_server_defaults(self, settings):
        assert settings.API_HOST == "0.0.0.0"
        assert settings.API_PORT == 8000

    def test_database_defaults(self, settings):
        assert settings.DATABASE_URL == "sqlite:///./data/dice_config.db"
        assert settings.DB_TIMEOUT == 30

    def test_session_validation_on_by_default(self, settings):
        assert settings.REQUIRE_SESSION_VALIDATION is True

    def test_paths_are_paths(self, settings):
        assert settings.DATA_DIR == Path("./data")
        assert settings.LOG_DIR == Path("./data/logs")


class TestSettingsOverrides:
    """Tests for environment variable overrides."""

    def test_env_overrides(self):
        from backend.config import Settings

        env = {"API_PORT": "9000", "DEBUG": "true", "DATA_DIR": "/tmp/dice"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        assert settings.API_PORT == 9000
        assert settings.DEBUG is True
        assert settings.DATA_DIR == Path("/tmp/dice")

    def test_unknown_env_vars_ignored(self):
        from backend.config import Settings

        with patch.dict(os.environ, {"STORAGE_DIR": "/tmp/x"}, clear=True):
            Settings(_env_file=None)


class TestCorsOrigins:
    """Tests for CORS_ORIGINS parsing."""

    def test_default_origins(self):
        from backend.config import Settings

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cors_origins_list == ["http://localhost:8501", "http://127.0.0.1:8501"]

    def test_whitespace_and_empty_entries(self):
        from backend.config import Settings

        with patch.dict(os.environ, {"CORS_ORIGINS": " http://a.example , ,http://b.example "}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cors_origins_list == ["http://a.example", "http://b.example"]

    def test_empty_origins(self):
        from backend.config import Settings

        with patch.dict(os.environ, {"CORS_ORIGINS": ""}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.cors_origins_list == []


class TestFrontendSettings:
    """Tests for the frozen frontend configuration."""

    def test_dice_rules(self):
        from frontend.config.settings import config

        assert config.DEFAULT_SIDES == 6
        assert config.MIN_SIDES == 2
        assert config.MAX_SIDES == 1000
        assert config.PREDEFINED_SIDES == (4, 6, 8, 10, 12, 20)
        assert config.STORAGE_KEY == "dice-config-store"

    def test_config_is_frozen(self):
        from dataclasses import FrozenInstanceError
        from frontend.config.settings import config

        with pytest.raises(FrozenInstanceError):
            config.MAX_SIDES = 5

    def test_env_overrides_and_derived_values(self):
        from frontend.config.settings import DiceConfigSettings

        env = {"SYNC_POLL_INTERVAL_MS": "500", "SESSION_EXPIRY_HOURS": "1", "API_TIMEOUT_SECONDS": "bad"}
        with patch.dict(os.environ, env):
            settings = DiceConfigSettings()

        assert settings.SYNC_POLL_INTERVAL_SECONDS == 0.5
        assert settings.SESSION_EXPIRY_MS == 3_600_000
        # Unparseable values fall back to defaults
        assert settings.API_TIMEOUT_SECONDS == 10
