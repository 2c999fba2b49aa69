"""Tests for configuration management module."""

import logging
import os
from unittest.mock import patch

import pytest
from pydantic import SecretStr

from llm_xlsx_parser.config import Settings, validate_settings_on_startup


class TestSettings:
    """Tests for the Settings class."""

    def test_default_values(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        # OpenAI defaults
        assert settings.get_openai_api_key() == ""
        assert settings.openai_model == "gpt-4o"
        assert settings.openai_temperature == 0.0
        assert settings.openai_max_tokens == 4096

        # Screenshot defaults
        assert settings.max_rows == 50
        assert settings.max_cols == 40
        assert settings.font_size == 8
        assert settings.cell_padding == 2
        assert settings.viewport_width == 1920
        assert settings.viewport_height == 1080
        assert settings.full_page is True
        assert settings.browser_timeout_ms == 30000

        # Content toggles
        assert settings.send_image is True
        assert settings.send_csv is True
        assert settings.send_records is True

        # Logging defaults
        assert settings.log_level == "INFO"
        assert settings.debug is False

    def test_environment_variable_prefix(self) -> None:
        env_vars = {
            "LXP_MAX_ROWS": "80",
            "LXP_OPENAI_MODEL": "gpt-4o-mini",
            "LXP_SEND_IMAGE": "false",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.max_rows == 80
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.send_image is False

    def test_secret_str_for_api_key(self) -> None:
        env_vars = {"LXP_OPENAI_API_KEY": "sk-test-secret-key"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert isinstance(settings.openai_api_key, SecretStr)
        assert settings.get_openai_api_key() == "sk-test-secret-key"
        assert "sk-test-secret-key" not in str(settings.openai_api_key)

    def test_log_level_int_property(self) -> None:
        for level_str, expected_int in [
            ("DEBUG", logging.DEBUG),
            ("WARNING", logging.WARNING),
            ("CRITICAL", logging.CRITICAL),
        ]:
            with patch.dict(os.environ, {"LXP_LOG_LEVEL": level_str}, clear=True):
                settings = Settings(_env_file=None)
            assert settings.log_level_int == expected_int

    def test_to_safe_dict_masks_api_key(self) -> None:
        env_vars = {"LXP_OPENAI_API_KEY": "sk-actual-secret-key"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        safe_dict = settings.to_safe_dict()
        assert safe_dict["openai_api_key"] == "***"
        assert "sk-actual-secret-key" not in str(safe_dict)
        assert safe_dict["max_cols"] == 40

    def test_to_safe_dict_shows_not_set_for_empty_key(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.to_safe_dict()["openai_api_key"] == "(not set)"


class TestSettingsValidation:
    """Tests for settings validation."""

    def test_lowercase_log_level_normalized(self) -> None:
        with patch.dict(os.environ, {"LXP_LOG_LEVEL": "debug"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_raises_error(self) -> None:
        with (
            patch.dict(os.environ, {"LXP_LOG_LEVEL": "INVALID"}, clear=True),
            pytest.raises(ValueError, match="Invalid log level"),
        ):
            Settings(_env_file=None)

    def test_temperature_range(self) -> None:
        with (
            patch.dict(os.environ, {"LXP_OPENAI_TEMPERATURE": "2.5"}, clear=True),
            pytest.raises(ValueError, match="between 0.0 and 2.0"),
        ):
            Settings(_env_file=None)

    @pytest.mark.parametrize(
        "variable", ["LXP_MAX_ROWS", "LXP_MAX_COLS", "LXP_FONT_SIZE", "LXP_VIEWPORT_WIDTH"]
    )
    def test_sizes_must_be_positive(self, variable: str) -> None:
        with (
            patch.dict(os.environ, {variable: "0"}, clear=True),
            pytest.raises(ValueError, match="at least 1"),
        ):
            Settings(_env_file=None)

    def test_zero_cell_padding_allowed(self) -> None:
        with patch.dict(os.environ, {"LXP_CELL_PADDING": "0"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.cell_padding == 0

    def test_negative_cell_padding_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"LXP_CELL_PADDING": "-1"}, clear=True),
            pytest.raises(ValueError, match="must not be negative"),
        ):
            Settings(_env_file=None)


class TestValidateSettingsOnStartup:
    """Tests for the validate_settings_on_startup function."""

    def test_warns_when_api_key_not_set(self, caplog: pytest.LogCaptureFixture) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "OPENAI_API_KEY is not configured" in caplog.text

    def test_no_warning_when_api_key_set(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        env_vars = {"LXP_OPENAI_API_KEY": "sk-test-key"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "OPENAI_API_KEY is not configured" not in caplog.text

    def test_warns_when_all_content_disabled(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        env_vars = {
            "LXP_OPENAI_API_KEY": "sk-test",
            "LXP_SEND_IMAGE": "false",
            "LXP_SEND_CSV": "false",
            "LXP_SEND_RECORDS": "false",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.WARNING):
            validate_settings_on_startup(settings)

        assert "content types are disabled" in caplog.text

    def test_logs_masked_settings_at_debug(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        env_vars = {"LXP_OPENAI_API_KEY": "sk-test-key", "LXP_MAX_ROWS": "80"}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        with caplog.at_level(logging.DEBUG, logger="llm_xlsx_parser.config"):
            validate_settings_on_startup(settings)

        assert "Effective settings:" in caplog.text
        assert "'openai_api_key': '***'" in caplog.text
        assert "'max_rows': 80" in caplog.text
        assert "sk-test-key" not in caplog.text
