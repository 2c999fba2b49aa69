"""Configuration management for llm-xlsx-parser.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
LXP_ prefix, or via a .env file in the project root.

Environment Variables:
    LXP_OPENAI_API_KEY: OpenAI API key (required for analysis)
    LXP_OPENAI_MODEL: Vision-capable model used for analysis (default: gpt-4o)
    LXP_OPENAI_TEMPERATURE: LLM temperature setting (default: 0.0)
    LXP_OPENAI_MAX_TOKENS: Maximum tokens for LLM responses (default: 4096)
    LXP_MAX_ROWS: Rows included in the rendered image (default: 50)
    LXP_MAX_COLS: Columns included in the rendered image (default: 40)
    LXP_FONT_SIZE: Table font size in px for the rendered image (default: 8)
    LXP_CELL_PADDING: Table cell padding in px for the rendered image (default: 2)
    LXP_VIEWPORT_WIDTH: Browser viewport width (default: 1920)
    LXP_VIEWPORT_HEIGHT: Browser viewport height (default: 1080)
    LXP_FULL_PAGE: Capture the full page instead of the viewport (default: true)
    LXP_BROWSER_TIMEOUT_MS: Browser navigation timeout (default: 30000)
    LXP_SEND_IMAGE: Include the rendered image in analysis (default: true)
    LXP_SEND_CSV: Include CSV text in analysis (default: true)
    LXP_SEND_RECORDS: Include record-format text in analysis (default: true)
    LXP_LOG_LEVEL: Logging level (default: INFO)
    LXP_DEBUG: Enable debug mode (default: false)
"""

import logging
from typing import Any

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be configured via environment variables prefixed with LXP_
    or via a .env file. The API key uses SecretStr to prevent accidental
    logging.

    Example .env file:
        LXP_OPENAI_API_KEY=sk-...
        LXP_LOG_LEVEL=DEBUG
        LXP_MAX_ROWS=80
    """

    model_config = SettingsConfigDict(
        env_prefix="LXP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # OpenAI / LLM Settings
    # =========================================================================

    openai_api_key: SecretStr = SecretStr("")
    """OpenAI API key. Required for spreadsheet analysis."""

    openai_model: str = "gpt-4o"
    """Vision-capable model used for multimodal analysis."""

    openai_temperature: float = 0.0
    """Temperature for LLM sampling. 0.0 for deterministic output."""

    openai_max_tokens: int = 4096
    """Maximum tokens for LLM response generation."""

    # =========================================================================
    # Rendering Settings
    # =========================================================================

    max_rows: int = 50
    """Rows of the first sheet included in the rendered image."""

    max_cols: int = 40
    """Columns of the first sheet included in the rendered image."""

    font_size: int = 8
    """Table font size in pixels for the rendered image."""

    cell_padding: int = 2
    """Table cell padding in pixels for the rendered image."""

    viewport_width: int = 1920
    """Browser viewport width in pixels."""

    viewport_height: int = 1080
    """Browser viewport height in pixels."""

    full_page: bool = True
    """Capture the whole page rather than only the viewport."""

    browser_timeout_ms: int = 30000
    """Navigation and screenshot timeout for the headless browser."""

    # =========================================================================
    # Analysis Content Settings
    # =========================================================================

    send_image: bool = True
    """Include the rendered image in the analysis request."""

    send_csv: bool = True
    """Include raw CSV text in the analysis request."""

    send_records: bool = True
    """Include record-format text in the analysis request."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging and error details."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("openai_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        """Validate temperature is within the API's accepted range."""
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"openai_temperature must be between 0.0 and 2.0, got {v}")
        return v

    @field_validator(
        "openai_max_tokens",
        "max_rows",
        "max_cols",
        "font_size",
        "viewport_width",
        "viewport_height",
        "browser_timeout_ms",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate sizes and limits are positive."""
        if v < 1:
            raise ValueError(f"Value must be at least 1, got {v}")
        return v

    @field_validator("cell_padding")
    @classmethod
    def validate_cell_padding(cls, v: int) -> int:
        """Validate cell padding is not negative."""
        if v < 0:
            raise ValueError(f"cell_padding must not be negative, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def get_openai_api_key(self) -> str:
        """Get the OpenAI API key value.

        Returns:
            The API key string. Returns empty string if not set.

        Note:
            Use this method to access the API key value. Direct access to
            openai_api_key returns a SecretStr which prevents accidental logging.
        """
        return self.openai_api_key.get_secret_value()

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary with sensitive values masked."""
        return {
            "openai_api_key": "***" if self.get_openai_api_key() else "(not set)",
            "openai_model": self.openai_model,
            "openai_temperature": self.openai_temperature,
            "openai_max_tokens": self.openai_max_tokens,
            "max_rows": self.max_rows,
            "max_cols": self.max_cols,
            "font_size": self.font_size,
            "cell_padding": self.cell_padding,
            "viewport_width": self.viewport_width,
            "viewport_height": self.viewport_height,
            "full_page": self.full_page,
            "browser_timeout_ms": self.browser_timeout_ms,
            "send_image": self.send_image,
            "send_csv": self.send_csv,
            "send_records": self.send_records,
            "log_level": self.log_level,
            "debug": self.debug,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Warn about settings that will make later steps fail.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if not s.get_openai_api_key():
        logger.warning(
            "OPENAI_API_KEY is not configured. Spreadsheet analysis will not work. "
            "Set LXP_OPENAI_API_KEY environment variable."
        )

    if not (s.send_image or s.send_csv or s.send_records):
        logger.warning(
            "All analysis content types are disabled; the model will only "
            "receive the request text."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"model={s.openai_model}, max_rows={s.max_rows}, max_cols={s.max_cols}"
    )
    logger.debug(f"Effective settings: {s.to_safe_dict()}")


# Create the global settings instance
settings = Settings()
