"""Centralized exception classes for the XLSX-to-LLM pipeline.

This module provides a hierarchy of custom exceptions with error codes and
structured error details so that every failure surfaced to a caller can be
told apart programmatically.

Exception Hierarchy:
    LXPError (base)
    ├── ConfigurationError
    │   ├── MissingCredentialError
    │   └── InvalidOptionsError
    ├── FileError
    │   ├── SpreadsheetNotFoundError
    │   ├── SpreadsheetReadError
    │   └── FileWriteError
    ├── RenderError
    │   └── MarkupParseError
    ├── RasterizationError
    │   └── RasterizerUnavailableError
    └── LLMError
        ├── LLMRateLimitError
        └── LLMConnectionError

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the application.

    Error codes are grouped by category:
    - E1xxx: Source file errors
    - E4xxx: Rendering errors
    - E5xxx: External collaborator errors (browser, model API)
    - E9xxx: Configuration/internal errors
    """

    # File errors (E1xxx)
    FILE_NOT_FOUND = "E1001"
    FILE_READ_ERROR = "E1004"
    FILE_WRITE_ERROR = "E1005"

    # Rendering errors (E4xxx)
    RENDER_FAILED = "E4001"
    MARKUP_PARSE_FAILED = "E4002"

    # External service errors (E5xxx)
    LLM_API_ERROR = "E5001"
    LLM_RATE_LIMIT = "E5002"
    LLM_CONNECTION_ERROR = "E5003"
    RASTERIZATION_FAILED = "E5010"
    RASTERIZER_UNAVAILABLE = "E5011"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"
    MISSING_CREDENTIAL = "E9003"
    INVALID_OPTIONS = "E9004"


class LXPError(Exception):
    """Base exception for all llm-xlsx-parser errors.

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary for reporting.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Configuration Errors (E9xxx)
# =============================================================================


class ConfigurationError(LXPError):
    """Raised when settings or call options are unusable."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class MissingCredentialError(ConfigurationError):
    """Raised when the model API credential is not configured."""

    def __init__(
        self,
        credential: str = "openai_api_key",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the name of the missing credential.

        Args:
            credential: Setting name of the missing credential.
            message: Optional custom message.
            details: Additional details.
        """
        details = details or {}
        details["missing"] = credential
        message = message or (
            "OpenAI API key is required. Set the LXP_OPENAI_API_KEY environment "
            "variable or pass api_key explicitly."
        )
        super().__init__(message, ErrorCode.MISSING_CREDENTIAL, details)
        self.credential = credential


class InvalidOptionsError(ConfigurationError):
    """Raised when a rendering or analysis option is out of range."""

    def __init__(
        self,
        message: str,
        option: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if option:
            details["option"] = option
            details["value"] = value
        super().__init__(message, ErrorCode.INVALID_OPTIONS, details)
        self.option = option


# =============================================================================
# File Errors (E1xxx)
# =============================================================================


class FileError(LXPError):
    """Base class for file-related errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_READ_ERROR,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path information.

        Args:
            message: Error message.
            error_code: Error code.
            file_path: Path to the problematic file.
            details: Additional details.
        """
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path


class SpreadsheetNotFoundError(FileError):
    """Raised when the source workbook does not exist."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Spreadsheet not found: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_NOT_FOUND,
            file_path=file_path,
            details=details,
        )


class SpreadsheetReadError(FileError):
    """Raised when a workbook exists but cannot be parsed."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Unable to read spreadsheet: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_READ_ERROR,
            file_path=file_path,
            details=details,
        )


class FileWriteError(FileError):
    """Raised when an output file cannot be written."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Unable to write output file: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_WRITE_ERROR,
            file_path=file_path,
            details=details,
        )


# =============================================================================
# Rendering Errors (E4xxx)
# =============================================================================


class RenderError(LXPError):
    """Base class for HTML rendering errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.RENDER_FAILED,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with rendering stage.

        Args:
            message: Error message.
            error_code: Error code.
            stage: The rendering stage where the error occurred.
            details: Additional details.
        """
        details = details or {}
        if stage:
            details["render_stage"] = stage
        super().__init__(message, error_code, details)
        self.stage = stage


class MarkupParseError(RenderError):
    """Raised when generated markup cannot be parsed into a table tree."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.MARKUP_PARSE_FAILED,
            stage="style_overlay",
            details=details,
        )


# =============================================================================
# External Service Errors (E5xxx)
# =============================================================================


class RasterizationError(LXPError):
    """Raised when the headless browser fails to produce a screenshot."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.RASTERIZATION_FAILED,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with an optional remediation hint.

        Args:
            message: Error message.
            error_code: Error code.
            hint: Suggested fix shown to the operator.
            details: Additional details.
        """
        details = details or {}
        if hint:
            details["hint"] = hint
        super().__init__(message, error_code, details)
        self.hint = hint


class RasterizerUnavailableError(RasterizationError):
    """Raised when the browser engine is not installed."""

    def __init__(
        self,
        message: str = "Headless browser is not installed",
        hint: str = "Run `playwright install chromium`",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=ErrorCode.RASTERIZER_UNAVAILABLE,
            hint=hint,
            details=details,
        )


class LLMError(LXPError):
    """Base class for model API errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.LLM_API_ERROR,
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with model information.

        Args:
            message: Error message.
            error_code: Error code.
            model: The LLM model that caused the error.
            details: Additional details.
        """
        details = details or {}
        if model:
            details["model"] = model
        super().__init__(message, error_code, details)
        self.model = model


class LLMRateLimitError(LLMError):
    """Raised when the model API rate limit is exceeded."""

    def __init__(
        self,
        message: str = "LLM API rate limit exceeded",
        retry_after: int | None = None,
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if retry_after is not None:
            details["retry_after_seconds"] = retry_after
        super().__init__(
            message=message,
            error_code=ErrorCode.LLM_RATE_LIMIT,
            model=model,
            details=details,
        )


class LLMConnectionError(LLMError):
    """Raised on transient network failures talking to the model API."""

    def __init__(
        self,
        message: str = "Could not reach the LLM API",
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["transient"] = True
        super().__init__(
            message=message,
            error_code=ErrorCode.LLM_CONNECTION_ERROR,
            model=model,
            details=details,
        )
