"""Utilities package for llm-xlsx-parser.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
- Intermediate file helpers (temp_files.py)
"""

from llm_xlsx_parser.utils.exceptions import (
    ConfigurationError,
    ErrorCode,
    FileError,
    InvalidOptionsError,
    LLMError,
    LXPError,
    MarkupParseError,
    MissingCredentialError,
    RasterizationError,
    RasterizerUnavailableError,
    RenderError,
    SpreadsheetNotFoundError,
    SpreadsheetReadError,
)
from llm_xlsx_parser.utils.logging import (
    LogContext,
    StructuredLogger,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Exceptions
    "ConfigurationError",
    "ErrorCode",
    "FileError",
    "InvalidOptionsError",
    "LLMError",
    "LXPError",
    "MarkupParseError",
    "MissingCredentialError",
    "RasterizationError",
    "RasterizerUnavailableError",
    "RenderError",
    "SpreadsheetNotFoundError",
    "SpreadsheetReadError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
