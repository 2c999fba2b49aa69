"""Tests for the centralized exception classes."""

from llm_xlsx_parser.utils.exceptions import (
    ConfigurationError,
    ErrorCode,
    FileError,
    FileWriteError,
    InvalidOptionsError,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LXPError,
    MarkupParseError,
    MissingCredentialError,
    RasterizationError,
    RasterizerUnavailableError,
    RenderError,
    SpreadsheetNotFoundError,
    SpreadsheetReadError,
)


class TestErrorCode:
    """Tests for ErrorCode enumeration."""

    def test_error_codes_are_unique(self) -> None:
        values = [code.value for code in ErrorCode]
        assert len(values) == len(set(values))

    def test_error_code_format(self) -> None:
        """Error codes should follow Exxxx format."""
        for code in ErrorCode:
            assert code.value.startswith("E")
            assert len(code.value) == 5
            assert code.value[1:].isdigit()

    def test_categories(self) -> None:
        assert ErrorCode.FILE_NOT_FOUND.value.startswith("E1")
        assert ErrorCode.MARKUP_PARSE_FAILED.value.startswith("E4")
        assert ErrorCode.RASTERIZER_UNAVAILABLE.value.startswith("E5")
        assert ErrorCode.MISSING_CREDENTIAL.value.startswith("E9")


class TestLXPError:
    """Tests for the base exception."""

    def test_defaults(self) -> None:
        error = LXPError("Something broke")
        assert error.message == "Something broke"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.details == {}

    def test_str_includes_code(self) -> None:
        error = LXPError("Something broke", ErrorCode.RENDER_FAILED)
        assert str(error) == "[E4001] Something broke"

    def test_to_dict(self) -> None:
        error = LXPError("Bad", ErrorCode.INTERNAL_ERROR, {"key": "value"})
        assert error.to_dict() == {
            "error_code": "E9001",
            "message": "Bad",
            "details": {"key": "value"},
        }

    def test_to_dict_omits_empty_details(self) -> None:
        assert "details" not in LXPError("Bad").to_dict()


class TestConfigurationErrors:
    def test_missing_credential(self) -> None:
        error = MissingCredentialError()
        assert isinstance(error, ConfigurationError)
        assert error.error_code == ErrorCode.MISSING_CREDENTIAL
        assert "API key is required" in error.message
        assert error.details["missing"] == "openai_api_key"

    def test_invalid_options_records_option(self) -> None:
        error = InvalidOptionsError("max_rows must be at least 1", "max_rows", 0)
        assert error.error_code == ErrorCode.INVALID_OPTIONS
        assert error.option == "max_rows"
        assert error.details == {"option": "max_rows", "value": 0}


class TestFileErrors:
    def test_not_found(self) -> None:
        error = SpreadsheetNotFoundError("/tmp/missing.xlsx")
        assert isinstance(error, FileError)
        assert error.error_code == ErrorCode.FILE_NOT_FOUND
        assert error.message == "Spreadsheet not found: /tmp/missing.xlsx"
        assert error.details["file_path"] == "/tmp/missing.xlsx"

    def test_read_error_custom_message(self) -> None:
        error = SpreadsheetReadError("/tmp/x.xlsx", message="corrupt")
        assert error.error_code == ErrorCode.FILE_READ_ERROR
        assert error.message == "corrupt"

    def test_write_error(self) -> None:
        error = FileWriteError("/ro/out.html")
        assert error.error_code == ErrorCode.FILE_WRITE_ERROR
        assert error.file_path == "/ro/out.html"


class TestRenderErrors:
    def test_markup_parse_error_stage(self) -> None:
        error = MarkupParseError("no table", details={"document_length": 3})
        assert isinstance(error, RenderError)
        assert error.stage == "style_overlay"
        assert error.details["render_stage"] == "style_overlay"
        assert error.details["document_length"] == 3


class TestCollaboratorErrors:
    def test_rasterizer_unavailable_has_hint(self) -> None:
        error = RasterizerUnavailableError()
        assert isinstance(error, RasterizationError)
        assert error.error_code == ErrorCode.RASTERIZER_UNAVAILABLE
        assert "playwright install chromium" in error.hint
        assert error.details["hint"] == error.hint

    def test_rasterization_error_without_hint(self) -> None:
        error = RasterizationError("crashed")
        assert error.hint is None
        assert "hint" not in error.details

    def test_rate_limit(self) -> None:
        error = LLMRateLimitError(retry_after=30, model="gpt-4o")
        assert isinstance(error, LLMError)
        assert error.error_code == ErrorCode.LLM_RATE_LIMIT
        assert error.details == {"retry_after_seconds": 30, "model": "gpt-4o"}

    def test_connection_error_is_transient(self) -> None:
        error = LLMConnectionError(model="gpt-4o")
        assert error.error_code == ErrorCode.LLM_CONNECTION_ERROR
        assert error.details["transient"] is True
        assert error.model == "gpt-4o"
