"""Tests for SpreadsheetAnalyzer (model and browser mocked)."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from PIL import Image

from llm_xlsx_parser.config import Settings
from llm_xlsx_parser.rendering.rasterizer import HtmlRasterizer
from llm_xlsx_parser.services.analyzer import (
    CSV_HEADING,
    DEFAULT_SYSTEM_PROMPT,
    RECORDS_HEADING,
    REQUEST_HEADING,
    AnalysisOptions,
    SpreadsheetAnalyzer,
    build_request_text,
)
from llm_xlsx_parser.utils.exceptions import (
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    MissingCredentialError,
    RasterizationError,
)


def _write_png(html: str, image_path: Path) -> Path:
    Image.new("RGB", (4, 4), "white").save(image_path, format="PNG")
    return image_path


def _response(text: str = "name: Ann\nage: 30") -> AIMessage:
    return AIMessage(
        content=text,
        usage_metadata={"input_tokens": 120, "output_tokens": 30, "total_tokens": 150},
    )


def _temp_images(directory: Path) -> list[Path]:
    return list(directory.glob("temp-*.png"))


class TestBuildRequestText:
    def test_all_sections(self) -> None:
        text = build_request_text(
            "name: Ann", "name\nAnn\n", ["visual image", "structured records", "raw CSV"]
        )
        assert text.startswith(f"{RECORDS_HEADING}\nname: Ann")
        assert f"{CSV_HEADING}\nname\nAnn\n" in text
        assert REQUEST_HEADING in text
        assert "in all its forms (visual image, structured records, raw CSV)" in text
        assert "5. Any recommendations" in text

    def test_no_content(self) -> None:
        text = build_request_text(None, None, [])
        assert RECORDS_HEADING not in text
        assert CSV_HEADING not in text
        assert "from the provided data" in text


class TestAnalysisOptions:
    def test_defaults(self) -> None:
        options = AnalysisOptions()
        render = options.render_options()
        assert (render.max_rows, render.max_cols) == (50, 40)
        assert (render.font_size, render.cell_padding) == (8, 2)
        assert options.system_prompt == DEFAULT_SYSTEM_PROMPT
        assert options.content_types() == [
            "visual image",
            "structured records",
            "raw CSV",
        ]

    def test_overrides(self) -> None:
        options = AnalysisOptions.from_settings(send_image=False, max_rows=10)
        assert options.max_rows == 10
        assert options.content_types() == ["structured records", "raw CSV"]


class TestSpreadsheetAnalyzer:
    def test_missing_credential_fails_before_reading(self, tmp_path: Path) -> None:
        analyzer = SpreadsheetAnalyzer()
        analyzer.reader = MagicMock()

        with (
            patch.object(Settings, "get_openai_api_key", return_value=""),
            pytest.raises(MissingCredentialError),
        ):
            analyzer.analyze(tmp_path / "missing.xlsx", tmp_path / "out.txt")

        analyzer.reader.read.assert_not_called()
        assert not (tmp_path / "out.txt").exists()

    @patch.object(HtmlRasterizer, "rasterize_html", side_effect=_write_png)
    @patch("llm_xlsx_parser.services.analyzer.ChatOpenAI")
    def test_analyze_sends_all_forms(
        self,
        mock_chat: MagicMock,
        mock_rasterize: MagicMock,
        plain_workbook_path: Path,
        tmp_path: Path,
    ) -> None:
        mock_chat.return_value.invoke.return_value = _response()
        output = tmp_path / "out" / "analysis.txt"

        result = SpreadsheetAnalyzer(api_key="sk-test").analyze(
            plain_workbook_path, output
        )

        assert output.read_text(encoding="utf-8") == "name: Ann\nage: 30"
        assert result.analysis_text == "name: Ann\nage: 30"
        assert result.total_tokens == 150
        assert result.content_types == ["visual image", "structured records", "raw CSV"]
        assert mock_chat.call_args.kwargs["api_key"] == "sk-test"
        assert mock_chat.call_args.kwargs["temperature"] == 0.0

        messages = mock_chat.return_value.invoke.call_args[0][0]
        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == DEFAULT_SYSTEM_PROMPT
        assert isinstance(messages[1], HumanMessage)
        image_part, text_part = messages[1].content
        assert image_part["type"] == "image_url"
        assert image_part["image_url"]["url"].startswith("data:image/png;base64,")
        assert "Name: Ann\nAge: 30\n\nName: Bob\nAge: 41" in text_part["text"]
        assert "Name,Age\nAnn,30\nBob,41\n" in text_part["text"]

        assert mock_rasterize.call_count == 1
        assert _temp_images(output.parent) == []

    @patch.object(HtmlRasterizer, "rasterize_html")
    @patch("llm_xlsx_parser.services.analyzer.ChatOpenAI")
    def test_toggles_skip_image_and_csv(
        self,
        mock_chat: MagicMock,
        mock_rasterize: MagicMock,
        plain_workbook_path: Path,
        tmp_path: Path,
    ) -> None:
        mock_chat.return_value.invoke.return_value = _response()
        options = AnalysisOptions(send_image=False, send_csv=False)

        SpreadsheetAnalyzer(api_key="sk-test").analyze(
            plain_workbook_path, tmp_path / "a.txt", options
        )

        mock_rasterize.assert_not_called()
        (text_part,) = mock_chat.return_value.invoke.call_args[0][0][1].content
        assert RECORDS_HEADING in text_part["text"]
        assert CSV_HEADING not in text_part["text"]
        assert "in all its forms (structured records)" in text_part["text"]

    @patch.object(HtmlRasterizer, "rasterize_html", side_effect=_write_png)
    @patch("llm_xlsx_parser.services.analyzer.ChatOpenAI")
    def test_temp_image_removed_after_model_failure(
        self,
        mock_chat: MagicMock,
        _mock_rasterize: MagicMock,
        plain_workbook_path: Path,
        tmp_path: Path,
    ) -> None:
        mock_chat.return_value.invoke.side_effect = RuntimeError("model exploded")
        output = tmp_path / "analysis.txt"

        with pytest.raises(LLMError) as exc_info:
            SpreadsheetAnalyzer(api_key="sk-test").analyze(plain_workbook_path, output)

        assert "model exploded" in exc_info.value.message
        assert _temp_images(tmp_path) == []
        assert not output.exists()

    @patch.object(
        HtmlRasterizer,
        "rasterize_html",
        side_effect=RasterizationError("browser crashed"),
    )
    @patch("llm_xlsx_parser.services.analyzer.ChatOpenAI")
    def test_rasterization_failure_propagates(
        self,
        mock_chat: MagicMock,
        _mock_rasterize: MagicMock,
        plain_workbook_path: Path,
        tmp_path: Path,
    ) -> None:
        with pytest.raises(RasterizationError):
            SpreadsheetAnalyzer(api_key="sk-test").analyze(
                plain_workbook_path, tmp_path / "a.txt"
            )
        mock_chat.return_value.invoke.assert_not_called()

    @patch("llm_xlsx_parser.services.analyzer.ChatOpenAI")
    def test_rate_limit_mapped(
        self, mock_chat: MagicMock, plain_workbook_path: Path, tmp_path: Path
    ) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        mock_chat.return_value.invoke.side_effect = openai.RateLimitError(
            "slow down",
            response=httpx.Response(429, request=request),
            body=None,
        )

        with pytest.raises(LLMRateLimitError) as exc_info:
            SpreadsheetAnalyzer(api_key="sk-test", model="gpt-4o-mini").analyze(
                plain_workbook_path,
                tmp_path / "a.txt",
                AnalysisOptions(send_image=False),
            )
        assert exc_info.value.model == "gpt-4o-mini"

    @patch("llm_xlsx_parser.services.analyzer.ChatOpenAI")
    def test_connection_error_mapped(
        self, mock_chat: MagicMock, plain_workbook_path: Path, tmp_path: Path
    ) -> None:
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        mock_chat.return_value.invoke.side_effect = openai.APIConnectionError(
            request=request
        )

        with pytest.raises(LLMConnectionError) as exc_info:
            SpreadsheetAnalyzer(api_key="sk-test").analyze(
                plain_workbook_path,
                tmp_path / "a.txt",
                AnalysisOptions(send_image=False),
            )
        assert exc_info.value.details["transient"] is True


@pytest.mark.skipif(
    not os.environ.get("LXP_OPENAI_API_KEY"),
    reason="LXP_OPENAI_API_KEY not set",
)
def test_real_model_round_trip(plain_workbook_path: Path, tmp_path: Path) -> None:
    result = SpreadsheetAnalyzer().analyze(
        plain_workbook_path, tmp_path / "analysis.txt", AnalysisOptions(send_image=False)
    )
    assert "Ann" in result.analysis_text
