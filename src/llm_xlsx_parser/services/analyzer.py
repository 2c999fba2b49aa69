"""Multimodal analysis of a spreadsheet.

The first sheet is sent to a vision-capable chat model in up to three forms at
once: a screenshot of the styled table, the row records and the raw CSV. The
model's answer is written to an output file.
"""

from __future__ import annotations

import base64
import io
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from uuid import uuid4

import openai
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from PIL import Image

from llm_xlsx_parser.config import settings
from llm_xlsx_parser.rendering.table_renderer import TableRenderOptions
from llm_xlsx_parser.services.record_formatter import format_as_records, rows_to_csv
from llm_xlsx_parser.services.spreadsheet_reader import SpreadsheetReader
from llm_xlsx_parser.services.xlsx_converter import ViewportOptions, XlsxConverter
from llm_xlsx_parser.spreadsheet_document import SpreadsheetDocument
from llm_xlsx_parser.utils.exceptions import (
    FileWriteError,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    MissingCredentialError,
)
from llm_xlsx_parser.utils.logging import LogContext, get_logger, timed_operation
from llm_xlsx_parser.utils.temp_files import new_temp_path, remove_temp_file

logger = get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are a serialization engineer. Your role is to take multiple forms of the same data (CSV, records, and a visual image) and analyze them to build the most complete understanding possible.

You excel at:
1. Reading information from top to bottom rather than side to side
2. Recognizing patterns in repeating record structures
3. Understanding column relationships even in large datasets
4. Combining visual, structured, and raw data insights

You output the data in the format that is easiest for language models to understand.

For example, given a table like:

| name  | age | favorite color |
| ----- | --- | -------------- |
| Steve | 56  | red            |
| Ava   | 1   | pink           |
| Donna | 50  | purple         |

present the information as:

```
name: Steve
age: 56
favorite color: red

name: Ava
age: 1
favorite color: pink

name: Donna
age: 50
favorite color: purple
```

You do not need to include insights or observations about the data. Your analysis only goes as far as it helps to understand the spatial relationship between data in rows and columns."""

RECORDS_HEADING = "**SPREADSHEET DATA (Record Format):**"
CSV_HEADING = "**CSV DATA:**"
REQUEST_HEADING = "**REQUEST:**"

REQUEST_POINTS = (
    "1. The structure and content of the data\n"
    "2. Any patterns or relationships you notice\n"
    "3. Data quality observations\n"
    "4. Key insights or summaries\n"
    "5. Any recommendations for data processing or analysis"
)

CONTENT_IMAGE = "visual image"
CONTENT_RECORDS = "structured records"
CONTENT_CSV = "raw CSV"


@dataclass
class AnalysisOptions:
    """What to send to the model and how to render the screenshot."""

    max_rows: int = 50
    max_cols: int = 40
    font_size: int = 8
    cell_padding: int = 2
    viewport_width: int = 1920
    viewport_height: int = 1080
    full_page: bool = True
    browser_timeout_ms: int = 30000
    send_image: bool = True
    send_records: bool = True
    send_csv: bool = True
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    @classmethod
    def from_settings(cls, **overrides: Any) -> AnalysisOptions:
        values: dict[str, Any] = {
            "max_rows": settings.max_rows,
            "max_cols": settings.max_cols,
            "font_size": settings.font_size,
            "cell_padding": settings.cell_padding,
            "viewport_width": settings.viewport_width,
            "viewport_height": settings.viewport_height,
            "full_page": settings.full_page,
            "browser_timeout_ms": settings.browser_timeout_ms,
            "send_image": settings.send_image,
            "send_records": settings.send_records,
            "send_csv": settings.send_csv,
        }
        values.update(overrides)
        return cls(**values)

    def render_options(self) -> TableRenderOptions:
        return TableRenderOptions(
            cell_padding=self.cell_padding,
            font_size=self.font_size,
            max_rows=self.max_rows,
            max_cols=self.max_cols,
        )

    def viewport(self) -> ViewportOptions:
        return ViewportOptions(
            width=self.viewport_width,
            height=self.viewport_height,
            full_page=self.full_page,
            timeout_ms=self.browser_timeout_ms,
        )

    def content_types(self) -> list[str]:
        types = []
        if self.send_image:
            types.append(CONTENT_IMAGE)
        if self.send_records:
            types.append(CONTENT_RECORDS)
        if self.send_csv:
            types.append(CONTENT_CSV)
        return types


@dataclass
class AnalysisResult:
    """Outcome of one analysis call."""

    analysis_text: str
    output_path: Path
    model: str
    content_types: list[str] = field(default_factory=list)
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    processing_time_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "output_path": str(self.output_path),
            "model": self.model,
            "content_types": list(self.content_types),
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
            "processing_time_seconds": round(self.processing_time_seconds, 3),
        }


def encode_image_file(image_path: Path) -> str:
    """Load a screenshot and return it as base64-encoded PNG."""
    with Image.open(image_path) as image:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def build_request_text(
    records: str | None, csv_text: str | None, content_types: list[str]
) -> str:
    """Assemble the text block sent alongside the screenshot."""
    sections: list[str] = []
    if records is not None:
        sections.append(f"{RECORDS_HEADING}\n{records}")
    if csv_text is not None:
        sections.append(f"{CSV_HEADING}\n{csv_text}")

    if content_types:
        scope = f"in all its forms ({', '.join(content_types)})"
    else:
        scope = "from the provided data"
    sections.append(
        f"\n\n{REQUEST_HEADING}\n"
        f"Please analyze this spreadsheet data {scope}. Provide insights about:\n"
        f"{REQUEST_POINTS}"
    )
    return "\n\n".join(sections)


class SpreadsheetAnalyzer:
    """Send a workbook to a vision chat model and save the answer."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        reader: SpreadsheetReader | None = None,
        converter: XlsxConverter | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model or settings.openai_model
        self.temperature = (
            settings.openai_temperature if temperature is None else temperature
        )
        self.max_tokens = max_tokens or settings.openai_max_tokens
        self.reader = reader or SpreadsheetReader()
        self.converter = converter or XlsxConverter(self.reader)
        self._llm: ChatOpenAI | None = None

    def _resolve_api_key(self) -> str:
        api_key = self.api_key or settings.get_openai_api_key()
        if not api_key:
            raise MissingCredentialError()
        return api_key

    @property
    def llm(self) -> ChatOpenAI:
        """Chat model client, created on first use."""
        if self._llm is None:
            self._llm = ChatOpenAI(
                api_key=self._resolve_api_key(),  # type: ignore[arg-type]
                model=self.model,
                temperature=self.temperature,
                max_completion_tokens=self.max_tokens,
            )
        return self._llm

    def analyze(
        self,
        xlsx_path: Path,
        output_path: Path,
        options: AnalysisOptions | None = None,
    ) -> AnalysisResult:
        """Analyze the first sheet of ``xlsx_path`` and write the result.

        Args:
            xlsx_path: Workbook to analyze.
            output_path: Where the model's answer is written.
            options: Content toggles and screenshot settings.

        Returns:
            AnalysisResult with the answer text and token usage.

        Raises:
            MissingCredentialError: If no API key is configured. Raised before
                the workbook is opened.
            SpreadsheetNotFoundError: If the workbook does not exist.
            RasterizationError: If the screenshot cannot be produced.
            LLMError: If the model call fails.
            FileWriteError: If the answer cannot be written.
        """
        self._resolve_api_key()
        opts = options or AnalysisOptions.from_settings()
        start_time = time.time()

        with (
            LogContext(conversion_id=uuid4().hex[:12], file=xlsx_path.name),
            timed_operation(logger, "analyze_spreadsheet") as metrics,
        ):
            document = self.reader.read(xlsx_path)
            metrics.rows_processed = len(document.value_sheet.rows)

            image_path: Path | None = None
            try:
                image_base64 = None
                if opts.send_image:
                    output_path.parent.mkdir(parents=True, exist_ok=True)
                    image_path = new_temp_path(output_path.parent, "temp", ".png")
                    self._create_image(document, image_path, opts)
                    image_base64 = encode_image_file(image_path)

                messages = self.build_messages(document, opts, image_base64)
                response = self._invoke(messages)
                metrics.api_calls += 1
            finally:
                remove_temp_file(image_path)

            analysis_text = (
                response.content
                if isinstance(response.content, str)
                else str(response.content)
            )
            self._write_output(output_path, analysis_text)

            usage_metadata = getattr(response, "usage_metadata", None) or {}
            prompt_tokens = usage_metadata.get("input_tokens", 0)
            completion_tokens = usage_metadata.get("output_tokens", 0)
            metrics.tokens_used = prompt_tokens + completion_tokens

        logger.info("Analysis saved", path=str(output_path))
        return AnalysisResult(
            analysis_text=analysis_text,
            output_path=output_path,
            model=self.model,
            content_types=opts.content_types(),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            processing_time_seconds=time.time() - start_time,
        )

    def build_messages(
        self,
        document: SpreadsheetDocument,
        options: AnalysisOptions,
        image_base64: str | None = None,
    ) -> list[BaseMessage]:
        """System instruction plus one human message: image first, then text."""
        rows = document.value_sheet.rows
        records = format_as_records(rows) if options.send_records else None
        csv_text = rows_to_csv(rows) if options.send_csv else None

        content: list[str | dict[str, Any]] = []
        if image_base64 is not None:
            content.append(
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:image/png;base64,{image_base64}"},
                }
            )
        content.append(
            {
                "type": "text",
                "text": build_request_text(
                    records, csv_text, options.content_types()
                ),
            }
        )
        return [
            SystemMessage(content=options.system_prompt),
            HumanMessage(content=content),
        ]

    def _create_image(
        self,
        document: SpreadsheetDocument,
        image_path: Path,
        options: AnalysisOptions,
    ) -> None:
        logger.info("Converting spreadsheet to image", path=str(image_path))
        html = self.converter.render_document(document, options.render_options())
        options.viewport().rasterizer().rasterize_html(html, image_path)

    def _invoke(self, messages: list[BaseMessage]) -> Any:
        call_start = time.time()
        try:
            response = self.llm.invoke(messages)
        except openai.RateLimitError as exc:
            self._log_failed_call(call_start, exc)
            raise LLMRateLimitError(
                model=self.model, details={"original_error": str(exc)}
            ) from exc
        except openai.APIConnectionError as exc:
            self._log_failed_call(call_start, exc)
            raise LLMConnectionError(
                model=self.model, details={"original_error": str(exc)}
            ) from exc
        except Exception as exc:
            self._log_failed_call(call_start, exc)
            raise LLMError(
                f"Model call failed: {exc}",
                model=self.model,
                details={"original_error": str(exc)},
            ) from exc

        usage_metadata = getattr(response, "usage_metadata", None) or {}
        logger.log_api_call(
            service="openai",
            operation="analyze",
            duration_seconds=time.time() - call_start,
            tokens_used=usage_metadata.get("total_tokens"),
        )
        return response

    def _log_failed_call(self, call_start: float, exc: Exception) -> None:
        logger.log_api_call(
            service="openai",
            operation="analyze",
            duration_seconds=time.time() - call_start,
            success=False,
            error_message=str(exc),
        )

    @staticmethod
    def _write_output(output_path: Path, analysis_text: str) -> None:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(analysis_text, encoding="utf-8")
        except OSError as exc:
            raise FileWriteError(
                str(output_path), details={"reason": str(exc)}
            ) from exc
