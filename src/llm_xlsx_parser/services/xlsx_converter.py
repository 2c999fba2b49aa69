"""Convert workbooks into HTML tables and screenshots."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from llm_xlsx_parser.config import settings
from llm_xlsx_parser.rendering.rasterizer import HtmlRasterizer
from llm_xlsx_parser.rendering.styled_table import (
    apply_cell_styles,
    style_table_element,
)
from llm_xlsx_parser.rendering.table_renderer import (
    TableRenderOptions,
    render_table_html,
    truncate_window,
)
from llm_xlsx_parser.services.spreadsheet_reader import (
    SpreadsheetReader,
    SpreadsheetReadOptions,
)
from llm_xlsx_parser.spreadsheet_document import SpreadsheetDocument
from llm_xlsx_parser.utils.exceptions import FileWriteError
from llm_xlsx_parser.utils.logging import get_logger, timed_operation

logger = get_logger(__name__)

# Spreadsheet-like defaults for the table element of styled output.
STYLED_TABLE_CSS = (
    "border-collapse: collapse; border-spacing: 0px; "
    "font-family: Calibri; font-size: 11px"
)


@dataclass
class ViewportOptions:
    """Browser viewport used when screenshotting a table."""

    width: int = 1920
    height: int = 1080
    full_page: bool = True
    timeout_ms: int = 30000

    @classmethod
    def from_settings(cls) -> ViewportOptions:
        return cls(
            width=settings.viewport_width,
            height=settings.viewport_height,
            full_page=settings.full_page,
            timeout_ms=settings.browser_timeout_ms,
        )

    def rasterizer(self) -> HtmlRasterizer:
        return HtmlRasterizer(
            viewport_width=self.width,
            viewport_height=self.height,
            full_page=self.full_page,
            timeout_ms=self.timeout_ms,
        )


def _write_text(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FileWriteError(str(path), details={"reason": str(exc)}) from exc


class XlsxConverter:
    """Render the first sheet of a workbook as HTML or PNG."""

    def __init__(self, reader: SpreadsheetReader | None = None) -> None:
        self.reader = reader or SpreadsheetReader()

    def convert_to_html(
        self,
        xlsx_path: Path,
        output_path: Path,
        options: TableRenderOptions | None = None,
    ) -> Path:
        """Write the plain (unstyled) table for a bounded window of the sheet."""
        opts = options or TableRenderOptions()
        document = self._read_window(xlsx_path, opts)
        rows = truncate_window(document.value_sheet.rows, opts.max_rows, opts.max_cols)
        html = render_table_html(rows, self._titled(opts, document))
        _write_text(output_path, html)
        logger.info(
            "HTML file created",
            path=str(output_path),
            rows=len(rows),
            columns=max((len(row) for row in rows), default=0),
        )
        return output_path

    def convert_to_styled_html(
        self,
        xlsx_path: Path,
        output_path: Path | None = None,
        options: TableRenderOptions | None = None,
    ) -> str:
        """Render the table with cell formatting applied.

        Returns the styled document and also writes it when ``output_path``
        is given.
        """
        opts = options or TableRenderOptions()
        document = self._read_window(xlsx_path, opts)
        html = self.render_document(document, opts)
        if output_path is not None:
            _write_text(output_path, html)
            logger.info("Styled HTML file created", path=str(output_path))
        return html

    def render_document(
        self,
        document: SpreadsheetDocument,
        options: TableRenderOptions | None = None,
    ) -> str:
        """Render an already-read document as styled HTML."""
        opts = options or TableRenderOptions()
        with timed_operation(logger, "render_styled_table") as metrics:
            rows = truncate_window(
                document.value_sheet.rows, opts.max_rows, opts.max_cols
            )
            metrics.rows_processed = len(rows)
            html = render_table_html(rows, self._titled(opts, document))
            if not rows:
                return html
            html = apply_cell_styles(html, document.value_sheet, document.rich_sheet)
            return style_table_element(html, STYLED_TABLE_CSS)

    def create_image(
        self,
        xlsx_path: Path,
        image_path: Path,
        options: TableRenderOptions | None = None,
        viewport: ViewportOptions | None = None,
    ) -> Path:
        """Screenshot the styled table into ``image_path``."""
        html = self.convert_to_styled_html(xlsx_path, None, options)
        rasterizer = (viewport or ViewportOptions()).rasterizer()
        return rasterizer.rasterize_html(html, image_path)

    def _read_window(
        self, xlsx_path: Path, options: TableRenderOptions
    ) -> SpreadsheetDocument:
        return self.reader.read(
            xlsx_path,
            SpreadsheetReadOptions(
                max_rows=options.max_rows, max_columns=options.max_cols
            ),
        )

    @staticmethod
    def _titled(
        options: TableRenderOptions, document: SpreadsheetDocument
    ) -> TableRenderOptions:
        return replace(options, title=f"Sheet: {document.sheet_name}")
