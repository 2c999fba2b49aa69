"""Command-line interface for llm-xlsx-parser."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from uuid import uuid4

import typer

from llm_xlsx_parser.config import settings, validate_settings_on_startup
from llm_xlsx_parser.rendering.table_renderer import TableRenderOptions
from llm_xlsx_parser.services.analyzer import AnalysisOptions, SpreadsheetAnalyzer
from llm_xlsx_parser.services.value_validator import LOS_CHECKS, validate_analysis
from llm_xlsx_parser.services.xlsx_converter import ViewportOptions, XlsxConverter
from llm_xlsx_parser.utils.exceptions import LXPError, RasterizationError
from llm_xlsx_parser.utils.logging import configure_logging, set_request_id

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Convert spreadsheets to HTML, images and LLM-ready analyses.",
)


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except LXPError as exc:
        typer.echo(f"error: {exc}", err=True)
        if isinstance(exc, RasterizationError) and exc.hint:
            typer.echo(f"hint: {exc.hint}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log at DEBUG level."
    ),
) -> None:
    configure_logging(
        logging.DEBUG if verbose or settings.debug else settings.log_level_int
    )
    set_request_id(f"cli-{uuid4().hex[:8]}")


@app.command(name="html", help="Render the first sheet as a plain HTML table.")
def html_command(
    xlsx_path: Path = typer.Argument(..., help="Workbook to convert."),
    output: Path = typer.Option(Path("output.html"), "--output", "-o"),
    max_rows: int = typer.Option(100, "--max-rows", help="Rows to render."),
    max_cols: int = typer.Option(20, "--max-cols", help="Columns to render."),
    font_size: int = typer.Option(12, "--font-size"),
    cell_padding: int = typer.Option(8, "--cell-padding"),
) -> None:
    with _handle_errors():
        options = TableRenderOptions(
            cell_padding=cell_padding,
            font_size=font_size,
            max_rows=max_rows,
            max_cols=max_cols,
        )
        path = XlsxConverter().convert_to_html(xlsx_path, output, options)
    typer.echo(f"HTML written to {path}")


@app.command(name="styled-html", help="Render the first sheet with cell formatting.")
def styled_html_command(
    xlsx_path: Path = typer.Argument(..., help="Workbook to convert."),
    output: Path = typer.Option(Path("styled.html"), "--output", "-o"),
    max_rows: int = typer.Option(100, "--max-rows"),
    max_cols: int = typer.Option(20, "--max-cols"),
) -> None:
    with _handle_errors():
        options = TableRenderOptions(max_rows=max_rows, max_cols=max_cols)
        XlsxConverter().convert_to_styled_html(xlsx_path, output, options)
    typer.echo(f"Styled HTML written to {output}")


@app.command(name="image", help="Screenshot the styled table as a PNG.")
def image_command(
    xlsx_path: Path = typer.Argument(..., help="Workbook to convert."),
    output: Path = typer.Option(Path("output.png"), "--output", "-o"),
    max_rows: int = typer.Option(100, "--max-rows"),
    max_cols: int = typer.Option(20, "--max-cols"),
    font_size: int = typer.Option(12, "--font-size"),
    cell_padding: int = typer.Option(8, "--cell-padding"),
    viewport_width: int = typer.Option(
        settings.viewport_width, "--viewport-width", help="Browser viewport width."
    ),
    viewport_height: int = typer.Option(
        settings.viewport_height, "--viewport-height", help="Browser viewport height."
    ),
    full_page: bool = typer.Option(
        settings.full_page,
        "--full-page/--viewport-only",
        help="Capture the whole page or only the viewport.",
    ),
) -> None:
    with _handle_errors():
        options = TableRenderOptions(
            cell_padding=cell_padding,
            font_size=font_size,
            max_rows=max_rows,
            max_cols=max_cols,
        )
        viewport = ViewportOptions(
            width=viewport_width,
            height=viewport_height,
            full_page=full_page,
            timeout_ms=settings.browser_timeout_ms,
        )
        path = XlsxConverter().create_image(xlsx_path, output, options, viewport)
    typer.echo(f"Image written to {path}")


@app.command(name="analyze", help="Send the spreadsheet to the model for analysis.")
def analyze_command(
    xlsx_path: Path = typer.Argument(..., help="Workbook to analyze."),
    output: Path = typer.Option(Path("analysis.txt"), "--output", "-o"),
    model: str | None = typer.Option(None, "--model", help="Chat model name."),
    send_image: bool = typer.Option(
        settings.send_image, "--image/--no-image", help="Include the screenshot."
    ),
    send_csv: bool = typer.Option(
        settings.send_csv, "--csv/--no-csv", help="Include the raw CSV."
    ),
    send_records: bool = typer.Option(
        settings.send_records, "--records/--no-records", help="Include records."
    ),
    max_rows: int = typer.Option(settings.max_rows, "--max-rows"),
    max_cols: int = typer.Option(settings.max_cols, "--max-cols"),
) -> None:
    validate_settings_on_startup(settings)
    with _handle_errors():
        options = AnalysisOptions.from_settings(
            send_image=send_image,
            send_csv=send_csv,
            send_records=send_records,
            max_rows=max_rows,
            max_cols=max_cols,
        )
        result = SpreadsheetAnalyzer(model=model).analyze(xlsx_path, output, options)
    typer.echo(
        f"Analysis written to {result.output_path} "
        f"(model={result.model}, tokens={result.total_tokens})"
    )


@app.command(name="validate", help="Check an analysis against the LOS ground truth.")
def validate_command(
    analysis_path: Path = typer.Argument(..., help="Analysis text file."),
) -> None:
    try:
        text = analysis_path.read_text(encoding="utf-8")
    except OSError as exc:
        typer.echo(f"error: cannot read {analysis_path}: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    report = validate_analysis(text, LOS_CHECKS)
    for series in report.series:
        status = "PASS" if series.passed else "FAIL"
        typer.echo(
            f"{status} {series.name}: "
            f"{series.actual_count}/{series.expected_count} values"
        )
        for comparison in series.comparisons:
            mark = "ok" if comparison.passed else "mismatch"
            typer.echo(
                f"  period {comparison.index + 1}: expected {comparison.expected:g}, "
                f"got {comparison.actual:g} ({mark})"
            )

    if not report.passed:
        typer.echo(
            f"Validation failed: {', '.join(report.failed_series())}", err=True
        )
        raise typer.Exit(code=1)
    typer.echo("All validations passed")
