"""Overlay spreadsheet formatting onto a rendered HTML table.

The rendered document is parsed into a BeautifulSoup tree and every data cell
is patched through its own node, so two cells with identical markup can never
receive each other's styles.
"""

from __future__ import annotations

from collections import Counter

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from llm_xlsx_parser.rendering.cell_identity import coordinate_from_id
from llm_xlsx_parser.rendering.cell_style import resolve_cell_style
from llm_xlsx_parser.spreadsheet_document import RichSheet, ValueSheet
from llm_xlsx_parser.utils.exceptions import MarkupParseError
from llm_xlsx_parser.utils.logging import get_logger

logger = get_logger(__name__)

HTML_PARSER = "html.parser"


def merge_style_attribute(existing: str | None, css: str) -> str:
    """Append ``css`` to an inline style value without doubling separators."""
    if not existing or not existing.strip():
        return css
    existing = existing.rstrip()
    separator = " " if existing.endswith(";") else "; "
    return f"{existing}{separator}{css}"


def _parse_document(document: str) -> BeautifulSoup:
    try:
        soup = BeautifulSoup(document, HTML_PARSER)
    except ParserRejectedMarkup as exc:
        raise MarkupParseError(
            f"Rendered document could not be parsed: {exc}",
            details={"error_type": type(exc).__name__},
        ) from exc

    if soup.find("table") is None:
        raise MarkupParseError(
            "Rendered document does not contain a table",
            details={"document_length": len(document)},
        )
    return soup


def _style_cells(
    soup: BeautifulSoup, value_sheet: ValueSheet, rich_sheet: RichSheet | None
) -> tuple[int, Counter[str]]:
    """Patch each identified data cell.

    Returns the number of styled cells and how many of them used each property.
    """
    applied: Counter[str] = Counter()
    styled = 0
    for td in soup.find_all("td", id=True):
        if not isinstance(td, Tag):
            continue
        coordinate = coordinate_from_id(td.get("id"))
        if coordinate is None:
            continue

        value_cell = value_sheet.get(coordinate)
        if value_cell is None or value_cell.style is None:
            continue

        rich_cell = rich_sheet.get(coordinate) if rich_sheet is not None else None
        declaration = resolve_cell_style(value_cell.style, rich_cell)
        if not declaration:
            continue

        td["style"] = merge_style_attribute(td.get("style"), declaration.to_css())
        applied.update(set(declaration.properties()))
        styled += 1
    return styled, applied


def apply_cell_styles(
    document: str, value_sheet: ValueSheet, rich_sheet: RichSheet | None
) -> str:
    """Inject each data cell's resolved style into the rendered document.

    Args:
        document: HTML produced by the table renderer.
        value_sheet: Value-pass cells (values + raw fill/alignment).
        rich_sheet: Format-aware cells (fonts, borders, computed results).

    Returns:
        The document with per-cell inline styles merged in.

    Raises:
        MarkupParseError: If the document cannot be parsed into a table tree.
    """
    soup = _parse_document(document)
    styled, applied = _style_cells(soup, value_sheet, rich_sheet)
    summary = " ".join(f"{prop}:{count}" for prop, count in sorted(applied.items()))
    logger.info(
        "Applied styles to cells", cells_styled=styled, properties=summary or "none"
    )
    return str(soup)


def style_table_element(document: str, css: str) -> str:
    """Merge ``css`` into the style attribute of the document's first table."""
    soup = _parse_document(document)
    table = soup.find("table")
    if isinstance(table, Tag):
        table["style"] = merge_style_attribute(table.get("style"), css)
    return str(soup)
