"""Render a bounded window of spreadsheet rows as a standalone HTML document.

The output has no external resources so a headless browser can rasterize it
offline. Every data cell carries an id encoding its sheet coordinate so the
style overlay can find it later.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from html import escape
from typing import Any

from openpyxl.utils import get_column_letter

from llm_xlsx_parser.rendering.cell_identity import cell_id
from llm_xlsx_parser.spreadsheet_document import cell_text
from llm_xlsx_parser.utils.exceptions import InvalidOptionsError

DISPLAY_TRUNCATE_LENGTH = 50
ELLIPSIS = "..."

NO_DATA_MESSAGE = "No data found in the spreadsheet"


@dataclass
class TableRenderOptions:
    """Visual options for the rendered table."""

    cell_padding: int = 8
    font_size: int = 12
    header_color: str = "#f0f0f0"
    border_color: str = "#cccccc"
    text_color: str = "#333333"
    max_rows: int = 100
    max_cols: int = 20
    title: str = "Excel Data"

    def __post_init__(self) -> None:
        for name in ("font_size", "max_rows", "max_cols"):
            value = getattr(self, name)
            if value < 1:
                raise InvalidOptionsError(
                    f"{name} must be at least 1, got {value}",
                    option=name,
                    value=value,
                )
        if self.cell_padding < 0:
            raise InvalidOptionsError(
                f"cell_padding must not be negative, got {self.cell_padding}",
                option="cell_padding",
                value=self.cell_padding,
            )


def column_letters(count: int, first_column: int = 1) -> list[str]:
    """Spreadsheet column letters (A..Z, AA, AB, ...) for ``count`` columns."""
    return [get_column_letter(first_column + offset) for offset in range(count)]


def truncate_window(
    rows: Sequence[Sequence[Any]], max_rows: int, max_cols: int
) -> list[list[Any]]:
    """Keep the first ``max_rows`` rows and first ``max_cols`` columns."""
    return [list(row[:max_cols]) for row in rows[:max_rows]]


def _display_value(text: str) -> str:
    if len(text) > DISPLAY_TRUNCATE_LENGTH:
        return text[:DISPLAY_TRUNCATE_LENGTH] + ELLIPSIS
    return text


def _stylesheet(options: TableRenderOptions) -> str:
    return f"""<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
  font-size: {options.font_size}px;
  line-height: 1.4;
  color: {options.text_color};
  background: white;
  padding: 20px;
}}
.container {{ max-width: 100%; overflow-x: auto; background: white; padding: 20px; }}
table {{ width: 100%; border-collapse: collapse; margin: 0 auto; background: white; }}
th, td {{
  border: 1px solid {options.border_color};
  padding: {options.cell_padding}px;
  text-align: left;
  vertical-align: top;
  word-wrap: break-word;
  max-width: 200px;
  min-width: 60px;
}}
th {{
  background-color: {options.header_color};
  font-weight: bold;
  text-align: center;
  border-bottom: 2px solid {options.border_color};
}}
tr:nth-child(even) {{ background-color: #f9f9f9; }}
.cell-content {{ overflow: hidden; text-overflow: ellipsis; display: block; max-width: 180px; }}
.row-number {{
  background-color: #e9ecef;
  font-weight: bold;
  text-align: center;
  width: 50px;
  min-width: 50px;
  color: #6c757d;
}}
.footer {{
  margin-top: 20px;
  text-align: center;
  color: #6c757d;
  font-size: {max(options.font_size - 2, 1)}px;
  border-top: 1px solid #e0e0e0;
  padding-top: 15px;
}}
.no-data {{ text-align: center; color: #666; font-size: 18px; padding: 50px; }}
</style>"""


def _document(title: str, style: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html>\n<head>\n"
        '<meta charset="UTF-8">\n'
        f"<title>{escape(title)}</title>\n"
        f"{style}\n"
        "</head>\n<body>\n"
        f"{body}\n"
        "</body>\n</html>\n"
    )


def render_empty_document(options: TableRenderOptions | None = None) -> str:
    """Placeholder document used when the window holds no rows."""
    opts = options or TableRenderOptions()
    body = f'<div class="no-data">{NO_DATA_MESSAGE}</div>'
    return _document(opts.title, _stylesheet(opts), body)


def render_table_html(
    rows: Sequence[Sequence[Any]],
    options: TableRenderOptions | None = None,
    *,
    first_row: int = 1,
    first_column: int = 1,
) -> str:
    """Render ``rows`` as a self-contained HTML table document.

    Args:
        rows: Row-major cell values, already truncated by the caller.
        options: Visual options; defaults are used when omitted.
        first_row: Sheet row number of ``rows[0]``.
        first_column: Sheet column index (1-based) of each row's first value.

    Returns:
        The complete HTML document as a string.
    """
    opts = options or TableRenderOptions()
    if not rows:
        return render_empty_document(opts)

    width = max(len(row) for row in rows)
    letters = column_letters(width, first_column)

    parts: list[str] = ['<div class="container">', "<table>"]
    parts.append('<thead><tr><th class="row-number">#</th>')
    parts.extend(f"<th>{letter}</th>" for letter in letters)
    parts.append("</tr></thead>")

    parts.append("<tbody>")
    for row_offset, row in enumerate(rows):
        row_number = first_row + row_offset
        parts.append(f'<tr><td class="row-number">{row_number}</td>')
        for col_offset, letter in enumerate(letters):
            text = cell_text(row[col_offset]) if col_offset < len(row) else ""
            full_value = escape(text, quote=True)
            display_value = escape(_display_value(text), quote=True)
            parts.append(
                f'<td id="{cell_id(f"{letter}{row_number}")}">'
                f'<div class="cell-content" title="{full_value}">{display_value}</div>'
                "</td>"
            )
        parts.append("</tr>")
    parts.append("</tbody>")
    parts.append("</table>")
    parts.append(
        '<div class="footer">'
        f"<p>Generated from Excel file &bull; {len(rows)} rows &times; "
        f"{width} columns</p>"
        "</div>"
    )
    parts.append("</div>")

    return _document(opts.title, _stylesheet(opts), "\n".join(parts))
