"""HTML rendering of spreadsheet windows.

This package provides:
- Cell style resolution into inline CSS (cell_style.py)
- Cell id <-> coordinate mapping (cell_identity.py)
- The plain table renderer (table_renderer.py)
- The style overlay on rendered tables (styled_table.py)
- Headless-browser screenshots (rasterizer.py)
"""

from llm_xlsx_parser.rendering.cell_identity import cell_id, coordinate_from_id
from llm_xlsx_parser.rendering.cell_style import StyleDeclaration, resolve_cell_style
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

__all__ = [
    "HtmlRasterizer",
    "StyleDeclaration",
    "TableRenderOptions",
    "apply_cell_styles",
    "cell_id",
    "coordinate_from_id",
    "render_table_html",
    "resolve_cell_style",
    "style_table_element",
    "truncate_window",
]
