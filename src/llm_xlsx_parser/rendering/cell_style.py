"""Resolve spreadsheet cell formatting into inline CSS declarations.

Fill and alignment come from the value pass (``RawStyle``); font and borders
come from the format-aware pass (``RichCell``). Each rule group is an
independent evaluator that contributes zero or more declarations, applied in
a fixed order: fill, font, borders, alignment.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from numbers import Real

from llm_xlsx_parser.spreadsheet_document import ColorRef, RawStyle, RichCell

BORDER_WIDTHS: dict[str, str] = {"thin": "1px", "medium": "2px", "thick": "3px"}
DEFAULT_BORDER_WIDTH = "1px"
DEFAULT_BORDER_COLOR = "#000000"

VERTICAL_ALIGN_MAP: dict[str, str] = {
    "top": "top",
    "center": "middle",
    "bottom": "bottom",
}

# Theme slot 1 is the workbook's default text color ("automatic").
AUTOMATIC_TEXT_THEME = 1
NEGATIVE_NUMBER_COLOR = "#ff0000"

Declaration = tuple[str, str]


class StyleDeclaration:
    """Ordered ``property: value`` pairs describing one cell's appearance."""

    def __init__(self, entries: Iterable[Declaration] = ()) -> None:
        self._entries: list[Declaration] = list(entries)

    def extend(self, entries: Iterable[Declaration]) -> None:
        self._entries.extend(entries)

    @property
    def entries(self) -> list[Declaration]:
        return list(self._entries)

    def properties(self) -> list[str]:
        return [prop for prop, _ in self._entries]

    def to_css(self) -> str:
        return "; ".join(f"{prop}: {value}" for prop, value in self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"StyleDeclaration({self.to_css()!r})"


StyleRule = Callable[[RawStyle, RichCell | None], list[Declaration]]


def _hex(color: ColorRef | None) -> str | None:
    if color is None or not color.rgb:
        return None
    return f"#{color.rgb}"


def _format_number(value: float) -> str:
    return f"{value:g}"


def _is_negative_number(value: object) -> bool:
    return (
        isinstance(value, Real) and not isinstance(value, bool) and value < 0
    )


def fill_rule(raw_style: RawStyle, rich_cell: RichCell | None) -> list[Declaration]:
    """Emit at most one background color, first match wins."""
    nested = raw_style.fill
    candidates = [raw_style.fg_color, raw_style.bg_color]
    if nested is not None:
        candidates.extend([nested.bg_color, nested.fg_color])

    for color in candidates:
        css_color = _hex(color)
        if css_color:
            return [("background-color", css_color)]
    return []


def font_rule(raw_style: RawStyle, rich_cell: RichCell | None) -> list[Declaration]:
    if rich_cell is None or rich_cell.style is None or rich_cell.style.font is None:
        return []

    font = rich_cell.style.font
    declarations: list[Declaration] = []
    if font.bold:
        declarations.append(("font-weight", "bold"))
    if font.italic:
        declarations.append(("font-style", "italic"))

    decorations = []
    if font.underline:
        decorations.append("underline")
    if font.strike:
        decorations.append("line-through")
    if decorations:
        declarations.append(("text-decoration", " ".join(decorations)))

    if font.color is not None and font.color.theme == AUTOMATIC_TEXT_THEME:
        # Automatic text keeps the page color; negatives are shown in red.
        if _is_negative_number(rich_cell.result):
            declarations.append(("color", NEGATIVE_NUMBER_COLOR))
    else:
        explicit_color = _hex(font.color)
        if explicit_color:
            declarations.append(("color", explicit_color))

    if font.size:
        declarations.append(("font-size", f"{_format_number(font.size)}px"))
    if font.name:
        declarations.append(("font-family", font.name))
    return declarations


def border_rule(raw_style: RawStyle, rich_cell: RichCell | None) -> list[Declaration]:
    if rich_cell is None or rich_cell.style is None or rich_cell.style.border is None:
        return []

    declarations: list[Declaration] = []
    for side_name, side in rich_cell.style.border.sides():
        if side is None or not side.style:
            continue
        width = BORDER_WIDTHS.get(side.style, DEFAULT_BORDER_WIDTH)
        color = _hex(side.color) or DEFAULT_BORDER_COLOR
        declarations.append((f"border-{side_name}", f"{width} solid {color}"))
    return declarations


def alignment_rule(
    raw_style: RawStyle, rich_cell: RichCell | None
) -> list[Declaration]:
    alignment = raw_style.alignment
    if alignment is None:
        return []

    declarations: list[Declaration] = []
    if alignment.horizontal:
        declarations.append(("text-align", alignment.horizontal))
    if alignment.vertical:
        declarations.append(
            (
                "vertical-align",
                VERTICAL_ALIGN_MAP.get(alignment.vertical, alignment.vertical),
            )
        )
    if alignment.wrap_text:
        declarations.append(("white-space", "normal"))
    return declarations


STYLE_RULES: tuple[StyleRule, ...] = (
    fill_rule,
    font_rule,
    border_rule,
    alignment_rule,
)


def resolve_cell_style(
    raw_style: RawStyle | None, rich_cell: RichCell | None
) -> StyleDeclaration:
    """Combine both parses of one cell into a single style declaration.

    Args:
        raw_style: Style descriptor from the value pass, if the cell has one.
        rich_cell: The same coordinate from the format-aware pass, if present.

    Returns:
        The ordered declaration; empty when ``raw_style`` is missing or no
        rule produced anything.
    """
    declaration = StyleDeclaration()
    if raw_style is None:
        return declaration

    for rule in STYLE_RULES:
        declaration.extend(rule(raw_style, rich_cell))
    return declaration
