"""Dataclasses representing the two parses of a spreadsheet.

A workbook is read twice: a value pass that yields cell values plus the raw
fill/alignment descriptor, and a format-aware pass that yields fonts, borders
and computed results. Both are keyed by cell coordinate (``"B12"``) and are
joined only at lookup time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ColorRef:
    """A color given either as RGB hex (``"FF0000"``) or a theme index."""

    rgb: str | None = None
    theme: int | None = None


@dataclass(frozen=True)
class FillStyle:
    """Nested fill descriptor (used for gradient fills)."""

    bg_color: ColorRef | None = None
    fg_color: ColorRef | None = None


@dataclass(frozen=True)
class AlignmentStyle:
    horizontal: str | None = None
    vertical: str | None = None
    wrap_text: bool = False


@dataclass(frozen=True)
class RawStyle:
    """Style descriptor attached to a cell by the value pass."""

    pattern_type: str | None = None
    fg_color: ColorRef | None = None
    bg_color: ColorRef | None = None
    fill: FillStyle | None = None
    alignment: AlignmentStyle | None = None


@dataclass(frozen=True)
class FontStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    color: ColorRef | None = None
    size: float | None = None
    name: str | None = None


@dataclass(frozen=True)
class BorderSide:
    style: str | None = None
    color: ColorRef | None = None


@dataclass(frozen=True)
class BorderStyle:
    """Four independent border sides of a cell."""

    top: BorderSide | None = None
    right: BorderSide | None = None
    bottom: BorderSide | None = None
    left: BorderSide | None = None

    def sides(self) -> list[tuple[str, BorderSide | None]]:
        """Return sides in CSS shorthand order (top, right, bottom, left)."""
        return [
            ("top", self.top),
            ("right", self.right),
            ("bottom", self.bottom),
            ("left", self.left),
        ]


@dataclass(frozen=True)
class RichStyle:
    """Fully resolved style from the format-aware pass."""

    font: FontStyle | None = None
    border: BorderStyle | None = None


@dataclass
class ValueCell:
    """A cell from the value pass."""

    coordinate: str
    value: Any
    style: RawStyle | None = None


@dataclass
class RichCell:
    """A cell from the format-aware pass.

    ``result`` is the cached result for formula cells and the literal value
    otherwise.
    """

    coordinate: str
    style: RichStyle | None = None
    result: Any = None
    formula: str | None = None


@dataclass
class ValueSheet:
    """Value-pass view of one worksheet."""

    name: str
    rows: list[list[Any]]
    cells: dict[str, ValueCell] = field(default_factory=dict)

    def get(self, coordinate: str) -> ValueCell | None:
        return self.cells.get(coordinate.upper())

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


@dataclass
class RichSheet:
    """Format-aware view of one worksheet."""

    name: str
    cells: dict[str, RichCell] = field(default_factory=dict)

    def get(self, coordinate: str) -> RichCell | None:
        return self.cells.get(coordinate.upper())


@dataclass
class SpreadsheetDocument:
    """A parsed workbook restricted to its first sheet."""

    path: Path
    sheet_names: list[str]
    value_sheet: ValueSheet
    rich_sheet: RichSheet
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def sheet_name(self) -> str:
        return self.value_sheet.name


def cell_text(value: Any) -> str:
    """Render a cell value as the text a spreadsheet would show."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
