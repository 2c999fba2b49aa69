"""Read the first worksheet of a workbook in two independent openpyxl passes."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from xml.etree import ElementTree as ET
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.cell import Cell
from openpyxl.styles import Alignment, Border, Font
from openpyxl.styles.colors import COLOR_INDEX, Color
from openpyxl.styles.fills import GradientFill, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook

from llm_xlsx_parser.spreadsheet_document import (
    AlignmentStyle,
    BorderSide,
    BorderStyle,
    ColorRef,
    FillStyle,
    FontStyle,
    RawStyle,
    RichCell,
    RichSheet,
    RichStyle,
    SpreadsheetDocument,
    ValueCell,
    ValueSheet,
)
from llm_xlsx_parser.utils.exceptions import (
    SpreadsheetNotFoundError,
    SpreadsheetReadError,
)
from llm_xlsx_parser.utils.logging import get_logger

logger = get_logger(__name__)

_LOAD_ERRORS = (InvalidFileException, BadZipFile, KeyError, OSError, ValueError)

_DRAWINGML_NS = "{http://schemas.openxmlformats.org/drawingml/2006/main}"

# Cell colors index the palette light-first (lt1, dk1, lt2, dk2); the theme
# part lists the same slots dark-first.
_THEME_SLOT_SWAPS = ((0, 1), (2, 3))

# openpyxl's placeholder for an unset pattern color.
_UNSET_PATTERN_RGB = "00000000"
_SYSTEM_COLOR_INDEXES = (64, 65)

ThemePalette = Sequence[str | None]


@dataclass
class SpreadsheetReadOptions:
    """Bounds applied to both parse passes (None means the whole sheet)."""

    max_rows: int | None = None
    max_columns: int | None = None


def normalize_rgb(argb: str) -> str:
    """Turn an openpyxl ARGB/RGB string into 6-digit uppercase hex."""
    value = argb.strip().lstrip("#").upper()
    if len(value) == 8:
        value = value[2:]
    return value


def parse_theme_palette(theme_xml: bytes | str | None) -> list[str | None]:
    """Extract the theme color slots in the order cell styles index them.

    Returns an empty palette when the workbook has no usable theme part.
    """
    if not theme_xml:
        return []
    try:
        root = ET.fromstring(theme_xml)
    except ET.ParseError as exc:
        logger.warning("Could not parse workbook theme", error=str(exc))
        return []

    scheme = root.find(f".//{_DRAWINGML_NS}clrScheme")
    if scheme is None:
        return []

    palette: list[str | None] = []
    for slot in scheme:
        srgb = slot.find(f"{_DRAWINGML_NS}srgbClr")
        system = slot.find(f"{_DRAWINGML_NS}sysClr")
        if srgb is not None and srgb.get("val"):
            palette.append(normalize_rgb(srgb.get("val", "")))
        elif system is not None and system.get("lastClr"):
            palette.append(normalize_rgb(system.get("lastClr", "")))
        else:
            palette.append(None)

    for first, second in _THEME_SLOT_SWAPS:
        if second < len(palette):
            palette[first], palette[second] = palette[second], palette[first]
    return palette


def apply_tint(rgb: str, tint: float) -> str:
    """Lighten (positive tint) or darken (negative tint) a 6-hex color."""
    if not tint:
        return rgb
    channels = [int(rgb[index : index + 2], 16) for index in (0, 2, 4)]
    if tint < 0:
        channels = [int(channel * (1.0 + tint)) for channel in channels]
    else:
        channels = [int(channel * (1.0 - tint) + 255 * tint) for channel in channels]
    return "".join(f"{min(255, max(0, channel)):02X}" for channel in channels)


def color_ref(color: Color | None, palette: ThemePalette = ()) -> ColorRef | None:
    """Convert an openpyxl color into a ColorRef, or None when unusable.

    Theme colors keep their slot index and, when ``palette`` covers the slot,
    also carry the tinted RGB value.
    """
    if color is None:
        return None
    if color.type == "rgb" and isinstance(color.rgb, str):
        return ColorRef(rgb=normalize_rgb(color.rgb))
    if color.type == "indexed" and isinstance(color.indexed, int):
        if 0 <= color.indexed < len(COLOR_INDEX):
            return ColorRef(rgb=normalize_rgb(COLOR_INDEX[color.indexed]))
        return None
    if color.type == "theme" and isinstance(color.theme, int):
        base = palette[color.theme] if 0 <= color.theme < len(palette) else None
        rgb = apply_tint(base, color.tint or 0.0) if base else None
        return ColorRef(rgb=rgb, theme=color.theme)
    return None


def _rgb_only(color: Color | None, palette: ThemePalette) -> ColorRef | None:
    ref = color_ref(color, palette)
    if ref is None or ref.rgb is None:
        return None
    return ref


def _is_unset_pattern_color(color: Color | None) -> bool:
    if color is None:
        return True
    if color.type == "rgb":
        return color.rgb == _UNSET_PATTERN_RGB
    if color.type == "indexed":
        return color.indexed in _SYSTEM_COLOR_INDEXES
    return False


def _pattern_color(color: Color | None, palette: ThemePalette) -> ColorRef | None:
    if _is_unset_pattern_color(color):
        return None
    return _rgb_only(color, palette)


def raw_style_from_cell(cell: Any, palette: ThemePalette = ()) -> RawStyle:
    """Build the value-pass style descriptor (fill + alignment).

    A solid fill is painted entirely in its foreground color, so its pattern
    background is never reported.
    """
    pattern_type = None
    fg_color = None
    bg_color = None
    nested = None

    fill = cell.fill
    if isinstance(fill, PatternFill) and fill.fill_type:
        pattern_type = fill.fill_type
        fg_color = _pattern_color(fill.fgColor, palette)
        if fill.fill_type != "solid":
            bg_color = _pattern_color(fill.bgColor, palette)
    elif isinstance(fill, GradientFill) and fill.stop:
        pattern_type = fill.type
        nested = FillStyle(
            bg_color=_rgb_only(fill.stop[0].color, palette),
            fg_color=_rgb_only(fill.stop[-1].color, palette),
        )

    return RawStyle(
        pattern_type=pattern_type,
        fg_color=fg_color,
        bg_color=bg_color,
        fill=nested,
        alignment=_alignment_style(cell.alignment),
    )


def _alignment_style(alignment: Alignment | None) -> AlignmentStyle | None:
    if alignment is None:
        return None
    if not (alignment.horizontal or alignment.vertical or alignment.wrap_text):
        return None
    return AlignmentStyle(
        horizontal=alignment.horizontal,
        vertical=alignment.vertical,
        wrap_text=bool(alignment.wrap_text),
    )


def _font_style(font: Font | None, palette: ThemePalette) -> FontStyle | None:
    if font is None:
        return None
    return FontStyle(
        bold=bool(font.b),
        italic=bool(font.i),
        underline=bool(font.u) and font.u != "none",
        strike=bool(font.strike),
        color=color_ref(font.color, palette),
        size=float(font.sz) if font.sz else None,
        name=font.name,
    )


def _border_style(border: Border | None, palette: ThemePalette) -> BorderStyle | None:
    if border is None:
        return None

    def side(raw_side: Any) -> BorderSide | None:
        if raw_side is None or not raw_side.style:
            return None
        return BorderSide(
            style=raw_side.style, color=_rgb_only(raw_side.color, palette)
        )

    sides = BorderStyle(
        top=side(border.top),
        right=side(border.right),
        bottom=side(border.bottom),
        left=side(border.left),
    )
    if not any(value for _, value in sides.sides()):
        return None
    return sides


def rich_style_from_cell(cell: Cell, palette: ThemePalette = ()) -> RichStyle:
    """Build the format-aware style (font + borders)."""
    return RichStyle(
        font=_font_style(cell.font, palette),
        border=_border_style(cell.border, palette),
    )


def _trim_trailing_empty_rows(rows: list[list[Any]]) -> list[list[Any]]:
    end = len(rows)
    while end and all(value is None for value in rows[end - 1]):
        end -= 1
    return rows[:end]


class SpreadsheetReader:
    """Parse workbooks into a SpreadsheetDocument (first sheet only)."""

    def read(
        self, file_path: Path, options: SpreadsheetReadOptions | None = None
    ) -> SpreadsheetDocument:
        """Run both parse passes over the first worksheet.

        Raises:
            SpreadsheetNotFoundError: If ``file_path`` does not exist.
            SpreadsheetReadError: If the workbook cannot be parsed.
        """
        opts = options or SpreadsheetReadOptions()
        self._require_file(file_path)

        sheet_names = self.get_sheet_names(file_path)
        value_sheet = self.read_value_sheet(file_path, opts)
        rich_sheet = self.read_rich_sheet(file_path, opts)

        metadata = {
            "sheet_names": sheet_names,
            "row_count": len(value_sheet.rows),
            "column_count": value_sheet.column_count,
            "styled_cells": sum(
                1 for cell in value_sheet.cells.values() if cell.style is not None
            ),
            "has_formulas": any(
                cell.formula is not None for cell in rich_sheet.cells.values()
            ),
        }
        logger.info(
            "Read spreadsheet",
            file=file_path.name,
            sheet=value_sheet.name,
            rows=metadata["row_count"],
            columns=metadata["column_count"],
        )
        return SpreadsheetDocument(
            path=file_path,
            sheet_names=sheet_names,
            value_sheet=value_sheet,
            rich_sheet=rich_sheet,
            metadata=metadata,
        )

    def get_sheet_names(self, file_path: Path) -> list[str]:
        """List the workbook's sheet names in storage order."""
        self._require_file(file_path)
        with self._open(file_path, read_only=True) as wb:
            return list(wb.sheetnames)

    def read_value_sheet(
        self, file_path: Path, options: SpreadsheetReadOptions | None = None
    ) -> ValueSheet:
        """Value pass: cached values plus raw fill/alignment per styled cell."""
        opts = options or SpreadsheetReadOptions()
        self._require_file(file_path)

        with self._open(file_path, read_only=True, data_only=True) as wb:
            ws = wb.worksheets[0]
            palette = parse_theme_palette(wb.loaded_theme)
            rows: list[list[Any]] = []
            cells: dict[str, ValueCell] = {}
            for row_index, row in enumerate(
                ws.iter_rows(max_row=opts.max_rows, max_col=opts.max_columns),
                start=1,
            ):
                values: list[Any] = []
                for col_index, cell in enumerate(row, start=1):
                    coordinate = f"{get_column_letter(col_index)}{row_index}"
                    style = (
                        raw_style_from_cell(cell, palette)
                        if getattr(cell, "has_style", False)
                        else None
                    )
                    if cell.value is not None or style is not None:
                        cells[coordinate] = ValueCell(
                            coordinate=coordinate, value=cell.value, style=style
                        )
                    values.append(cell.value)
                rows.append(values)
            return ValueSheet(
                name=ws.title, rows=_trim_trailing_empty_rows(rows), cells=cells
            )

    def read_rich_sheet(
        self, file_path: Path, options: SpreadsheetReadOptions | None = None
    ) -> RichSheet:
        """Format-aware pass: fonts, borders, formulas and computed results."""
        opts = options or SpreadsheetReadOptions()
        self._require_file(file_path)

        # Load twice: once for formulas and styles, once for computed values
        with (
            self._open(file_path, data_only=False) as workbook,
            self._open(file_path, data_only=True) as computed_wb,
        ):
            sheet = workbook.worksheets[0]
            computed_sheet = computed_wb.worksheets[0]
            palette = parse_theme_palette(workbook.loaded_theme)
            row_iter = sheet.iter_rows(max_row=opts.max_rows, max_col=opts.max_columns)
            computed_iter = computed_sheet.iter_rows(
                max_row=opts.max_rows, max_col=opts.max_columns, values_only=True
            )

            cells: dict[str, RichCell] = {}
            for row_cells, computed_values in zip(row_iter, computed_iter, strict=True):
                for cell, computed_value in zip(row_cells, computed_values, strict=True):
                    if cell.value is None and not cell.has_style:
                        continue
                    cells[cell.coordinate] = self._build_rich_cell(
                        cell, computed_value, palette
                    )
            return RichSheet(name=sheet.title, cells=cells)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_rich_cell(
        cell: Cell, computed_value: Any, palette: ThemePalette
    ) -> RichCell:
        formula = None
        result = cell.value
        if cell.data_type == "f":
            formula = str(cell.value) if cell.value is not None else None
            result = computed_value
        return RichCell(
            coordinate=cell.coordinate,
            style=rich_style_from_cell(cell, palette),
            result=result,
            formula=formula,
        )

    @staticmethod
    def _require_file(file_path: Path) -> None:
        if not file_path.exists():
            raise SpreadsheetNotFoundError(str(file_path))

    @staticmethod
    @contextmanager
    def _open(
        file_path: Path, *, read_only: bool = False, data_only: bool = False
    ) -> Iterator[Workbook]:
        try:
            wb = load_workbook(
                filename=file_path, read_only=read_only, data_only=data_only
            )
        except _LOAD_ERRORS as exc:
            raise SpreadsheetReadError(
                str(file_path),
                details={"error_type": type(exc).__name__, "reason": str(exc)},
            ) from exc
        if not wb.worksheets:
            wb.close()
            raise SpreadsheetReadError(
                str(file_path), message=f"Workbook has no worksheets: {file_path}"
            )
        try:
            yield wb
        finally:
            wb.close()
