from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from llm_xlsx_parser.utils.logging import clear_context


@pytest.fixture(autouse=True)
def _reset_log_context() -> None:
    clear_context()


@pytest.fixture
def styled_workbook_path(tmp_path: Path) -> Path:
    """A small formatted workbook with a formula and a second sheet."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Statement"

    ws["A1"] = "Item"
    ws["B1"] = "Amount"
    ws["C1"] = "Date"
    for cell in (ws["A1"], ws["B1"], ws["C1"]):
        cell.font = Font(bold=True)
        cell.fill = PatternFill(fill_type="solid", fgColor="FFFFFF00")

    ws["A2"] = "Revenue"
    ws["B2"] = 1200
    ws["C2"] = datetime(2024, 1, 31)
    ws["A3"] = "Costs"
    ws["B3"] = -300.5
    ws["B3"].font = Font(color="FFFF0000", italic=True)
    ws["A4"] = "Net"
    ws["B4"] = "=SUM(B2:B3)"
    ws["B4"].border = Border(
        top=Side(style="thin"), bottom=Side(style="medium", color="FF00FF00")
    )
    ws["B4"].alignment = Alignment(horizontal="right", vertical="center")

    wb.create_sheet("Notes")["A1"] = "ignored"

    path = tmp_path / "statement.xlsx"
    wb.save(path)
    return path


@pytest.fixture
def plain_workbook_path(tmp_path: Path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "People"
    ws.append(["Name", "Age"])
    ws.append(["Ann", 30])
    ws.append(["Bob", 41])
    path = tmp_path / "people.xlsx"
    wb.save(path)
    return path
