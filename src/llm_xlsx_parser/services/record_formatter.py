"""Text serializations of sheet rows: CSV and the "record" format.

The record format lists each data row as ``header: value`` lines, one per
column, with a blank line between records::

    Name: Ann
    Age: 30

    Name: Bob
    Age: 41
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from typing import Any

from llm_xlsx_parser.spreadsheet_document import cell_text


def rows_to_csv(rows: Sequence[Sequence[Any]]) -> str:
    """Serialize rows as comma-delimited text with ``\\n`` line endings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for row in rows:
        writer.writerow([cell_text(value) for value in row])
    return buffer.getvalue()


def format_as_records(rows: Sequence[Sequence[Any]]) -> str:
    """Serialize rows as records keyed by the first row's headers.

    Missing values render as empty text; an empty input yields ``""``.
    """
    if not rows:
        return ""

    headers = [cell_text(value) for value in rows[0]]
    records: list[str] = []
    for row in rows[1:]:
        lines = []
        for index, header in enumerate(headers):
            value = cell_text(row[index]) if index < len(row) else ""
            lines.append(f"{header}: {value}")
        records.append("\n".join(lines))
    return "\n\n".join(records)
