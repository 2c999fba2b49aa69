"""Map rendered table cell ids back to spreadsheet coordinates."""

from __future__ import annotations

import re

CELL_ID_PREFIX = "cell-"

COORDINATE_PATTERN = re.compile(r"[A-Za-z]+[0-9]+")


def cell_id(coordinate: str) -> str:
    """Build the markup id for the data cell at ``coordinate``."""
    return f"{CELL_ID_PREFIX}{coordinate.upper()}"


def coordinate_from_id(identifier: str | None) -> str | None:
    """Recover the coordinate encoded in a cell id.

    Returns None for ids without the prefix or whose remainder is not a
    letter-run followed by a digit-run.
    """
    if not identifier or not identifier.startswith(CELL_ID_PREFIX):
        return None
    coordinate = identifier[len(CELL_ID_PREFIX) :]
    if not COORDINATE_PATTERN.fullmatch(coordinate):
        return None
    return coordinate.upper()
