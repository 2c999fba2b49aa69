"""Tests for intermediate file helpers."""

from pathlib import Path
from unittest.mock import patch

from llm_xlsx_parser.utils.temp_files import new_temp_path, remove_temp_file


def test_new_temp_path_is_unique(tmp_path: Path) -> None:
    first = new_temp_path(tmp_path, "temp", ".png")
    second = new_temp_path(tmp_path, "temp", ".png")

    assert first != second
    assert first.parent == tmp_path
    assert first.name.startswith("temp-")
    assert first.suffix == ".png"


def test_remove_temp_file(tmp_path: Path) -> None:
    path = tmp_path / "temp-x.png"
    path.write_bytes(b"png")

    assert remove_temp_file(path) is True
    assert not path.exists()


def test_remove_missing_or_none() -> None:
    assert remove_temp_file(None) is True
    assert remove_temp_file(Path("/nonexistent/temp-x.png")) is True


def test_remove_failure_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "temp-x.png"
    path.write_bytes(b"png")

    with patch.object(Path, "unlink", side_effect=PermissionError("locked")):
        assert remove_temp_file(path) is False
    assert path.exists()
