"""Helpers for intermediate files created during a conversion."""

from pathlib import Path
from uuid import uuid4

from llm_xlsx_parser.utils.logging import get_logger

logger = get_logger(__name__)


def new_temp_path(directory: Path, prefix: str, suffix: str) -> Path:
    """Build a unique path for an intermediate file inside ``directory``.

    Names carry a random uuid so concurrent conversions writing into the same
    directory never collide.
    """
    return directory / f"{prefix}-{uuid4().hex}{suffix}"


def remove_temp_file(path: Path | None) -> bool:
    """Delete an intermediate file, logging instead of raising on failure.

    Returns:
        True if the file is gone afterwards, False if deletion failed.
    """
    if path is None:
        return True
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(
            "Could not clean up temporary file", path=str(path), error=str(exc)
        )
        return False
    logger.debug("Cleaned up temporary file", path=str(path))
    return True
