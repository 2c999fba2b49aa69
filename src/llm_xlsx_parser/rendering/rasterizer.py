"""Screenshot rendered HTML with headless Chromium via Playwright."""

from __future__ import annotations

import tempfile
from pathlib import Path

from playwright.sync_api import Browser, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from llm_xlsx_parser.utils.exceptions import (
    FileWriteError,
    RasterizationError,
    RasterizerUnavailableError,
)
from llm_xlsx_parser.utils.logging import get_logger, timed_operation
from llm_xlsx_parser.utils.temp_files import new_temp_path, remove_temp_file

logger = get_logger(__name__)

INSTALL_HINT = "Run `playwright install chromium`"

# Fragments Playwright uses when the browser binary has not been downloaded.
_MISSING_BROWSER_MARKERS = ("Executable doesn't exist", "playwright install")


def _is_missing_browser(exc: Exception) -> bool:
    message = str(exc)
    return any(marker in message for marker in _MISSING_BROWSER_MARKERS)


class HtmlRasterizer:
    """Turn an HTML document into a PNG screenshot."""

    def __init__(
        self,
        viewport_width: int = 1920,
        viewport_height: int = 1080,
        full_page: bool = True,
        timeout_ms: int = 30000,
    ) -> None:
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.full_page = full_page
        self.timeout_ms = timeout_ms

    def rasterize_file(self, html_path: Path, image_path: Path) -> Path:
        """Screenshot an HTML file on disk into ``image_path``.

        Raises:
            RasterizerUnavailableError: If Chromium is not installed.
            RasterizationError: For any other browser failure.
        """
        image_path.parent.mkdir(parents=True, exist_ok=True)
        file_url = html_path.resolve().as_uri()
        logger.info(
            "Rasterizing HTML",
            url=file_url,
            viewport=f"{self.viewport_width}x{self.viewport_height}",
            full_page=self.full_page,
        )

        with timed_operation(logger, "rasterize") as metrics:
            try:
                with sync_playwright() as playwright:
                    browser = playwright.chromium.launch(headless=True)
                    try:
                        context = browser.new_context(
                            viewport={
                                "width": self.viewport_width,
                                "height": self.viewport_height,
                            }
                        )
                        page = context.new_page()
                        page.goto(file_url, timeout=self.timeout_ms)
                        page.wait_for_load_state(
                            "networkidle", timeout=self.timeout_ms
                        )
                        page.screenshot(
                            path=str(image_path),
                            full_page=self.full_page,
                            timeout=self.timeout_ms,
                        )
                    finally:
                        self._close(browser)
            except PlaywrightError as exc:
                if _is_missing_browser(exc):
                    raise RasterizerUnavailableError(
                        hint=INSTALL_HINT,
                        details={"reason": str(exc).partition("\n")[0]},
                    ) from exc
                raise RasterizationError(
                    f"Browser failed to render {html_path.name}: {exc}"
                ) from exc
            metrics.api_calls += 1

        logger.info("Image created", path=str(image_path))
        return image_path

    def rasterize_html(self, html: str, image_path: Path) -> Path:
        """Write ``html`` to a uniquely named temp file and screenshot it.

        The temp file is removed whether or not rasterization succeeds.
        """
        temp_dir = Path(tempfile.gettempdir())
        html_path = new_temp_path(temp_dir, "lxp-table", ".html")
        try:
            html_path.write_text(html, encoding="utf-8")
        except OSError as exc:
            raise FileWriteError(str(html_path), details={"reason": str(exc)}) from exc
        try:
            return self.rasterize_file(html_path, image_path)
        finally:
            remove_temp_file(html_path)

    @staticmethod
    def _close(browser: Browser) -> None:
        try:
            browser.close()
        except PlaywrightError as exc:
            logger.warning("Could not close browser", error=str(exc))
