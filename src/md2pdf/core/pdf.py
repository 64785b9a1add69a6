"""HTML to PDF rendering through a reused headless Chromium instance"""

import logging
import re
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import unquote, urlsplit

from playwright.sync_api import Browser, Playwright, Route, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from md2pdf.core.models import PdfOptions


logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    pass


class Renderer(Protocol):
    def render(self, html: str, base_url: str, options: PdfOptions) -> bytes: ...


def _asset_handler(document_url: str, html: str):
    """Serve the document at ``document_url`` and local files at the URL path mirroring their absolute path."""
    def handle(route: Route) -> None:
        url = route.request.url.split("#", 1)[0]
        if url == document_url:
            route.fulfill(status=200, content_type="text/html; charset=utf-8", body=html)
            return
        path = Path(unquote(urlsplit(url).path))
        if path.is_file():
            route.fulfill(path=str(path))
        else:
            logger.warning("Asset not found: %s", path)
            route.fulfill(status=404, body="")
    return handle


class PdfRenderer:
    """Owns one browser for a pipeline or batch run.

    The browser starts on the first ``render()`` and is shut down once by
    ``close()``; use as a context manager so that happens on every exit path.
    Each render gets its own browser context.
    """

    def __init__(self, headless: bool = True, timeout: float = 60.0):
        self.headless = headless
        self.timeout = timeout
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._closed = False

    def __enter__(self) -> "PdfRenderer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def started(self) -> bool:
        return self._browser is not None

    def _ensure_browser(self) -> Browser:
        if self._closed:
            raise RenderError("Renderer is closed")
        if self._browser is None:
            logger.debug("Launching Chromium (headless=%s)", self.headless)
            try:
                self._playwright = sync_playwright().start()
                self._browser = self._playwright.chromium.launch(headless=self.headless)
            except PlaywrightError as e:
                self.close()
                raise RenderError(f"Browser launch failed: {e}") from e
        return self._browser

    def render(self, html: str, base_url: str, options: PdfOptions = None) -> bytes:
        """Load ``html`` as the page at ``base_url``, wait for the network to settle, and print it."""
        options = options or PdfOptions()
        browser = self._ensure_browser()
        timeout_ms = self.timeout * 1000
        document_url = base_url.rstrip("/") + "/"

        context = browser.new_context()
        try:
            context.set_default_timeout(timeout_ms)
            context.route(re.compile("^" + re.escape(document_url)), _asset_handler(document_url, html))
            page = context.new_page()
            page.goto(document_url, wait_until="networkidle", timeout=timeout_ms)
            pdf = page.pdf(**options.to_engine_kwargs())
        except PlaywrightTimeoutError as e:
            raise RenderError(f"Rendering timed out after {self.timeout}s: {e}") from e
        except PlaywrightError as e:
            raise RenderError(f"PDF rendering failed: {e}") from e
        finally:
            context.close()

        if not pdf:
            raise RenderError("PDF generation failed: No content returned.")
        logger.debug("Rendered %d bytes of PDF", len(pdf))
        return pdf

    def close(self) -> None:
        """Shut the browser down; safe to call more than once."""
        self._closed = True
        browser, pw = self._browser, self._playwright
        self._browser = self._playwright = None
        try:
            if browser is not None:
                browser.close()
        finally:
            if pw is not None:
                pw.stop()
