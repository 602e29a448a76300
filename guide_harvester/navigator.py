"""
Session Navigator
=================
One Playwright browser session driven across the header page and every
subject page of an import.

``BrowserSession`` is the scoped resource: entering it launches Chromium and
opens a single page; leaving it closes page, browser and driver on every
exit path.  ``SessionNavigator`` wraps that page with the two operations the
importer needs (navigate + wait for a structural marker, and snapshot the
rendered DOM into BeautifulSoup).  Playwright errors never escape this
module; they are translated into ``NavigationError`` subclasses.
"""

import logging
from typing import Optional, Sequence

from bs4 import BeautifulSoup
from playwright.sync_api import sync_playwright, Browser, BrowserContext, Page
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeout

from .errors import NavigationError, NavigationTimeout, NetworkError
from .header import extract_header
from .models import HeaderData
from .run_config import HarvestConfig

logger = logging.getLogger(__name__)


class SessionNavigator:
    """
    Drives one page through the pages of a guide.
    """

    def __init__(self, page: Page, config: HarvestConfig = None):
        self.page = page
        self.config = config or HarvestConfig()
        self.current_url = ""

    def navigate_and_wait_for(
        self,
        url: str,
        markers: Sequence[str],
        timeout: Optional[int] = None,
    ) -> None:
        """
        Load ``url`` and block until any of ``markers`` is attached.

        Args:
            url: Page to load
            markers: CSS selectors; the first to appear satisfies the wait
            timeout: Marker wait in ms (defaults to ``marker_timeout_ms``)

        Raises:
            NavigationTimeout: page load or marker wait timed out
            NetworkError: transport failure while loading
        """
        marker_timeout = timeout if timeout is not None else self.config.marker_timeout_ms
        selector = ', '.join(markers)

        logger.info(f"[NAV] Navigating to {url}")
        try:
            self.page.goto(
                url,
                wait_until='domcontentloaded',
                timeout=self.config.page_load_timeout_ms,
            )
        except PlaywrightTimeout as exc:
            raise NavigationTimeout(
                f"Timed out after {self.config.page_load_timeout_ms}ms loading {url}",
                url=url,
            ) from exc
        except PlaywrightError as exc:
            raise NetworkError(f"Could not load {url}: {exc.message}", url=url) from exc

        try:
            self.page.wait_for_selector(selector, timeout=marker_timeout, state='attached')
        except PlaywrightTimeout as exc:
            raise NavigationTimeout(
                f"None of [{selector}] appeared within {marker_timeout}ms on {url}",
                url=url,
            ) from exc
        except PlaywrightError as exc:
            raise NetworkError(f"Page failed while waiting on {url}: {exc.message}", url=url) from exc

        self.current_url = self.page.url or url
        logger.debug(f"[NAV] Marker found on {self.current_url}")

    def snapshot(self) -> BeautifulSoup:
        """Parse the currently rendered DOM; no live handle is kept."""
        try:
            html = self.page.content()
        except PlaywrightError as exc:
            raise NetworkError(
                f"Could not read page content: {exc.message}", url=self.current_url
            ) from exc
        return BeautifulSoup(html, 'lxml')

    def extract_header(self) -> HeaderData:
        """Header fields of the current page (soft failure: empty strings)."""
        return extract_header(self.snapshot(), base_url=self.current_url)


class BrowserSession:
    """
    Scoped Chromium session yielding a ``SessionNavigator``.

    Usage::

        with BrowserSession(config) as navigator:
            navigator.navigate_and_wait_for(url, ['div.guias-cabecalho'])
    """

    def __init__(self, config: HarvestConfig = None):
        self.config = config or HarvestConfig()
        self._playwright = None
        self._browser: Browser = None
        self._context: BrowserContext = None
        self._page: Page = None

    def __enter__(self) -> SessionNavigator:
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self.config.headless,
                args=list(self.config.browser_args),
            )
            self._context = self._browser.new_context(
                user_agent=self.config.user_agent,
                viewport={
                    'width': self.config.viewport_width,
                    'height': self.config.viewport_height,
                },
            )
            self._page = self._context.new_page()
        except PlaywrightError as exc:
            self.close()
            raise NavigationError(f"Could not start browser: {exc.message}") from exc

        logger.info("[NAV] Browser session started")
        return SessionNavigator(self._page, self.config)

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Release page, context, browser and driver (safe to call twice)."""
        for name in ('_page', '_context', '_browser'):
            handle = getattr(self, name)
            if handle is None:
                continue
            try:
                handle.close()
            except PlaywrightError as exc:
                logger.debug(f"[NAV] Ignoring error closing {name.strip('_')}: {exc}")
            setattr(self, name, None)

        if self._playwright is not None:
            try:
                self._playwright.stop()
            except PlaywrightError as exc:
                logger.debug(f"[NAV] Ignoring error stopping Playwright: {exc}")
            self._playwright = None
            logger.info("[NAV] Browser session closed")
