"""
DealFinder - Page Navigator

Owns one headless-browser session for one search:

    IDLE -> LAUNCHING -> NAVIGATING -> WAITING_FOR_CONTENT -> SETTLING -> READY -> CLOSED

ERROR is reachable from any non-terminal state once a step fails for good,
and still moves to CLOSED through close(). Sessions are never shared between
searches; each navigator launches and releases its own browser.

Request interception lets only document/script/xhr/fetch through. Images,
fonts, stylesheets and media are aborted.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable

import structlog
from playwright.async_api import async_playwright

from dealfinder.config import settings
from dealfinder.retailers import RetailerConfig
from dealfinder.scraper.errors import (
    BrowserLaunchError,
    ContentWaitError,
    NavigationError,
)
from dealfinder.scraper.retry import retry_async

logger = structlog.get_logger(__name__)

_SCROLL_TO_BOTTOM_JS = "window.scrollTo(0, document.body.scrollHeight)"


class NavigatorState(str, Enum):
    IDLE = "idle"
    LAUNCHING = "launching"
    NAVIGATING = "navigating"
    WAITING_FOR_CONTENT = "waiting_for_content"
    SETTLING = "settling"
    READY = "ready"
    ERROR = "error"
    CLOSED = "closed"


class PageNavigator:
    """
    Browser session lifecycle for a single retailer search.

    Usage:
        async with PageNavigator(config) as nav:
            await nav.navigate(config.search_url("blue tank top"))
            await nav.await_listings(config.selectors.products)
            await nav.settle()
            handles = await nav.query_listings(config.selectors.products)
    """

    def __init__(
        self,
        config: RetailerConfig,
        playwright_factory: Callable[[], Any] = async_playwright,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config
        self.state = NavigatorState.IDLE
        self.navigation_attempts = 0
        self.content_attempts = 0
        self._playwright_factory = playwright_factory
        self._sleep = sleep
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None

    async def __aenter__(self) -> PageNavigator:
        try:
            await self.open()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def page(self) -> Any:
        return self._page

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    async def open(self) -> None:
        """Launch the browser and a single configured page."""
        self.state = NavigatorState.LAUNCHING
        try:
            self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(
                headless=settings.BROWSER_HEADLESS,
                args=settings.BROWSER_ARGS,
            )
            self._context = await self._browser.new_context(
                viewport={
                    "width": settings.VIEWPORT_WIDTH,
                    "height": settings.VIEWPORT_HEIGHT,
                },
                user_agent=settings.USER_AGENT,
            )
            self._page = await self._context.new_page()
            await self._page.route("**/*", self._handle_route)
        except Exception as e:
            self.state = NavigatorState.ERROR
            logger.error(
                "browser_launch_failed",
                retailer=self.config.name,
                error=str(e),
                error_type=type(e).__name__,
                source="navigator",
            )
            raise BrowserLaunchError(f"Could not launch browser: {e}") from e

        logger.debug("browser_session_opened", retailer=self.config.name, source="navigator")

    async def _handle_route(self, route: Any) -> None:
        """Allow only the resource types needed to render listings."""
        if route.request.resource_type in settings.ALLOWED_RESOURCE_TYPES:
            await route.continue_()
        else:
            await route.abort()

    async def close(self) -> None:
        """
        Release the page, then the browser. Safe to call more than once and
        after a partial open(); close failures are logged, never raised.
        """
        if self.state == NavigatorState.CLOSED:
            return

        for name, closer in (
            ("page", self._page.close if self._page is not None else None),
            ("context", self._context.close if self._context is not None else None),
            ("browser", self._browser.close if self._browser is not None else None),
            ("playwright", self._playwright.stop if self._playwright is not None else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning(
                    "browser_close_failed",
                    retailer=self.config.name,
                    resource=name,
                    error=str(e),
                    source="navigator",
                )

        self._page = self._context = self._browser = self._playwright = None
        self.state = NavigatorState.CLOSED
        logger.debug("browser_session_closed", retailer=self.config.name, source="navigator")

    # -----------------------------------------------------------------------
    # Navigation
    # -----------------------------------------------------------------------

    async def navigate(self, url: str) -> None:
        """Load ``url``, retrying a fixed number of times with a fixed delay."""
        self.state = NavigatorState.NAVIGATING

        async def _goto(attempt: int) -> None:
            self.navigation_attempts = attempt
            await self._page.goto(
                url,
                wait_until="networkidle",
                timeout=settings.SCRAPE_NAVIGATION_TIMEOUT_MS,
            )
            await self._page.wait_for_load_state(
                "domcontentloaded",
                timeout=settings.SCRAPE_NAVIGATION_TIMEOUT_MS,
            )

        try:
            await retry_async(
                _goto,
                max_attempts=settings.SCRAPE_MAX_ATTEMPTS,
                delay_seconds=settings.SCRAPE_RETRY_DELAY_SECONDS,
                label="navigation",
                error_cls=NavigationError,
                sleep=self._sleep,
            )
        except NavigationError:
            self.state = NavigatorState.ERROR
            raise

        logger.info(
            "navigation_complete",
            retailer=self.config.name,
            url=url,
            attempts=self.navigation_attempts,
            source="navigator",
        )

    async def await_listings(self, selector: str) -> None:
        """Wait until at least one ``selector`` match is visible."""
        self.state = NavigatorState.WAITING_FOR_CONTENT

        async def _wait(attempt: int) -> None:
            self.content_attempts = attempt
            await self._page.wait_for_selector(
                selector,
                state="visible",
                timeout=settings.SCRAPE_CONTENT_TIMEOUT_MS,
            )

        try:
            await retry_async(
                _wait,
                max_attempts=settings.SCRAPE_MAX_ATTEMPTS,
                delay_seconds=settings.SCRAPE_RETRY_DELAY_SECONDS,
                label="content_wait",
                error_cls=ContentWaitError,
                sleep=self._sleep,
            )
        except ContentWaitError:
            self.state = NavigatorState.ERROR
            raise

    async def settle(self) -> None:
        """Pause, scroll to the bottom to trigger lazy loading, pause again."""
        self.state = NavigatorState.SETTLING
        try:
            await self._sleep(settings.SCRAPE_SETTLE_DELAY_SECONDS)
            await self._page.evaluate(_SCROLL_TO_BOTTOM_JS)
            await self._sleep(settings.SCRAPE_SETTLE_DELAY_SECONDS)
        except Exception:
            self.state = NavigatorState.ERROR
            raise
        self.state = NavigatorState.READY

    async def query_listings(self, selector: str) -> list[Any]:
        """Every listing handle matching ``selector``, in document order."""
        return list(await self._page.query_selector_all(selector))

    # -----------------------------------------------------------------------
    # Diagnostics
    # -----------------------------------------------------------------------

    async def diagnostic_capture(self, label: str) -> list[Path]:
        """
        Best-effort screenshot + HTML dump for offline debugging.

        Never raises.

        Returns:
            Paths of the files that were actually written.
        """
        written: list[Path] = []
        if self._page is None:
            return written

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
        base = f"{self.config.name}_{label}_{stamp}"

        try:
            out_dir = Path(settings.SCRAPE_DIAGNOSTICS_DIR)
            out_dir.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            logger.warning("diagnostics_dir_failed", error=str(e), source="navigator")
            return written

        screenshot_path = out_dir / f"{base}.png"
        try:
            await self._page.screenshot(path=str(screenshot_path), full_page=True)
            written.append(screenshot_path)
        except Exception as e:
            logger.warning(
                "diagnostics_screenshot_failed",
                retailer=self.config.name,
                error=str(e),
                source="navigator",
            )

        html_path = out_dir / f"{base}.html"
        try:
            html = await self._page.content()
            await asyncio.to_thread(html_path.write_text, html, encoding="utf-8")
            written.append(html_path)
        except Exception as e:
            logger.warning(
                "diagnostics_html_failed",
                retailer=self.config.name,
                error=str(e),
                source="navigator",
            )

        if written:
            logger.info(
                "diagnostics_captured",
                retailer=self.config.name,
                files=[str(p) for p in written],
                source="navigator",
            )
        return written
