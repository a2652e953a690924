"""Core browser layer - browser acquisition, sessions and page primitives.

A ``BrowserProvider`` supplies a long-lived Playwright browser. Every
operation borrows it and opens its own ``BrowserContext``, which is closed on
every exit path.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger
from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    async_playwright,
)
from playwright.async_api import (
    Error as PlaywrightError,
)

from auth_browse.config import BrowseConfig
from auth_browse.errors import BrowserUnavailableError
from auth_browse.state import Viewport

PDF_MARGIN = {"top": "1in", "right": "1in", "bottom": "1in", "left": "1in"}


class BrowserProvider(Protocol):
    """Supplies a shared browser. Must tolerate concurrent callers."""

    async def get_browser(self) -> Browser: ...

    async def close(self) -> None: ...


class PlaywrightBrowserProvider:
    """Starts Playwright once and hands out one shared browser.

    Connects to a remote pool over CDP when ``ws_endpoint`` is configured,
    otherwise launches a local Chromium.
    """

    def __init__(self, config: BrowseConfig) -> None:
        self.config = config
        self._playwright: Any = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def get_browser(self) -> Browser:
        """Return the shared browser, starting it on first use.

        Raises:
            BrowserUnavailableError: If Playwright cannot start or connect.
        """
        async with self._lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()

                if self.config.ws_endpoint:
                    logger.info(f"Connecting to browser pool at {self.config.ws_endpoint}")
                    self._browser = await self._playwright.chromium.connect_over_cdp(
                        self.config.ws_endpoint
                    )
                else:
                    logger.info(f"Launching Chromium (headless={self.config.headless})")
                    self._browser = await self._playwright.chromium.launch(
                        headless=self.config.headless,
                        args=list(self.config.browser_args),
                    )
            except PlaywrightError as e:
                raise BrowserUnavailableError(f"Cannot obtain browser: {e}") from e

            return self._browser

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        async with self._lock:
            try:
                if self._browser is not None:
                    await self._browser.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {e}")
            finally:
                self._browser = None

            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def __aenter__(self) -> PlaywrightBrowserProvider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


@dataclass
class BrowserSession:
    """One isolated context and its page, owned by a single operation."""

    context: BrowserContext
    page: Page


class BrowserAutomation:
    """Browser capability used by every operation: sessions, navigation, captures."""

    def __init__(self, provider: BrowserProvider) -> None:
        self.provider = provider

    @asynccontextmanager
    async def open_session(
        self, viewport: Viewport, user_agent: str
    ) -> AsyncIterator[BrowserSession]:
        """Open a fresh context and page; close the context on exit.

        Raises:
            BrowserUnavailableError: If no browser or context can be obtained.
        """
        browser = await self.provider.get_browser()
        try:
            context = await browser.new_context(
                viewport=viewport.to_dict(),
                user_agent=user_agent,
            )
        except PlaywrightError as e:
            raise BrowserUnavailableError(f"Cannot create browser context: {e}") from e

        try:
            try:
                page = await context.new_page()
            except PlaywrightError as e:
                raise BrowserUnavailableError(f"Cannot open page: {e}") from e
            yield BrowserSession(context=context, page=page)
        finally:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser context: {e}")

    async def navigate(self, page: Page, url: str) -> None:
        """Navigate and wait until the network is idle."""
        await page.goto(url, wait_until="networkidle")

    async def screenshot(self, page: Page, full_page: bool = True) -> bytes:
        """Capture a PNG screenshot."""
        return await page.screenshot(full_page=full_page, type="png")

    async def pdf(self, page: Page) -> bytes:
        """Render the page as an A4 PDF with backgrounds and 1in margins."""
        return await page.pdf(
            format="A4",
            print_background=True,
            margin=PDF_MARGIN,
        )

    async def page_info(self, page: Page) -> tuple[str, str]:
        """Return the page's resolved URL and title."""
        return page.url, await page.title()
