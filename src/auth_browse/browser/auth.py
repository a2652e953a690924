"""Authenticated sessions - bypass headers and readiness waiting.

``AuthenticatedBrowser`` wraps ``BrowserAutomation``: every session it opens
carries the bypass headers before the first navigation, and navigation waits
for the authenticated-content marker without failing when it never shows up.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from auth_browse.browser.core import BrowserAutomation, BrowserSession
from auth_browse.config import BrowseConfig
from auth_browse.identity import BYPASS_HEADERS
from auth_browse.state import BrowserOptions, ReadinessOutcome

DEFAULT_READY_TIMEOUT_MS = 5000

MARKER_MISSING_WARNING = "No authenticated content marker found, proceeding anyway"


async def apply_bypass(page: Page) -> None:
    """Set the bypass headers on a page. Safe to call repeatedly."""
    await page.set_extra_http_headers(dict(BYPASS_HEADERS))


async def navigate_and_wait(
    page: Page,
    url: str,
    marker_selector: str | None = None,
    timeout: int = DEFAULT_READY_TIMEOUT_MS,
) -> ReadinessOutcome:
    """Navigate to url, wait for network idle, then for the optional marker.

    A marker that does not appear within ``timeout`` ms yields
    ``ReadinessOutcome.TIMED_OUT``; other failures propagate.
    """
    await page.goto(url, wait_until="networkidle")

    if not marker_selector:
        return ReadinessOutcome.READY

    try:
        await page.wait_for_selector(marker_selector, timeout=timeout)
    except PlaywrightTimeoutError:
        logger.warning(f"{MARKER_MISSING_WARNING} ({url})")
        return ReadinessOutcome.TIMED_OUT
    return ReadinessOutcome.READY


class AuthenticatedBrowser:
    """Opens bypass-authenticated sessions against the configured application."""

    def __init__(self, automation: BrowserAutomation, config: BrowseConfig) -> None:
        self.automation = automation
        self.config = config

    @asynccontextmanager
    async def session(self, options: BrowserOptions) -> AsyncIterator[BrowserSession]:
        """Open a session with the bypass headers already applied."""
        async with self.automation.open_session(
            options.viewport, options.user_agent
        ) as session:
            await apply_bypass(session.page)
            yield session

    def url_for(self, path: str) -> str:
        return self.config.url_for(path)

    async def navigate_and_wait(
        self, page: Page, path: str, options: BrowserOptions
    ) -> ReadinessOutcome:
        """Navigate to path on the target application and wait for readiness."""
        timeout = options.timeout or self.config.ready_timeout_ms
        return await navigate_and_wait(
            page,
            self.url_for(path),
            marker_selector=self.config.ready_selector,
            timeout=timeout,
        )
