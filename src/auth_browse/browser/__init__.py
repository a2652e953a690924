"""Authenticated browser service package.

Drives a headless browser as the canned test user to capture screenshots,
PDFs and page content, and to run multi-step UI flows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from auth_browse.browser.auth import AuthenticatedBrowser, apply_bypass, navigate_and_wait
from auth_browse.browser.capture import generate_pdf, scrape_content, take_screenshot
from auth_browse.browser.core import (
    BrowserAutomation,
    BrowserProvider,
    BrowserSession,
    PlaywrightBrowserProvider,
)
from auth_browse.browser.flow import FlowExecutor
from auth_browse.config import BrowseConfig, get_config
from auth_browse.logging import log
from auth_browse.state import BrowserOptions, CaptureResult, FlowResult
from auth_browse.steps import FlowStep, parse_steps

__all__ = [
    "AuthenticatedBrowser",
    "AuthenticatedBrowserService",
    "BrowserAutomation",
    "BrowserProvider",
    "BrowserSession",
    "FlowExecutor",
    "PlaywrightBrowserProvider",
    "apply_bypass",
    "navigate_and_wait",
]

OptionsArg = BrowserOptions | Mapping[str, Any] | None


class AuthenticatedBrowserService:
    """Entry point for authenticated captures and user flows.

    Composed from:
    - BrowserAutomation: sessions, navigation, capture primitives
    - AuthenticatedBrowser: bypass headers and readiness waiting
    - FlowExecutor: ordered multi-step journeys
    """

    def __init__(
        self,
        config: BrowseConfig | None = None,
        provider: BrowserProvider | None = None,
    ) -> None:
        self.config = config if config is not None else get_config()
        self._owns_provider = provider is None
        self.provider = provider if provider is not None else PlaywrightBrowserProvider(self.config)
        self.browser = AuthenticatedBrowser(BrowserAutomation(self.provider), self.config)
        self.flows = FlowExecutor(self.browser)

    async def take_authenticated_screenshot(
        self, path: str = "/", options: OptionsArg = None
    ) -> CaptureResult:
        """Screenshot path as the test user."""
        opts = BrowserOptions.coerce(options)
        with log("browse.screenshot", path=path, full_page=opts.bypass_auth) as span:
            result = await take_screenshot(self.browser, path, opts)
            span.add(url=result.metadata.url, readiness=result.readiness.value)
            return result

    async def generate_authenticated_pdf(
        self, path: str = "/", options: OptionsArg = None
    ) -> CaptureResult:
        """Render path as a PDF as the test user."""
        opts = BrowserOptions.coerce(options)
        with log("browse.pdf", path=path) as span:
            result = await generate_pdf(self.browser, path, opts)
            span.add(url=result.metadata.url, readiness=result.readiness.value)
            return result

    async def test_user_flow(
        self,
        steps: Iterable[FlowStep | Mapping[str, Any]],
        options: OptionsArg = None,
    ) -> FlowResult:
        """Run a user flow as the test user.

        Raises:
            ValueError: If a step definition is invalid (before any browser work).
        """
        parsed = parse_steps(steps)
        opts = BrowserOptions.coerce(options)
        with log("browse.flow", steps=len(parsed)) as span:
            result = await self.flows.run(parsed, opts)
            span.add(success=result.success, screenshots=len(result.screenshots))
            return result

    async def scrape_authenticated_content(
        self,
        path: str,
        selectors: Sequence[str] = (),
        options: OptionsArg = None,
    ) -> CaptureResult:
        """Scrape selector text from path as the test user."""
        opts = BrowserOptions.coerce(options)
        with log("browse.scrape", path=path, selectors=len(selectors)) as span:
            result = await scrape_content(self.browser, path, list(selectors), opts)
            span.add(url=result.metadata.url, readiness=result.readiness.value)
            return result

    async def close(self) -> None:
        """Release the browser provider if this service started it."""
        if self._owns_provider:
            await self.provider.close()

    async def __aenter__(self) -> AuthenticatedBrowserService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
