"""Tests for authenticated screenshot, PDF and scrape captures."""

from __future__ import annotations

import asyncio
import base64
from unittest.mock import AsyncMock

import pytest
from conftest import PDF_BYTES, PNG_BYTES, FakeBrowser, header_calls, make_fake_browser
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from auth_browse.browser import AuthenticatedBrowserService
from auth_browse.browser.capture import to_data_uri
from auth_browse.config import BrowseConfig
from auth_browse.errors import BrowserUnavailableError
from auth_browse.identity import BYPASS_HEADERS, TEST_USER
from auth_browse.state import ReadinessOutcome


@pytest.mark.unit
@pytest.mark.browse
def test_to_data_uri() -> None:
    uri = to_data_uri(b"abc", "image/png")

    assert uri == "data:image/png;base64," + base64.b64encode(b"abc").decode()


@pytest.mark.unit
@pytest.mark.browse
class TestScreenshot:
    def test_returns_png_data_uri_with_metadata(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        fake.page.url = "http://localhost:5000/profile"

        result = asyncio.run(service.take_authenticated_screenshot("/profile"))

        assert result.kind == "screenshot"
        assert result.payload == to_data_uri(PNG_BYTES, "image/png")
        assert result.metadata.url == "http://localhost:5000/profile"
        assert result.metadata.title == "Aura"
        assert result.metadata.viewport_size == {"width": 1920, "height": 1080}
        assert result.metadata.user is TEST_USER
        assert result.readiness is ReadinessOutcome.READY
        assert result.warnings == []
        fake.page.screenshot.assert_awaited_once_with(full_page=True, type="png")
        assert header_calls(fake.page) == [BYPASS_HEADERS]

    def test_viewport_only_when_bypass_auth_false(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        asyncio.run(service.take_authenticated_screenshot("/", {"bypassAuth": False}))

        fake.page.screenshot.assert_awaited_once_with(full_page=False, type="png")

    def test_uses_viewport_and_user_agent(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        asyncio.run(
            service.take_authenticated_screenshot(
                "/", {"viewport": {"width": 390, "height": 844}, "userAgent": "Phone"}
            )
        )

        fake.browser.new_context.assert_awaited_once_with(
            viewport={"width": 390, "height": 844}, user_agent="Phone"
        )

    def test_missing_marker_still_captures(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        fake.page.wait_for_selector = AsyncMock(
            side_effect=PlaywrightTimeoutError("Timeout 5000ms exceeded")
        )

        result = asyncio.run(service.take_authenticated_screenshot("/profile"))

        assert result.payload.startswith("data:image/png;base64,")
        assert result.readiness is ReadinessOutcome.TIMED_OUT
        assert result.warnings
        assert "marker" in result.warnings[0]

    def test_zero_timeout_uses_configured_default(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        asyncio.run(service.take_authenticated_screenshot("/", {"timeout": 0}))

        fake.page.wait_for_selector.assert_awaited_once_with(
            '[data-testid="authenticated-content"]', timeout=5000
        )

    def test_context_closed_once_when_capture_fails(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        fake.page.screenshot = AsyncMock(side_effect=PlaywrightError("renderer crashed"))

        with pytest.raises(PlaywrightError):
            asyncio.run(service.take_authenticated_screenshot("/"))

        fake.browser.new_context.assert_awaited_once()
        fake.context.close.assert_awaited_once()

    def test_browser_unavailable_propagates(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        fake.provider.get_browser = AsyncMock(side_effect=BrowserUnavailableError("down"))

        with pytest.raises(BrowserUnavailableError):
            asyncio.run(service.take_authenticated_screenshot("/"))

        fake.context.close.assert_not_awaited()

    def test_concurrent_captures_use_separate_contexts(self, config: BrowseConfig) -> None:
        first = make_fake_browser(url="http://localhost:5000/a")
        second = make_fake_browser(url="http://localhost:5000/b")
        first.browser.new_context = AsyncMock(side_effect=[first.context, second.context])
        service = AuthenticatedBrowserService(config=config, provider=first.provider)

        async def _test():
            return await asyncio.gather(
                service.take_authenticated_screenshot("/a"),
                service.take_authenticated_screenshot("/b"),
            )

        results = asyncio.run(_test())

        assert {r.metadata.url for r in results} == {
            "http://localhost:5000/a",
            "http://localhost:5000/b",
        }
        first.context.close.assert_awaited_once()
        second.context.close.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.browse
class TestPdf:
    def test_report_pdf(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        fake.page.url = "http://localhost:5000/report"
        fake.page.title = AsyncMock(return_value="Monthly Report")

        result = asyncio.run(service.generate_authenticated_pdf("/report"))

        assert result.kind == "pdf"
        assert result.payload.startswith("data:application/pdf;base64,")
        assert result.payload == to_data_uri(PDF_BYTES, "application/pdf")
        assert result.metadata.title == "Monthly Report"
        assert result.metadata.url == "http://localhost:5000/report"
        assert result.metadata.viewport_size is None
        fake.page.pdf.assert_awaited_once_with(
            format="A4",
            print_background=True,
            margin={"top": "1in", "right": "1in", "bottom": "1in", "left": "1in"},
        )
        fake.context.close.assert_awaited_once()


@pytest.mark.unit
@pytest.mark.browse
class TestScrape:
    def test_feed_selectors(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        fake.page.url = "http://localhost:5000/feed"
        fake.texts[".post-title"] = ["First post", "Second post"]

        result = asyncio.run(
            service.scrape_authenticated_content("/feed", [".post-title", ".nonexistent"])
        )

        data = result.payload
        assert data[".post-title"] == ["First post", "Second post"]
        assert isinstance(data[".nonexistent"], str)
        assert data[".nonexistent"].startswith("Error")
        assert data["title"] == "Aura"
        assert data["url"] == "http://localhost:5000/feed"
        assert result.metadata.authenticated is True
        assert result.metadata.user is TEST_USER

    def test_selector_error_is_isolated(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        fake.texts["<<bad"] = PlaywrightError("Unexpected token")
        fake.texts["h1"] = ["Welcome"]

        result = asyncio.run(service.scrape_authenticated_content("/", ["<<bad", "h1"]))

        assert result.payload["<<bad"] == "Error: Unexpected token"
        assert result.payload["h1"] == ["Welcome"]

    def test_user_info_skips_absent_fields(
        self,
        service: AuthenticatedBrowserService,
        fake: FakeBrowser,
        config: BrowseConfig,
    ) -> None:
        name_selector, energy_selector = config.user_info_selectors[1:3]
        fake.visible[name_selector] = "Test User"
        fake.visible[energy_selector] = "42"

        result = asyncio.run(service.scrape_authenticated_content("/"))

        assert result.payload["user_info"] == {
            name_selector: "Test User",
            energy_selector: "42",
        }

    def test_scrape_closes_context(
        self, service: AuthenticatedBrowserService, fake: FakeBrowser
    ) -> None:
        asyncio.run(service.scrape_authenticated_content("/", ["h1"]))

        fake.browser.new_context.assert_awaited_once()
        fake.context.close.assert_awaited_once()
