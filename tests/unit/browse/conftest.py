"""Playwright fakes for the authenticated browser tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from auth_browse.browser import AuthenticatedBrowserService
from auth_browse.config import BrowseConfig

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
PDF_BYTES = b"%PDF-1.7 fake"


def make_locator(
    texts: list[str] | Exception, visible_text: str | None = None
) -> MagicMock:
    """Build a fake Locator.

    ``texts`` is what all_text_contents() returns; an exception is raised from
    count() instead. ``visible_text`` makes ``.first`` visible with that text.
    """
    locator = MagicMock(name="locator")
    if isinstance(texts, Exception):
        locator.count = AsyncMock(side_effect=texts)
        locator.all_text_contents = AsyncMock(side_effect=texts)
    else:
        locator.count = AsyncMock(return_value=len(texts))
        locator.all_text_contents = AsyncMock(return_value=list(texts))

    first = MagicMock(name="locator.first")
    first.is_visible = AsyncMock(return_value=visible_text is not None)
    first.text_content = AsyncMock(return_value=visible_text)
    locator.first = first
    return locator


@dataclass
class FakeBrowser:
    """A fake provider -> browser -> context -> page chain."""

    page: MagicMock
    context: MagicMock
    browser: MagicMock
    provider: MagicMock
    texts: dict[str, list[str] | Exception] = field(default_factory=dict)
    visible: dict[str, str] = field(default_factory=dict)


def make_fake_browser(
    url: str = "http://localhost:5000/",
    title: str = "Aura",
) -> FakeBrowser:
    page = MagicMock(name="page")
    page.url = url
    page.viewport_size = {"width": 1920, "height": 1080}
    page.title = AsyncMock(return_value=title)
    page.goto = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.set_extra_http_headers = AsyncMock()
    page.click = AsyncMock()
    page.fill = AsyncMock()
    page.screenshot = AsyncMock(return_value=PNG_BYTES)
    page.pdf = AsyncMock(return_value=PDF_BYTES)

    context = MagicMock(name="context")
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()

    browser = MagicMock(name="browser")
    browser.new_context = AsyncMock(return_value=context)

    provider = MagicMock(name="provider")
    provider.get_browser = AsyncMock(return_value=browser)
    provider.close = AsyncMock()

    fake = FakeBrowser(page=page, context=context, browser=browser, provider=provider)

    def _locator(selector: str) -> MagicMock:
        return make_locator(fake.texts.get(selector, []), fake.visible.get(selector))

    page.locator = MagicMock(side_effect=_locator)
    return fake


@pytest.fixture
def config() -> BrowseConfig:
    return BrowseConfig()


@pytest.fixture
def fake() -> FakeBrowser:
    return make_fake_browser()


@pytest.fixture
def service(config: BrowseConfig, fake: FakeBrowser) -> AuthenticatedBrowserService:
    return AuthenticatedBrowserService(config=config, provider=fake.provider)


def header_calls(page: Any) -> list[dict[str, str]]:
    """Header dicts passed to set_extra_http_headers, in call order."""
    return [c.args[0] for c in page.set_extra_http_headers.await_args_list]
