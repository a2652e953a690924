"""Artifact capture - screenshots, PDFs and scraped page content.

Each capture runs in its own authenticated session and returns a
self-contained ``CaptureResult``; binary artifacts are embedded as data URIs.
"""

from __future__ import annotations

import base64
from collections.abc import Sequence
from typing import Any

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from auth_browse.browser.auth import MARKER_MISSING_WARNING, AuthenticatedBrowser
from auth_browse.identity import TEST_USER
from auth_browse.state import (
    BrowserOptions,
    CaptureMetadata,
    CaptureResult,
    ReadinessOutcome,
)


def to_data_uri(data: bytes, media_type: str) -> str:
    """Encode binary content as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def _warnings_for(readiness: ReadinessOutcome) -> list[str]:
    if readiness is ReadinessOutcome.TIMED_OUT:
        return [MARKER_MISSING_WARNING]
    return []


async def take_screenshot(
    browser: AuthenticatedBrowser, path: str, options: BrowserOptions
) -> CaptureResult:
    """Capture a PNG screenshot of path; full-page unless bypass_auth is off."""
    async with browser.session(options) as session:
        page = session.page
        readiness = await browser.navigate_and_wait(page, path, options)

        png = await browser.automation.screenshot(page, full_page=options.bypass_auth)
        url, title = await browser.automation.page_info(page)

        return CaptureResult(
            kind="screenshot",
            payload=to_data_uri(png, "image/png"),
            metadata=CaptureMetadata(
                url=url,
                title=title,
                viewport_size=page.viewport_size,
                user=TEST_USER,
            ),
            readiness=readiness,
            warnings=_warnings_for(readiness),
        )


async def generate_pdf(
    browser: AuthenticatedBrowser, path: str, options: BrowserOptions
) -> CaptureResult:
    """Render path as an A4 PDF."""
    async with browser.session(options) as session:
        page = session.page
        readiness = await browser.navigate_and_wait(page, path, options)

        pdf = await browser.automation.pdf(page)
        url, title = await browser.automation.page_info(page)

        return CaptureResult(
            kind="pdf",
            payload=to_data_uri(pdf, "application/pdf"),
            metadata=CaptureMetadata(url=url, title=title, user=TEST_USER),
            readiness=readiness,
            warnings=_warnings_for(readiness),
        )


async def extract_texts(page: Page, selector: str) -> list[str] | str:
    """Text contents of all elements matching selector, in document order.

    Returns an ``"Error: ..."`` string instead of raising when the selector is
    invalid or matches nothing.
    """
    try:
        locator = page.locator(selector)
        if await locator.count() == 0:
            return f"Error: no elements match selector {selector!r}"
        return await locator.all_text_contents()
    except PlaywrightError as e:
        logger.debug(f"Selector {selector!r} failed: {e}")
        return f"Error: {e}"


async def extract_user_info(page: Page, selectors: Sequence[str]) -> dict[str, str | None]:
    """Best-effort read of visible identity/status fields.

    Absent or hidden elements are skipped.
    """
    user_info: dict[str, str | None] = {}
    for selector in selectors:
        element = page.locator(selector).first
        try:
            if await element.is_visible():
                user_info[selector] = await element.text_content()
        except PlaywrightError:
            continue
    return user_info


async def scrape_content(
    browser: AuthenticatedBrowser,
    path: str,
    selectors: Sequence[str],
    options: BrowserOptions,
) -> CaptureResult:
    """Scrape text for each selector plus page title, URL and user info."""
    async with browser.session(options) as session:
        page = session.page
        readiness = await browser.navigate_and_wait(page, path, options)

        data: dict[str, Any] = {}
        for selector in selectors:
            data[selector] = await extract_texts(page, selector)

        url, title = await browser.automation.page_info(page)
        data["title"] = title
        data["url"] = url
        data["user_info"] = await extract_user_info(
            page, browser.config.user_info_selectors
        )

        return CaptureResult(
            kind="scrape",
            payload=data,
            metadata=CaptureMetadata(
                url=url,
                title=title,
                authenticated=True,
                user=TEST_USER,
            ),
            readiness=readiness,
            warnings=_warnings_for(readiness),
        )
