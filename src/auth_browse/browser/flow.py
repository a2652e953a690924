"""Flow executor - runs a literal user journey step by step on one page.

Steps execute strictly in order. The first failing step ends the run; the
result still carries every log line and screenshot collected before it.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import assert_never

from loguru import logger
from playwright.async_api import Page

from auth_browse.browser.auth import AuthenticatedBrowser
from auth_browse.browser.capture import to_data_uri
from auth_browse.errors import FlowStepError
from auth_browse.state import BrowserOptions, FlowResult
from auth_browse.steps import (
    ClickStep,
    FillStep,
    FlowStep,
    GotoStep,
    ScreenshotStep,
    WaitStep,
)


class _FlowRun:
    """Mutable state of a single flow execution."""

    def __init__(self, browser: AuthenticatedBrowser, page: Page) -> None:
        self.browser = browser
        self.page = page
        self.logs: list[str] = []
        self.screenshots: list[str] = []

    async def goto(self, step: GotoStep) -> None:
        url = self.browser.url_for(step.path)
        await self.browser.automation.navigate(self.page, url)
        self.logs.append(f"Navigated to {url}")

    async def click(self, step: ClickStep) -> None:
        await self.page.click(step.selector)
        self.logs.append(f"Clicked {step.selector}")

    async def fill(self, step: FillStep) -> None:
        # TODO: confirm with stakeholders whether an incomplete fill step should fail the flow
        if not step.selector or not step.value:
            logger.debug(f"Skipping fill step without selector/value: {step!r}")
            return
        await self.page.fill(step.selector, step.value)
        self.logs.append(f"Filled {step.selector} with value")

    async def screenshot(self, step: ScreenshotStep) -> None:
        png = await self.browser.automation.screenshot(self.page, full_page=True)
        self.screenshots.append(to_data_uri(png, "image/png"))
        self.logs.append("Screenshot taken")

    async def wait(self, step: WaitStep) -> None:
        config = self.browser.config
        if step.selector:
            timeout = step.timeout or config.wait_step_timeout_ms
            await self.page.wait_for_selector(step.selector, timeout=timeout)
            self.logs.append(f"Waited for {step.selector}")
        else:
            delay = step.timeout or config.wait_step_delay_ms
            await self.page.wait_for_timeout(delay)
            self.logs.append(f"Waited {delay}ms")

    async def dispatch(self, step: FlowStep) -> None:
        match step:
            case GotoStep():
                await self.goto(step)
            case ClickStep():
                await self.click(step)
            case FillStep():
                await self.fill(step)
            case ScreenshotStep():
                await self.screenshot(step)
            case WaitStep():
                await self.wait(step)
            case _:
                assert_never(step)

    async def execute(self, steps: Sequence[FlowStep]) -> None:
        """Run all steps in order.

        Raises:
            FlowStepError: On the first step whose handler fails.
        """
        for index, step in enumerate(steps, start=1):
            self.logs.append(f"Step {index}: {step.action}")
            try:
                await self.dispatch(step)
            except Exception as e:
                raise FlowStepError(index, step.action, str(e)) from e


class FlowExecutor:
    """Executes flows inside a fresh authenticated session per run."""

    def __init__(self, browser: AuthenticatedBrowser) -> None:
        self.browser = browser

    async def run(self, steps: Sequence[FlowStep], options: BrowserOptions) -> FlowResult:
        """Execute steps and report the outcome.

        Step failures are reported through the result, never raised. Failing
        to open a session raises ``BrowserUnavailableError``.
        """
        async with self.browser.session(options) as session:
            run = _FlowRun(self.browser, session.page)
            try:
                await run.execute(steps)
            except FlowStepError as e:
                logger.opt(exception=e.__cause__).error(f"User flow failed at {e}")
                run.logs.append(f"Error: {e.detail}")
                return FlowResult(success=False, screenshots=run.screenshots, logs=run.logs)

            run.logs.append(f"Flow completed: {len(steps)} steps")
            return FlowResult(success=True, screenshots=run.screenshots, logs=run.logs)
