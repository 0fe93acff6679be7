"""Headless browser sessions and a declarative step interpreter.

Dashboard adapters describe their navigation as a list of Steps instead of
inline try/except blocks:

    steps = [
        goto(SourceUrls.CLEVELAND_DASHBOARD),
        click_text("Accept", on_failure=OnFailure.CONTINUE),
        click_text("Persons Shot"),
        wait(BrowserConfig.SETTLE_MS),
    ]
    await run_steps(page, steps, source="Cleveland")

A failed step becomes a NavigationError. CONTINUE steps (cookie banners,
optional tabs) are logged and skipped; ABORT steps end the adapter.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ytd_collector.core.config import BrowserConfig
from ytd_collector.core.errors import NavigationError

logger = logging.getLogger(__name__)

Action = Callable[[Any], Awaitable[Any]]


class OnFailure(Enum):
    """What the interpreter does when a step fails."""
    CONTINUE = "continue"
    ABORT = "abort"


@dataclass(frozen=True)
class Step:
    """One browser action with its own timeout and failure policy."""

    name: str
    action: Action
    on_failure: OnFailure = OnFailure.ABORT
    timeout_seconds: float = BrowserConfig.STEP_TIMEOUT_SECONDS


@dataclass
class StepOutcome:
    """Result of one executed step."""

    step: str
    ok: bool
    error: str | None = None


@dataclass
class StepLog:
    """Everything run_steps did, in order."""

    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def skipped(self) -> list[StepOutcome]:
        return [o for o in self.outcomes if not o.ok]


async def run_steps(
    page: Any,
    steps: Sequence[Step],
    source: str,
    log: logging.Logger | None = None,
) -> StepLog:
    """Execute steps in order against ``page``.

    Each step is bounded by its own timeout. A step that raises or times out
    becomes a NavigationError: logged and skipped under CONTINUE, raised
    under ABORT.

    Returns:
        StepLog of every step attempted.

    Raises:
        NavigationError: On the first failing ABORT step.
    """
    log = log or logger
    step_log = StepLog()

    for step in steps:
        try:
            await asyncio.wait_for(step.action(page), timeout=step.timeout_seconds)
        except asyncio.TimeoutError as exc:
            error = NavigationError(source, f"step '{step.name}' timed out after {step.timeout_seconds:g}s")
            error.__cause__ = exc
        except NavigationError as exc:
            error = exc
        except Exception as exc:
            error = NavigationError(source, f"step '{step.name}' failed: {type(exc).__name__}: {exc}")
            error.__cause__ = exc
        else:
            step_log.outcomes.append(StepOutcome(step=step.name, ok=True))
            log.debug(f"{source}: step '{step.name}' ok")
            continue

        step_log.outcomes.append(StepOutcome(step=step.name, ok=False, error=error.message))
        if step.on_failure is OnFailure.ABORT:
            raise error
        log.warning(f"{source}: skipping step '{step.name}': {error.message}")

    return step_log


# =============================================================================
# Step builders
# =============================================================================


def goto(url: str, on_failure: OnFailure = OnFailure.ABORT,
         timeout_seconds: float = BrowserConfig.NAVIGATION_TIMEOUT_MS / 1000) -> Step:
    async def action(page):
        await page.goto(url, wait_until="networkidle", timeout=BrowserConfig.NAVIGATION_TIMEOUT_MS)

    return Step(f"goto {url}", action, on_failure, timeout_seconds)


def click(selector: str, on_failure: OnFailure = OnFailure.ABORT,
          timeout_seconds: float = BrowserConfig.STEP_TIMEOUT_SECONDS) -> Step:
    async def action(page):
        await page.click(selector)

    return Step(f"click {selector}", action, on_failure, timeout_seconds)


def click_text(text: str, on_failure: OnFailure = OnFailure.ABORT,
               timeout_seconds: float = BrowserConfig.STEP_TIMEOUT_SECONDS) -> Step:
    """Click the first element whose visible text contains ``text``."""
    async def action(page):
        await page.get_by_text(text, exact=False).first.click()

    return Step(f"click text '{text}'", action, on_failure, timeout_seconds)


def wait_for(selector: str, on_failure: OnFailure = OnFailure.ABORT,
             timeout_seconds: float = BrowserConfig.STEP_TIMEOUT_SECONDS) -> Step:
    async def action(page):
        await page.wait_for_selector(selector)

    return Step(f"wait for {selector}", action, on_failure, timeout_seconds)


def wait(ms: int = BrowserConfig.SETTLE_MS) -> Step:
    """Fixed pause so client-side widgets finish rendering."""
    async def action(page):
        await page.wait_for_timeout(ms)

    return Step(f"wait {ms}ms", action, OnFailure.CONTINUE, ms / 1000 + BrowserConfig.STEP_TIMEOUT_SECONDS)


def select_option(selector: str, value: str, on_failure: OnFailure = OnFailure.ABORT,
                  timeout_seconds: float = BrowserConfig.STEP_TIMEOUT_SECONDS) -> Step:
    async def action(page):
        await page.select_option(selector, value)

    return Step(f"select {value} in {selector}", action, on_failure, timeout_seconds)


# =============================================================================
# Page helpers
# =============================================================================


async def page_text(page: Any) -> str:
    """Visible text of the whole page."""
    return await page.inner_text("body")


async def screenshot(page: Any) -> bytes:
    """Full-page PNG screenshot for the vision oracle."""
    return await page.screenshot(full_page=True, type="png")


# =============================================================================
# Sessions
# =============================================================================


async def _close_quietly(closable: Any, source: str):
    if closable is None:
        return
    try:
        await closable.close()
    except Exception as exc:
        logger.warning(f"{source or 'browser'}: error closing {type(closable).__name__}: {exc}")


@asynccontextmanager
async def open_page(source: str = "") -> AsyncIterator[Any]:
    """Launch a private headless Chromium session and yield one page.

    Every adapter owns its own session. Browser, context, and page are
    closed on exit whatever happened inside; close failures are logged.
    """
    from playwright.async_api import async_playwright

    async with async_playwright() as pw:
        browser = context = page = None
        try:
            browser = await pw.chromium.launch(
                headless=BrowserConfig.HEADLESS,
                args=["--no-sandbox", "--disable-dev-shm-usage"],
            )
            context = await browser.new_context(
                accept_downloads=True,
                viewport=BrowserConfig.VIEWPORT,
                locale="en-US",
            )
            context.set_default_timeout(BrowserConfig.NAVIGATION_TIMEOUT_MS)
            page = await context.new_page()
            yield page
        finally:
            for closable in (page, context, browser):
                await _close_quietly(closable, source)
