"""Pytest configuration and shared fixtures.

Provides reusable test fixtures for:
- A fixed as-of clock
- In-memory PDFs built with PyMuPDF
- A fake document fetcher
- A mock vision oracle
- A fake browser page, downloads, and session factory
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import fitz
import pytest

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.clock import FixedClock
from ytd_collector.core.errors import SourceTimeoutError
from ytd_collector.core.fetcher import FetchResponse
from ytd_collector.core.run_logger import reset_logger


# =============================================================================
# Clock
# =============================================================================

# Saturday; the most recent Thursday is 2026-02-19.
FIXED_INSTANT = datetime(2026, 2, 21, 15, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return FixedClock(FIXED_INSTANT)


# =============================================================================
# PDFs
# =============================================================================


def build_pdf(*pages: list[str], line_height: float = 18.0) -> bytes:
    """Build a PDF where each page is a list of text lines, top to bottom."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page(width=612, height=792)
        y = 72.0
        for line in lines:
            page.insert_text((72, y), line, fontsize=10)
            y += line_height
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf():
    """Factory: make_pdf(["line 1", "line 2"], [...page 2]) -> PDF bytes."""
    return build_pdf


# =============================================================================
# Fetcher
# =============================================================================


class FakeFetcher:
    """Async stand-in for core.fetcher.fetch.

    Routes map a URL to bytes (served as 200), a FetchResponse, or an
    exception to raise. Unknown URLs answer 404.
    """

    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []

    async def __call__(self, url: str, timeout: float | None = None, *, source: str = "") -> FetchResponse:
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FetchResponse(status=404, body=b"not found", url=url)
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, FetchResponse):
            return route
        if isinstance(route, str):
            route = route.encode("utf-8")
        return FetchResponse(status=200, body=route, url=url)


@pytest.fixture
def fake_fetch():
    return FakeFetcher()


# =============================================================================
# Vision
# =============================================================================


@pytest.fixture
def mock_vision():
    """Vision client whose ask() returns a configurable reply."""
    vision = MagicMock()
    vision.ask = AsyncMock(return_value="")
    return vision


# =============================================================================
# Browser
# =============================================================================


class FakeLocator:
    def __init__(self, page: "FakePage", text: str):
        self.page = page
        self.text = text

    @property
    def first(self):
        return self

    async def click(self):
        self.page.actions.append(("click_text", self.text))
        if self.text in self.page.fail_texts:
            raise RuntimeError(f"no element with text '{self.text}'")
        if self.text == self.page.download_trigger and self.page._pending_download is not None:
            self.page._pending_download.triggered = True


class FakeDownload:
    def __init__(self, path: Path, suggested_filename: str):
        self._path = path
        self.suggested_filename = suggested_filename

    async def path(self):
        return self._path


class FakeDownloadInfo:
    def __init__(self, download: FakeDownload | None):
        self._download = download
        self.triggered = False

    @property
    def value(self):
        return self._value()

    async def _value(self):
        if self._download is None or not self.triggered:
            raise SourceTimeoutError("", "download not started")
        return self._download


class FakePage:
    """Enough of playwright's async Page for the dashboard adapters."""

    def __init__(
        self,
        text: str = "",
        screenshot_bytes: bytes = b"\x89PNG\r\n\x1a\nfake",
        fail_texts: tuple[str, ...] = (),
        download: FakeDownload | None = None,
        download_trigger: str = "Export",
    ):
        self.text = text
        self.screenshot_bytes = screenshot_bytes
        self.fail_texts = set(fail_texts)
        self.download = download
        self.download_trigger = download_trigger
        self.actions: list[tuple] = []
        self._pending_download: FakeDownloadInfo | None = None

    async def goto(self, url, **kwargs):
        self.actions.append(("goto", url))

    async def click(self, selector):
        self.actions.append(("click", selector))

    def get_by_text(self, text, exact=False):
        return FakeLocator(self, text)

    async def wait_for_timeout(self, ms):
        self.actions.append(("wait", ms))

    async def wait_for_selector(self, selector):
        self.actions.append(("wait_for", selector))

    async def select_option(self, selector, value):
        self.actions.append(("select", selector, value))

    async def inner_text(self, selector):
        return self.text

    async def screenshot(self, **kwargs):
        self.actions.append(("screenshot",))
        return self.screenshot_bytes

    @asynccontextmanager
    async def expect_download(self, **kwargs):
        info = FakeDownloadInfo(self.download)
        self._pending_download = info
        try:
            yield info
        finally:
            self._pending_download = None


def page_factory(page: FakePage):
    """Session factory with the signature of core.browser.open_page."""
    opened: list[str] = []

    @asynccontextmanager
    async def open_page(source: str = ""):
        opened.append(source)
        yield page

    open_page.opened = opened
    return open_page


# =============================================================================
# Adapter context
# =============================================================================


@pytest.fixture
def make_context(fixed_clock, fake_fetch, mock_vision):
    """Factory for AdapterContext wired to the fakes above."""
    def _make(page: FakePage | None = None, **overrides) -> AdapterContext:
        fields = dict(
            clock=fixed_clock,
            fetch=fake_fetch,
            vision=mock_vision,
            open_page=page_factory(page or FakePage()),
            logger=logging.getLogger("ytd_collector.tests"),
        )
        fields.update(overrides)
        return AdapterContext(**fields)

    return _make


@pytest.fixture(autouse=True)
def _reset_run_logger():
    yield
    reset_logger()


@pytest.fixture
def make_page():
    """Factory: make_page(text=..., fail_texts=(...), download=...) -> FakePage."""
    return FakePage


@pytest.fixture
def make_download():
    """Factory: make_download(path, suggested_filename) -> FakeDownload."""
    return FakeDownload
