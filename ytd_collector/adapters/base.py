"""Adapter contract and shared collaborators.

An adapter is ``async def adapter(ctx: AdapterContext) -> SourceResult``. It
closes over its publisher's URL and layout, receives every side-effecting
collaborator through the context, and either returns a result or raises a
SourceError whose message starts with its display name.
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from typing import Any

from ytd_collector.core.browser import open_page as open_browser_page
from ytd_collector.core.clock import Clock, SystemClock
from ytd_collector.core.fetcher import FetchResponse, fetch as http_fetch, require_ok
from ytd_collector.core.reply_grammar import parse_reply
from ytd_collector.core.vision_client import VisionClient
from ytd_collector.pydantic_models.records import SourceResult, source_key

Fetch = Callable[..., Awaitable[FetchResponse]]
PageFactory = Callable[[str], AbstractAsyncContextManager[Any]]
Adapter = Callable[["AdapterContext"], Awaitable[SourceResult]]


@dataclass(frozen=True)
class AdapterContext:
    """Collaborators injected into every adapter.

    Attributes:
        clock: As-of clock for all date math.
        fetch: ``await fetch(url, timeout, source=...)`` -> FetchResponse.
        vision: Object with ``await ask(image, media_type, prompt, source=...)``.
        open_page: ``async with open_page(source) as page`` browser session factory.
        logger: Logger adapters report progress and fallbacks to.
    """

    clock: Clock = field(default_factory=SystemClock)
    fetch: Fetch = http_fetch
    vision: Any = field(default_factory=VisionClient)
    open_page: PageFactory = open_browser_page
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("ytd_collector.adapters"))

    async def get(self, url: str, source: str, timeout: float | None = None) -> FetchResponse:
        """Fetch ``url`` and require a 200."""
        if timeout is None:
            response = await self.fetch(url, source=source)
        else:
            response = await self.fetch(url, timeout, source=source)
        return require_ok(response, source)

    async def ask_values(
        self,
        image: bytes,
        prompt: str,
        keys: list[str],
        source: str,
        media_type: str = "image/png",
    ) -> dict[str, int]:
        """Ask the oracle about one image and parse the KEY=N reply."""
        reply = await self.vision.ask(image, media_type, prompt, source=source)
        return parse_reply(reply, keys, source=source)


@dataclass(frozen=True)
class SourceSpec:
    """One orchestrated source: display name, adapter, and time budget."""

    name: str
    adapter: Adapter
    timeout_seconds: float

    @property
    def key(self) -> str:
        return source_key(self.name)
