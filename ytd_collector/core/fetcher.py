"""Document fetcher.

A single GET with manual redirect following and a per-hop timeout. No
retries: the adapter decides whether a missing document is fatal, and a
failed source simply waits for the next scheduled run.

Usage:
    response = await fetch(url, source="Detroit")
    require_ok(response, "Detroit")
    pdf_bytes = response.body
"""

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx

from ytd_collector.core.config import FetchConfig
from ytd_collector.core.errors import HttpStatusError, NetworkError, SourceTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResponse:
    """Final response after redirects.

    Attributes:
        status: HTTP status code of the last hop.
        body: Raw response bytes.
        url: URL that produced the body (after redirects).
    """

    status: int
    body: bytes
    url: str

    @property
    def ok(self) -> bool:
        return self.status == 200

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding, errors="replace")


async def _get_once(client: httpx.AsyncClient, url: str, timeout: float, source: str) -> httpx.Response:
    try:
        return await asyncio.wait_for(client.get(url, timeout=timeout), timeout=timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise SourceTimeoutError(source, f"no response from {url} within {timeout:g}s") from exc
    except httpx.TransportError as exc:
        raise NetworkError(source, f"request to {url} failed: {type(exc).__name__}: {exc}") from exc


async def fetch(
    url: str,
    timeout: float = FetchConfig.TIMEOUT_SECONDS,
    *,
    source: str = "",
    client: httpx.AsyncClient | None = None,
) -> FetchResponse:
    """GET ``url``, following redirects up to the underlying document.

    Each redirect hop gets the full ``timeout`` budget; the total is not
    capped. Relative Location headers resolve against the hop's URL.

    Args:
        url: Absolute URL to fetch.
        timeout: Seconds to wait for each hop.
        source: Display name of the calling adapter, used in error messages.
        client: Optional shared client (tests inject one with a mock transport).

    Returns:
        FetchResponse with the final status and body. Non-200 statuses are
        returned, not raised; see require_ok().

    Raises:
        SourceTimeoutError: If a hop does not answer within ``timeout``.
        NetworkError: On connection failure or too many redirects.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            follow_redirects=False,
            headers={"User-Agent": FetchConfig.USER_AGENT},
        )

    try:
        current = url
        for _ in range(FetchConfig.MAX_REDIRECTS + 1):
            response = await _get_once(client, current, timeout, source)
            location = response.headers.get("location")
            if response.status_code in FetchConfig.REDIRECT_STATUSES and location:
                nxt = urljoin(current, location)
                logger.debug(f"{source or 'fetch'}: {response.status_code} {current} -> {nxt}")
                current = nxt
                continue
            return FetchResponse(status=response.status_code, body=response.content, url=current)
        raise NetworkError(source, f"too many redirects starting from {url}")
    finally:
        if owns_client:
            await client.aclose()


def require_ok(response: FetchResponse, source: str) -> FetchResponse:
    """Raise HttpStatusError unless the response is a 200."""
    if not response.ok:
        raise HttpStatusError(source, response.status, response.url)
    return response


async def fetch_text(
    url: str,
    timeout: float = FetchConfig.TIMEOUT_SECONDS,
    *,
    source: str = "",
    client: httpx.AsyncClient | None = None,
) -> str:
    """Fetch a page that must answer 200 and decode it as UTF-8."""
    response = require_ok(await fetch(url, timeout, source=source, client=client), source)
    return response.text()
