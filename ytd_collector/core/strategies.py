"""Primary -> fallback strategy chains for adapters.

Each adapter lists its extraction strategies in preference order. A strategy
either returns a value, returns None ("nothing here"), or raises ParseError
("found the document but could not read it"). Anything else (network,
timeout, HTTP status) propagates immediately: a fallback parser cannot fix a
missing document.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from ytd_collector.core.errors import ParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Strategy = tuple[str, Callable[[], Awaitable[T | None]]]


async def first_success(source: str, strategies: Sequence[Strategy], log: logging.Logger | None = None) -> T:
    """Run strategies in order and return the first non-None result.

    Args:
        source: Display name of the adapter.
        strategies: (name, zero-argument coroutine function) pairs.
        log: Logger for fallback notices; defaults to this module's logger.

    Raises:
        ParseError: If every strategy returned None or raised ParseError. The
            message lists each strategy's reason.
    """
    log = log or logger
    reasons: list[str] = []
    excerpt: str | None = None

    for name, strategy in strategies:
        try:
            result = await strategy()
        except ParseError as exc:
            reasons.append(f"{name}: {exc.message}")
            excerpt = excerpt or exc.excerpt
            log.info(f"{source}: {name} strategy failed ({exc.message}), trying next")
            continue

        if result is not None:
            if reasons:
                log.info(f"{source}: resolved by fallback strategy '{name}'")
            return result
        reasons.append(f"{name}: no match")
        log.info(f"{source}: {name} strategy found nothing, trying next")

    raise ParseError(source, "all strategies failed: " + "; ".join(reasons), excerpt=excerpt)
