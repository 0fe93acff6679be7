"""Grammar for vision oracle replies.

Every vision prompt asks for ``KEY=INTEGER`` pairs and nothing else. The
oracle does not always comply, so the reply is scanned rather than parsed:

    "Sure! Here are the values: 2024=10 2025=20 2026=30"  ->  {"2024": 10, "2025": 20, "2026": 30}

Rules:
- A key must be tag-anchored: the character before it is not alphanumeric,
  so "12025=4" never satisfies key "2025".
- ``=`` or ``:`` separates key and value, with optional whitespace.
- Values strip thousands separators. Decimals and percentages are rejected.
- The first numeric occurrence of a key wins; echoed placeholders such as
  "2025=N" are skipped.
"""

import re
from collections.abc import Iterable

from ytd_collector.core.errors import ParseError


def _key_pattern(key: str) -> re.Pattern:
    return re.compile(
        rf"(?<![A-Za-z0-9_]){re.escape(key)}\s*[=:]\s*(-?\d[\d,]*)(?![\d%]|[.,]\d)",
        re.IGNORECASE,
    )


def find_value(reply: str, key: str) -> int | None:
    """First integer bound to ``key`` in ``reply``, or None."""
    for match in _key_pattern(key).finditer(reply):
        raw = match.group(1).rstrip(",")
        digits = raw.replace(",", "")
        if digits.lstrip("-").isdigit():
            return int(digits)
    return None


def parse_reply(reply: str, keys: Iterable[str], source: str = "") -> dict[str, int]:
    """Extract every requested key from an oracle reply.

    Args:
        reply: Free text returned by the oracle.
        keys: Keys the prompt asked for (e.g. years, or "FATAL").
        source: Display name of the calling adapter.

    Returns:
        Mapping of each key to its integer value.

    Raises:
        ParseError: If any key is missing; the reply is attached as excerpt.
    """
    keys = list(keys)
    values: dict[str, int] = {}
    for key in keys:
        value = find_value(reply, key)
        if value is not None:
            values[key] = value

    missing = [k for k in keys if k not in values]
    if missing:
        raise ParseError(
            source,
            f"vision reply missing {', '.join(missing)}",
            excerpt=reply,
        )
    return values
