"""Pydantic models for per-source results and persisted records.

- SourceResult: what an adapter returns (ytd, prior, asof + provenance extras)
- SourceRecord: what the store holds per key (a result or an error, stamped
  with the run's fetchedAt)
"""

import re
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def source_key(name: str) -> str:
    """Store key for a display name: lower-case letters only.

    >>> source_key("St. Louis")
    'stlouis'
    >>> source_key("Kansas City")
    'kansascity'
    """
    return re.sub(r"[^a-z]", "", name.lower())


class SourceResult(BaseModel):
    """One publisher's year-to-date figures.

    Extra keyword fields (adid, sourceUrl, approximation, ...) are accepted
    and persisted next to the core fields.
    """

    model_config = ConfigDict(extra="allow")

    ytd: int = Field(ge=0, description="Current-year cumulative count through asof")
    prior: int | None = Field(
        default=None,
        ge=0,
        description="Same-period count for the previous year; None when not published",
    )
    asof: date | None = Field(
        default=None,
        description="Cutoff date stated by the publisher; None when not discoverable",
    )

    def to_store(self) -> dict[str, Any]:
        """JSON-ready fields, dates as YYYY-MM-DD."""
        return self.model_dump(mode="json")


class SourceRecord(BaseModel):
    """One store entry.

    ``ok=True`` records carry the result fields; ``ok=False`` records carry
    ``error``. Both carry the run's ``fetchedAt``.
    """

    model_config = ConfigDict(extra="allow")

    ok: bool
    fetchedAt: str
    error: str | None = None

    @classmethod
    def success(cls, result: SourceResult, fetched_at: str) -> "SourceRecord":
        return cls(ok=True, fetchedAt=fetched_at, **result.to_store())

    @classmethod
    def failure(cls, error: str, fetched_at: str) -> "SourceRecord":
        return cls(ok=False, error=error, fetchedAt=fetched_at)

    def to_store(self) -> dict[str, Any]:
        """Store dict. Result fields come first on success, as previously persisted."""
        if not self.ok:
            return {"ok": False, "error": self.error, "fetchedAt": self.fetchedAt}
        fields = {
            k: v for k, v in self.model_dump(mode="json").items()
            if k not in ("ok", "fetchedAt", "error")
        }
        return {**fields, "fetchedAt": self.fetchedAt, "ok": True}
