"""Structured error types for the collector.

Provides typed errors for:
- Network and transport failures
- Timeouts (per request, per browser step)
- Unexpected HTTP statuses
- Parse failures (labels, fields, oracle replies)
- Browser navigation failures

Adapters raise these; the orchestrator catches them once and turns them into
failure records. RunErrors aggregates what happened during a run.
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from ytd_collector.core.config import ParseLimits


class ErrorCategory(Enum):
    """Categories of source failures."""
    NETWORK = "network"           # Connection refused, DNS, TLS
    TIMEOUT = "timeout"           # Request, step, or source budget exceeded
    HTTP_STATUS = "http_status"   # Non-200 where 200 was required
    PARSE = "parse"               # Expected label/field/reply not found
    NAVIGATION = "navigation"     # Browser could not act on a UI element
    UNKNOWN = "unknown"           # Anything an adapter did not anticipate


def excerpt_of(text: str | None, limit: int = ParseLimits.EXCERPT_CHARS) -> str | None:
    """Collapse whitespace and truncate text for error messages."""
    if text is None:
        return None
    flat = " ".join(text.split())
    if len(flat) > limit:
        return flat[:limit] + "..."
    return flat


class SourceError(Exception):
    """Base class for every failure an adapter can raise.

    The message always starts with the source's display name so a failure
    record is readable on its own.
    """

    category = ErrorCategory.UNKNOWN

    def __init__(self, source: str, message: str, excerpt: str | None = None):
        self.source = source
        self.message = message
        self.excerpt = excerpt_of(excerpt)
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"{self.source}: {self.message}" if self.source else self.message
        if self.excerpt:
            text = f"{text} | excerpt: {self.excerpt}"
        return text


class NetworkError(SourceError):
    category = ErrorCategory.NETWORK


class SourceTimeoutError(SourceError):
    category = ErrorCategory.TIMEOUT


class HttpStatusError(SourceError):
    category = ErrorCategory.HTTP_STATUS

    def __init__(self, source: str, status: int, url: str):
        self.status = status
        self.url = url
        super().__init__(source, f"HTTP {status} for {url}")


class ParseError(SourceError):
    category = ErrorCategory.PARSE


class NavigationError(SourceError):
    category = ErrorCategory.NAVIGATION


@dataclass
class SourceFailure:
    """One failed source, as recorded by the orchestrator."""

    source: str
    category: ErrorCategory
    message: str
    timed_out: bool = False

    def __str__(self) -> str:
        return f"[{self.category.value.upper()}] {self.source}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "source": self.source,
            "category": self.category.value,
            "message": self.message,
            "timed_out": self.timed_out,
        }


@dataclass
class RunErrors:
    """Aggregate failures and warnings across one run."""

    failures: list[SourceFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add(self, failure: SourceFailure):
        self.failures.append(failure)

    def warn(self, message: str):
        self.warnings.append(message)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def failed_sources(self) -> list[str]:
        return [f.source for f in self.failures]

    def summary(self) -> dict:
        """Get summary statistics."""
        by_category: dict[str, int] = {}
        for failure in self.failures:
            cat = failure.category.value
            by_category[cat] = by_category.get(cat, 0) + 1

        return {
            "total_failures": self.failure_count,
            "total_warnings": len(self.warnings),
            "failures_by_category": by_category,
        }

    def to_dict(self) -> dict:
        return {
            "failures": [f.to_dict() for f in self.failures],
            "warnings": list(self.warnings),
            "summary": self.summary(),
        }


def categorize(exc: BaseException) -> ErrorCategory:
    """Map an exception raised by an adapter to an ErrorCategory."""
    if isinstance(exc, SourceError):
        return exc.category
    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, ValidationError):
        return ErrorCategory.PARSE
    return ErrorCategory.UNKNOWN
