"""Tests for ytd_collector.core.errors module.

Tests the error handling infrastructure:
- SourceError hierarchy and message formatting
- SourceFailure records
- RunErrors accumulator
- Error categorization
"""

import asyncio

import pytest
from pydantic import ValidationError

from ytd_collector.core.errors import (
    ErrorCategory,
    HttpStatusError,
    NavigationError,
    NetworkError,
    ParseError,
    RunErrors,
    SourceError,
    SourceFailure,
    SourceTimeoutError,
    categorize,
    excerpt_of,
)
from ytd_collector.pydantic_models.records import SourceResult


# =============================================================================
# SourceError hierarchy
# =============================================================================


class TestSourceError:
    """Tests for SourceError and its subclasses."""

    def test_message_is_prefixed_with_source(self):
        error = ParseError("Detroit", "row not found")
        assert str(error) == "Detroit: row not found"

    def test_no_prefix_without_source(self):
        assert str(ParseError("", "row not found")) == "row not found"

    def test_excerpt_is_appended_and_flattened(self):
        error = ParseError("Detroit", "row not found", excerpt="Homicide  1\n4   30")
        assert str(error) == "Detroit: row not found | excerpt: Homicide 1 4 30"

    def test_http_status_error(self):
        error = HttpStatusError("Memphis", 404, "https://example.org/a.pdf")
        assert error.status == 404
        assert str(error) == "Memphis: HTTP 404 for https://example.org/a.pdf"

    @pytest.mark.parametrize("error_cls,category", [
        (NetworkError, ErrorCategory.NETWORK),
        (SourceTimeoutError, ErrorCategory.TIMEOUT),
        (ParseError, ErrorCategory.PARSE),
        (NavigationError, ErrorCategory.NAVIGATION),
    ])
    def test_categories(self, error_cls, category):
        error = error_cls("X", "boom")
        assert isinstance(error, SourceError)
        assert error.category is category


class TestExcerpt:
    """Tests for excerpt_of()."""

    def test_none_passes_through(self):
        assert excerpt_of(None) is None

    def test_truncates(self):
        assert excerpt_of("a" * 50, limit=10) == "a" * 10 + "..."


class TestCategorize:
    """Tests for categorize()."""

    def test_source_errors_use_their_category(self):
        assert categorize(NavigationError("X", "no button")) is ErrorCategory.NAVIGATION

    def test_builtin_timeout(self):
        assert categorize(asyncio.TimeoutError()) is ErrorCategory.TIMEOUT

    def test_invalid_result_is_parse(self):
        with pytest.raises(ValidationError) as exc_info:
            SourceResult(ytd=-1)
        assert categorize(exc_info.value) is ErrorCategory.PARSE

    def test_anything_else_is_unknown(self):
        assert categorize(KeyError("ytd")) is ErrorCategory.UNKNOWN


# =============================================================================
# RunErrors
# =============================================================================


class TestRunErrors:
    """Tests for RunErrors accumulator."""

    def test_empty(self):
        errors = RunErrors()
        assert errors.failure_count == 0
        assert errors.summary()["total_failures"] == 0

    def test_summary_groups_by_category(self):
        errors = RunErrors()
        errors.add(SourceFailure("Detroit", ErrorCategory.PARSE, "Detroit: row not found"))
        errors.add(SourceFailure("Durham", ErrorCategory.PARSE, "Durham: no chart"))
        errors.add(SourceFailure("Slow", ErrorCategory.TIMEOUT, "Slow timed out", timed_out=True))
        errors.warn("Milwaukee: approximation")

        summary = errors.summary()
        assert summary["total_failures"] == 3
        assert summary["total_warnings"] == 1
        assert summary["failures_by_category"] == {"parse": 2, "timeout": 1}
        assert errors.failed_sources == ["Detroit", "Durham", "Slow"]

    def test_failure_str_and_dict(self):
        failure = SourceFailure("Slow", ErrorCategory.TIMEOUT, "Slow timed out", timed_out=True)
        assert str(failure) == "[TIMEOUT] Slow: Slow timed out"
        assert failure.to_dict()["category"] == "timeout"
        assert failure.to_dict()["timed_out"] is True

    def test_to_dict(self):
        errors = RunErrors()
        errors.warn("w")
        data = errors.to_dict()
        assert data["failures"] == []
        assert data["warnings"] == ["w"]
