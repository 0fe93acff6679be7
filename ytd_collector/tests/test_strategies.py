"""Tests for ytd_collector.core.strategies module."""

import pytest

from ytd_collector.core.errors import NetworkError, ParseError
from ytd_collector.core.strategies import first_success


def returning(value):
    async def strategy():
        return value
    return strategy


def raising(exc):
    async def strategy():
        raise exc
    return strategy


class TestFirstSuccess:
    """Tests for first_success()."""

    @pytest.mark.asyncio
    async def test_primary_wins(self):
        fallback_called = []

        async def fallback():
            fallback_called.append(True)
            return {"ytd": 2}

        result = await first_success("X", [("primary", returning({"ytd": 1})), ("fallback", fallback)])
        assert result == {"ytd": 1}
        assert fallback_called == []

    @pytest.mark.asyncio
    async def test_parse_error_falls_through(self):
        result = await first_success("X", [
            ("table", raising(ParseError("X", "label not found"))),
            ("vision", returning({"ytd": 5})),
        ])
        assert result == {"ytd": 5}

    @pytest.mark.asyncio
    async def test_none_falls_through(self):
        result = await first_success("X", [("table", returning(None)), ("lines", returning({"ytd": 0}))])
        assert result == {"ytd": 0}

    @pytest.mark.asyncio
    async def test_all_failed_lists_reasons(self):
        with pytest.raises(ParseError) as exc_info:
            await first_success("Durham", [
                ("chart", raising(ParseError("Durham", "12 numbers expected", excerpt="84 16"))),
                ("vision", returning(None)),
            ])
        error = exc_info.value
        assert error.source == "Durham"
        assert "chart: 12 numbers expected" in error.message
        assert "vision: no match" in error.message
        assert error.excerpt == "84 16"

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        with pytest.raises(NetworkError):
            await first_success("X", [
                ("primary", raising(NetworkError("X", "refused"))),
                ("fallback", returning({"ytd": 1})),
            ])
