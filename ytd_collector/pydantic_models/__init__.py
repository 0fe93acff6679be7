"""Pydantic models for the collector.

Modules:
- records: SourceResult (adapter output) and SourceRecord (store entry)
"""

from ytd_collector.pydantic_models.records import SourceRecord, SourceResult, source_key

__all__ = [
    "SourceRecord",
    "SourceResult",
    "source_key",
]
