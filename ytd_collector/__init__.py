"""Year-to-date shooting count collector.

Pulls one year-to-date figure (with the prior-year comparison and the
publisher's as-of date) from each of a set of police department publications
(PDF reports, HTML tables, dashboards) and merges them into one JSON store.

Architecture:
    core/             - fetcher, PDF reader, tokenizer, parsing, vision, browser, store
    adapters/         - one module per publisher
    prompts/          - vision oracle prompt templates
    pydantic_models/  - SourceResult and SourceRecord
    orchestrator.py   - concurrent, fault-isolated run + store merge

Usage:
    from ytd_collector import Orchestrator, SOURCES

    report = await Orchestrator(SOURCES, store_path="data/manual-auto.json").run()

CLI:
    ytd-collect --only detroit
"""

from ytd_collector.adapters import SOURCES, AdapterContext, SourceSpec
from ytd_collector.orchestrator import Orchestrator, RunReport, SlotState
from ytd_collector.pydantic_models import SourceRecord, SourceResult, source_key

__all__ = [
    "AdapterContext",
    "Orchestrator",
    "RunReport",
    "SOURCES",
    "SlotState",
    "SourceRecord",
    "SourceResult",
    "SourceSpec",
    "source_key",
]
