"""Run orchestrator: every source adapter concurrently, one store write.

Each source gets a slot that moves through

    PENDING -> RESOLVED | TIMED_OUT | ERRORED -> RECORDED

Adapters run as independent tasks on one event loop. Each is awaited for at
most its own budget; a source that overruns is recorded as timed out and its
task is abandoned (left to finish or fail on its own), never cancelled, so
it cannot delay or break the others. Only after every slot has settled is the
baseline store merged and written, exactly once.
"""

import asyncio
import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ytd_collector.adapters.base import AdapterContext, SourceSpec
from ytd_collector.core.clock import run_timestamp
from ytd_collector.core.config import StoreConfig
from ytd_collector.core.errors import ErrorCategory, RunErrors, SourceFailure, categorize
from ytd_collector.core.run_logger import RunLogger, get_logger
from ytd_collector.core.store import append_history, load_store, merge_store, write_store_atomic
from ytd_collector.pydantic_models.records import SourceRecord, SourceResult

logger = logging.getLogger(__name__)


class SlotState(Enum):
    """Lifecycle of one source within a run."""
    PENDING = "pending"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"
    RECORDED = "recorded"


@dataclass
class Slot:
    """One source's progress through a run."""

    spec: SourceSpec
    state: SlotState = SlotState.PENDING
    outcome: SlotState | None = None  # RESOLVED / TIMED_OUT / ERRORED, kept after RECORDED
    record: dict[str, Any] | None = None
    elapsed: float | None = None

    def settle(self, outcome: SlotState, record: dict[str, Any], elapsed: float):
        if self.state is not SlotState.PENDING:
            raise RuntimeError(f"{self.spec.name} settled twice ({self.state.value} -> {outcome.value})")
        self.state = self.outcome = outcome
        self.record = record
        self.elapsed = elapsed


@dataclass
class RunReport:
    """What one run produced."""

    fetched_at: str
    slots: dict[str, Slot]
    errors: RunErrors = field(default_factory=RunErrors)
    store: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def fresh(self) -> dict[str, dict[str, Any]]:
        """Records produced this run, keyed by store key."""
        return {key: slot.record for key, slot in self.slots.items() if slot.record is not None}

    def count(self, outcome: SlotState) -> int:
        return sum(1 for slot in self.slots.values() if slot.outcome is outcome)

    def stats(self) -> dict:
        return {
            "sources": len(self.slots),
            "ok": self.count(SlotState.RESOLVED),
            "errored": self.count(SlotState.ERRORED),
            "timed_out": self.count(SlotState.TIMED_OUT),
            "warnings": len(self.errors.warnings),
            "fetchedAt": self.fetched_at,
            "failures": self.errors.summary()["failures_by_category"],
        }


def failure_message(name: str, exc: BaseException) -> str:
    """Error text for a failed adapter, always naming the source."""
    text = str(exc) or type(exc).__name__
    if text.startswith(name):
        return text
    return f"{name}: {text}"


def _log_abandoned(name: str):
    """Done-callback for a timed-out task, so its late outcome is not lost."""
    def callback(task: asyncio.Task):
        if task.cancelled():
            logger.debug(f"{name}: abandoned task cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.debug(f"{name}: abandoned task failed late: {type(exc).__name__}: {exc}")
        else:
            logger.debug(f"{name}: abandoned task finished late; result discarded")
    return callback


class Orchestrator:
    """Runs a fixed list of sources and persists the merged store."""

    def __init__(
        self,
        sources: Sequence[SourceSpec],
        context: AdapterContext | None = None,
        store_path: str | Path = StoreConfig.PATH,
        manual_keys: Iterable[str] = StoreConfig.MANUAL_SOURCES,
        history_path: str | Path | None = None,
        run_logger: RunLogger | None = None,
    ):
        """Initialize the orchestrator.

        Args:
            sources: Sources to run this time. Store keys outside this list
                are carried over untouched.
            context: Collaborators handed to every adapter.
            store_path: JSON store to read as baseline and rewrite.
            manual_keys: Keys curated outside the pipeline; a placeholder is
                written if one is missing from the store.
            history_path: Optional JSON-lines file that receives every fresh
                record, appended.
            run_logger: Run-level logger (defaults to the global one).
        """
        keys = [spec.key for spec in sources]
        duplicates = {k for k in keys if keys.count(k) > 1}
        if duplicates:
            raise ValueError(f"Duplicate source keys: {sorted(duplicates)}")

        self.sources = tuple(sources)
        self.context = context or AdapterContext()
        self.store_path = Path(store_path)
        self.manual_keys = tuple(manual_keys)
        self.history_path = Path(history_path) if history_path else None
        self.run_logger = run_logger or get_logger()

    async def run(self) -> RunReport:
        """Run every source, then merge and write the store once."""
        fetched_at = run_timestamp(self.context.clock)
        baseline = load_store(self.store_path)
        report = RunReport(
            fetched_at=fetched_at,
            slots={spec.key: Slot(spec) for spec in self.sources},
        )

        self.run_logger.start_run(len(self.sources), self.store_path)
        outcomes = await asyncio.gather(
            *(self._run_slot(slot, fetched_at, report.errors) for slot in report.slots.values()),
            return_exceptions=True,
        )
        for slot, outcome in zip(report.slots.values(), outcomes):
            if isinstance(outcome, BaseException):
                # Adapter failures are recorded inside _run_slot; this is slot bookkeeping failing.
                self.run_logger.error(f"{slot.spec.name}: slot crashed", exc=outcome)
                if slot.state is SlotState.PENDING:
                    message = failure_message(slot.spec.name, outcome)
                    slot.settle(SlotState.ERRORED, SourceRecord.failure(message, fetched_at).to_store(), 0.0)
                    report.errors.add(SourceFailure(slot.spec.name, categorize(outcome), message))
            slot.state = SlotState.RECORDED

        report.store = merge_store(baseline, report.fresh, self.manual_keys, fetched_at)
        write_store_atomic(self.store_path, report.store)
        if self.history_path:
            append_history(self.history_path, report.fresh)

        self.run_logger.end_run(success=True, stats=report.stats())
        return report

    async def _run_slot(self, slot: Slot, fetched_at: str, errors: RunErrors):
        spec = slot.spec
        started = time.monotonic()
        task = asyncio.ensure_future(spec.adapter(self.context))

        done, _ = await asyncio.wait({task}, timeout=spec.timeout_seconds)
        elapsed = time.monotonic() - started

        if not done:
            task.add_done_callback(_log_abandoned(spec.name))
            message = f"{spec.name} timed out after {spec.timeout_seconds:g}s"
            errors.add(SourceFailure(spec.name, ErrorCategory.TIMEOUT, message, timed_out=True))
            slot.settle(SlotState.TIMED_OUT, SourceRecord.failure(message, fetched_at).to_store(), elapsed)
        elif task.exception() is not None:
            exc = task.exception()
            message = failure_message(spec.name, exc)
            errors.add(SourceFailure(spec.name, categorize(exc), message))
            self.run_logger.debug(f"{spec.name} failed", error=type(exc).__name__)
            slot.settle(SlotState.ERRORED, SourceRecord.failure(message, fetched_at).to_store(), elapsed)
        else:
            try:
                result = SourceResult.model_validate(task.result())
            except ValidationError as exc:
                message = failure_message(spec.name, exc)
                errors.add(SourceFailure(spec.name, ErrorCategory.PARSE, message))
                slot.settle(SlotState.ERRORED, SourceRecord.failure(message, fetched_at).to_store(), elapsed)
            else:
                slot.settle(SlotState.RESOLVED, SourceRecord.success(result, fetched_at).to_store(), elapsed)
                if slot.record.get("approximation"):
                    errors.warn(f"{spec.name}: {slot.record['approximation']}")

        self.run_logger.source_result(spec.name, slot.record, elapsed)
