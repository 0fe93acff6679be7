"""Per-source accounting of vision oracle calls.

Only fallback strategies call the oracle, so every source listed here is one
whose text layer or page text did not yield its figures this run. The summary
pairs each such source with how its slot ended.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import litellm

from ytd_collector.pydantic_models.records import source_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OracleCall:
    """One oracle round trip made on behalf of a source."""

    source: str
    model: str
    prompt_tokens: int
    completion_tokens: int

    @property
    def tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def cost(self) -> float:
        """USD from litellm's price table; 0.0 for a model it does not price."""
        try:
            prompt_cost, completion_cost = litellm.cost_per_token(
                model=self.model,
                prompt_tokens=self.prompt_tokens,
                completion_tokens=self.completion_tokens,
            )
        except Exception as exc:  # litellm raises bare Exception for unmapped models
            logger.debug(f"No price for {self.model}: {exc}")
            return 0.0
        return prompt_cost + completion_cost


@dataclass
class CostTracker:
    """Oracle calls made during one run, grouped by source."""

    calls: list[OracleCall] = field(default_factory=list)

    def record(self, model: str, usage: Any, source: str = "") -> OracleCall | None:
        """Record the usage block of a litellm response. Responses without one are skipped."""
        if usage is None:
            return None
        call = OracleCall(
            source=source or "unknown",
            model=model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )
        self.calls.append(call)
        return call

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def total_tokens(self) -> int:
        return sum(call.tokens for call in self.calls)

    @property
    def total_cost(self) -> float:
        return sum(call.cost for call in self.calls)

    def by_source(self) -> dict[str, list[OracleCall]]:
        grouped: dict[str, list[OracleCall]] = {}
        for call in self.calls:
            grouped.setdefault(call.source, []).append(call)
        return grouped

    def summary(self, report=None) -> str:
        """One line per source that needed the oracle.

        With a RunReport, each line ends in the source's slot outcome
        (resolved, errored, timed_out).
        """
        lines = [
            f"Vision fallback: {self.call_count} calls, {self.total_tokens:,} tokens, ${self.total_cost:.4f}"
        ]
        for source, calls in sorted(self.by_source().items()):
            line = (
                f"  {source}: {len(calls)} calls, "
                f"{sum(c.tokens for c in calls):,} tokens, ${sum(c.cost for c in calls):.4f}"
            )
            slot = report.slots.get(source_key(source)) if report is not None else None
            if slot is not None and slot.outcome is not None:
                line += f" -> {slot.outcome.value}"
            lines.append(line)
        return "\n".join(lines)
