"""Per-publisher source adapters and the default source list.

Each adapter is ``async def fetch_<key>(ctx: AdapterContext) -> SourceResult``.
SOURCES pairs each with its display name and time budget; the orchestrator
derives store keys from the display names.
"""

from ytd_collector.adapters.base import Adapter, AdapterContext, SourceSpec
from ytd_collector.adapters.baltimore import fetch_baltimore
from ytd_collector.adapters.cleveland import fetch_cleveland
from ytd_collector.adapters.detroit import fetch_detroit
from ytd_collector.adapters.durham import fetch_durham
from ytd_collector.adapters.kansascity import fetch_kansascity
from ytd_collector.adapters.memphis import fetch_memphis
from ytd_collector.adapters.milwaukee import fetch_milwaukee
from ytd_collector.adapters.stlouis import fetch_stlouis
from ytd_collector.adapters.wilmington import fetch_wilmington
from ytd_collector.core.config import SourceTimeouts

SOURCES: tuple[SourceSpec, ...] = (
    SourceSpec("Detroit", fetch_detroit, SourceTimeouts.PDF),
    SourceSpec("Durham", fetch_durham, SourceTimeouts.VISION_PDF),
    SourceSpec("Wilmington", fetch_wilmington, SourceTimeouts.PDF),
    SourceSpec("Kansas City", fetch_kansascity, SourceTimeouts.HTML),
    SourceSpec("Memphis", fetch_memphis, SourceTimeouts.VISION_PDF),
    SourceSpec("Baltimore", fetch_baltimore, SourceTimeouts.BROWSER),
    SourceSpec("Cleveland", fetch_cleveland, SourceTimeouts.BROWSER),
    SourceSpec("St. Louis", fetch_stlouis, SourceTimeouts.BROWSER),
    SourceSpec("Milwaukee", fetch_milwaukee, SourceTimeouts.BROWSER),
)


def select_sources(keys: list[str] | None = None) -> tuple[SourceSpec, ...]:
    """SOURCES filtered to ``keys`` (all when empty).

    Raises:
        ValueError: If a key names no known source.
    """
    if not keys:
        return SOURCES
    known = {spec.key: spec for spec in SOURCES}
    unknown = [k for k in keys if k not in known]
    if unknown:
        raise ValueError(f"Unknown source key(s): {', '.join(unknown)}. Known: {', '.join(known)}")
    return tuple(spec for spec in SOURCES if spec.key in keys)


__all__ = [
    "Adapter",
    "AdapterContext",
    "SOURCES",
    "SourceSpec",
    "select_sources",
]
