"""Persisted store: one JSON document keyed by source.

The store is read once per run and written once per run. Keys the run did
not produce (manual entries, sources filtered out with --only) are copied
forward as raw dicts so they survive the rewrite unchanged.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from ytd_collector.core.config import StoreConfig

logger = logging.getLogger(__name__)

Store = dict[str, dict[str, Any]]


def load_store(path: str | Path) -> Store:
    """Read the baseline store.

    A missing file is an empty store. An unreadable or non-object file is
    also treated as empty, with a warning, so one corrupt write cannot stop
    every later run.
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No existing store at {path}, starting empty")
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(f"Could not read store {path}: {exc}; starting empty")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Store {path} is not a JSON object; starting empty")
        return {}
    return data


def merge_store(
    baseline: Mapping[str, dict[str, Any]],
    fresh: Mapping[str, dict[str, Any]],
    manual_keys: Iterable[str] = StoreConfig.MANUAL_SOURCES,
    fetched_at: str | None = None,
) -> Store:
    """Merge this run's records over the baseline.

    - Keys in ``fresh`` replace the baseline entry wholesale.
    - Baseline keys absent from ``fresh`` are kept as-is.
    - Manual keys missing from both get a placeholder failure record.

    The baseline is never mutated.
    """
    merged: Store = dict(baseline)
    merged.update(fresh)
    for key in manual_keys:
        if key not in merged:
            placeholder: dict[str, Any] = {"ok": False, "error": StoreConfig.MANUAL_PLACEHOLDER_ERROR}
            if fetched_at is not None:
                placeholder["fetchedAt"] = fetched_at
            merged[key] = placeholder
    return merged


def write_store_atomic(path: str | Path, store: Mapping[str, Any]):
    """Write the store via a temp file in the same directory and os.replace.

    Readers see either the previous document or the new one, never a
    partial write.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(store, indent=StoreConfig.INDENT, ensure_ascii=False)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.debug(f"Wrote {len(store)} keys to {path}")


def append_history(path: str | Path, records: Mapping[str, dict[str, Any]]):
    """Append this run's fresh records to a JSON-lines history log.

    One line per source: {"source": key, **record}. Lines are keyed by
    (source, fetchedAt), so re-running never rewrites earlier entries.
    """
    if not records:
        return
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        for key, record in records.items():
            handle.write(json.dumps({"source": key, **record}, ensure_ascii=False) + "\n")
    logger.debug(f"Appended {len(records)} records to history {path}")
