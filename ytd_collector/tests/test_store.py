"""Tests for ytd_collector.core.store and the record models."""

import json
from datetime import date

import pytest
from pydantic import ValidationError

from ytd_collector.core.store import append_history, load_store, merge_store, write_store_atomic
from ytd_collector.pydantic_models import SourceRecord, SourceResult, source_key


FETCHED_AT = "2026-02-21T15:30:00.000Z"

OAKLAND = {"ytd": 40, "prior": 52, "asof": "2026-02-15", "note": "entered by hand", "ok": True}


# =============================================================================
# Records
# =============================================================================


class TestSourceKey:
    """Tests for source_key()."""

    @pytest.mark.parametrize("name,key", [
        ("Detroit", "detroit"),
        ("St. Louis", "stlouis"),
        ("Kansas City", "kansascity"),
    ])
    def test_keys(self, name, key):
        assert source_key(name) == key


class TestSourceResult:
    """Tests for SourceResult."""

    def test_extras_are_kept(self):
        result = SourceResult(ytd=18, prior=21, asof=date(2026, 2, 14), adid=205)
        assert result.to_store() == {"ytd": 18, "prior": 21, "asof": "2026-02-14", "adid": 205}

    def test_prior_and_asof_optional(self):
        assert SourceResult(ytd=312).to_store() == {"ytd": 312, "prior": None, "asof": None}

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            SourceResult(ytd=-1)
        with pytest.raises(ValidationError):
            SourceResult(ytd=1, prior=-1)


class TestSourceRecord:
    """Tests for SourceRecord."""

    def test_success_layout(self):
        result = SourceResult(ytd=120, prior=145, asof=date(2026, 2, 19), sourceUrl="u")
        stored = SourceRecord.success(result, FETCHED_AT).to_store()
        assert stored == {
            "ytd": 120, "prior": 145, "asof": "2026-02-19", "sourceUrl": "u",
            "fetchedAt": FETCHED_AT, "ok": True,
        }
        assert list(stored)[-2:] == ["fetchedAt", "ok"]

    def test_failure_layout(self):
        stored = SourceRecord.failure("Detroit: HTTP 404 for u", FETCHED_AT).to_store()
        assert stored == {"ok": False, "error": "Detroit: HTTP 404 for u", "fetchedAt": FETCHED_AT}
        assert list(stored) == ["ok", "error", "fetchedAt"]


# =============================================================================
# Store
# =============================================================================


class TestLoadStore:
    """Tests for load_store()."""

    def test_missing_file_is_empty(self, tmp_path):
        assert load_store(tmp_path / "nope.json") == {}

    def test_reads_object(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text(json.dumps({"oakland": OAKLAND}))
        assert load_store(path) == {"oakland": OAKLAND}

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_corrupt_file_is_empty(self, tmp_path, content):
        path = tmp_path / "store.json"
        path.write_text(content)
        assert load_store(path) == {}


class TestMergeStore:
    """Tests for merge_store()."""

    def test_fresh_replaces_and_others_survive(self):
        baseline = {"oakland": OAKLAND, "detroit": {"ok": False, "error": "old", "fetchedAt": "x"}}
        fresh = {"detroit": {"ytd": 1, "fetchedAt": FETCHED_AT, "ok": True}}
        merged = merge_store(baseline, fresh, fetched_at=FETCHED_AT)
        assert merged["oakland"] is OAKLAND
        assert merged["detroit"] == fresh["detroit"]
        assert baseline["detroit"]["error"] == "old"

    def test_missing_manual_key_gets_placeholder(self):
        merged = merge_store({}, {}, manual_keys=["oakland"], fetched_at=FETCHED_AT)
        assert merged == {"oakland": {"ok": False, "error": "No manual data yet", "fetchedAt": FETCHED_AT}}

    def test_existing_manual_key_untouched(self):
        merged = merge_store({"oakland": OAKLAND}, {}, manual_keys=["oakland"], fetched_at=FETCHED_AT)
        assert merged == {"oakland": OAKLAND}


class TestWriteStoreAtomic:
    """Tests for write_store_atomic()."""

    def test_writes_indented_json(self, tmp_path):
        path = tmp_path / "data" / "manual-auto.json"
        write_store_atomic(path, {"oakland": OAKLAND})
        text = path.read_text(encoding="utf-8")
        assert json.loads(text) == {"oakland": OAKLAND}
        assert text.startswith('{\n  "oakland"')

    def test_no_temp_files_left(self, tmp_path):
        path = tmp_path / "store.json"
        write_store_atomic(path, {"a": {"ok": True}})
        write_store_atomic(path, {"b": {"ok": True}})
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]
        assert load_store(path) == {"b": {"ok": True}}

    def test_unserializable_store_leaves_previous_file(self, tmp_path):
        path = tmp_path / "store.json"
        write_store_atomic(path, {"a": {"ok": True}})
        with pytest.raises(TypeError):
            write_store_atomic(path, {"a": {"when": object()}})
        assert load_store(path) == {"a": {"ok": True}}
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]


class TestAppendHistory:
    """Tests for append_history()."""

    def test_appends_one_line_per_source(self, tmp_path):
        path = tmp_path / "history.jsonl"
        append_history(path, {"detroit": {"ytd": 1, "fetchedAt": "t1", "ok": True}})
        append_history(path, {"detroit": {"ytd": 2, "fetchedAt": "t2", "ok": True}})
        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert lines == [
            {"source": "detroit", "ytd": 1, "fetchedAt": "t1", "ok": True},
            {"source": "detroit", "ytd": 2, "fetchedAt": "t2", "ok": True},
        ]

    def test_nothing_to_append(self, tmp_path):
        path = tmp_path / "history.jsonl"
        append_history(path, {})
        assert not path.exists()
