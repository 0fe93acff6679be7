"""Tests for the ytd-collect command line and run logging."""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from ytd_collector import cli
from ytd_collector.core.llm_router import _build_model_list
from ytd_collector.core.run_logger import RunLogger, _format_data, get_logger, reset_logger


# =============================================================================
# CLI
# =============================================================================


class TestMain:
    """Tests for cli.main()."""

    def test_passes_arguments(self):
        argv = ["ytd-collect", "--store", "out.json", "--only", "detroit", "--only", "durham", "-v"]
        with patch.object(cli, "collect", new=AsyncMock()) as collect, patch("sys.argv", argv):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 0
        collect.assert_awaited_once_with(
            store_path="out.json",
            only=["detroit", "durham"],
            history_path=None,
            verbose=True,
            log_dir=None,
        )

    def test_failure_exits_nonzero(self, capsys):
        failing = AsyncMock(side_effect=ValueError("Unknown source key(s): oakland"))
        with patch.object(cli, "collect", new=failing), patch("sys.argv", ["ytd-collect", "--only", "oakland"]):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 1
        assert "Run failed: ValueError: Unknown source key(s): oakland" in capsys.readouterr().err


class TestCollect:
    """Tests for cli.collect()."""

    @pytest.mark.asyncio
    async def test_unknown_source_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown source"):
            await cli.collect(store_path=str(tmp_path / "store.json"), only=["oakland"])

    @pytest.mark.asyncio
    async def test_runs_orchestrator(self, tmp_path):
        with patch("ytd_collector.orchestrator.Orchestrator.run", new=AsyncMock(return_value="report")) as run:
            report = await cli.collect(store_path=str(tmp_path / "store.json"), only=["detroit"])
        assert report == "report"
        run.assert_awaited_once()


# =============================================================================
# Router and run logger
# =============================================================================


class TestRouterConfig:
    """Tests for the vision router deployment list."""

    def test_key_comes_from_environment(self):
        params = _build_model_list()[0]["litellm_params"]
        assert params["api_key"] == "os.environ/ANTHROPIC_API_KEY"
        assert params["model"].startswith("anthropic/")


class TestRunLogger:
    """Tests for RunLogger."""

    def test_global_logger_is_shared(self):
        assert get_logger() is get_logger()
        first = get_logger()
        reset_logger()
        assert get_logger() is not first

    def test_file_logging(self, tmp_path):
        run_logger = RunLogger(name="ytd_collector.test_file", log_dir=tmp_path)
        run_logger.start_run(2, "store.json")
        run_logger.source_result("Detroit", {"ok": True, "ytd": 120, "prior": 145, "asof": "2026-02-19"}, 1.5)
        run_logger.source_result("Memphis", {"ok": False, "error": "Memphis: HTTP 404 for u"})
        run_logger.end_run(stats={"sources": 2, "failures": {"http_status": 1}})
        for handler in run_logger.logger.handlers:
            handler.flush()

        text = run_logger.log_file.read_text(encoding="utf-8")
        assert "[1/2] Detroit ok ytd=120 prior=145 asof=2026-02-19 (1.5s)" in text
        assert "[2/2] Memphis FAILED: Memphis: HTTP 404 for u" in text
        assert "http_status: 1" in text

        for handler in run_logger.logger.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                handler.close()
                run_logger.logger.removeHandler(handler)

    def test_format_data_truncates(self):
        assert _format_data({"reply": "x" * 60, "items": list(range(9))}) == f"reply={'x' * 47}..., items=[9 items]"
