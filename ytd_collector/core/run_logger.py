"""Structured logging for collection runs.

Provides consistent logging with:
- Timestamps
- Per-source result lines
- Run summary block
- File output for later analysis
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class RunLogger:
    """Structured logger for a collection run."""

    def __init__(self, name: str = "ytd_collector", verbose: bool = False, log_dir: str | Path | None = None):
        """Initialize the run logger.

        Args:
            name: Logger name. Library modules log under this name's children.
            verbose: If True, show DEBUG level logs.
            log_dir: Directory for log files. If None, no file logging.
        """
        self.logger = logging.getLogger(name)
        self.verbose = verbose
        self._run_start: float = 0
        self._log_file: Path | None = None
        self._log_dir = Path(log_dir) if log_dir else None
        self._done: int = 0
        self._total: int = 0

        # Configure if not already configured
        if not self.logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(ConsoleFormatter())
            console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
            self.logger.addHandler(console_handler)

        self.logger.setLevel(logging.DEBUG)

    def set_verbose(self, verbose: bool):
        """Update verbose setting."""
        self.verbose = verbose
        for handler in self.logger.handlers:
            if isinstance(handler, logging.StreamHandler) and handler.stream == sys.stdout:
                handler.setLevel(logging.DEBUG if verbose else logging.INFO)

    def _ts(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _total_elapsed(self) -> str:
        if self._run_start:
            elapsed = time.time() - self._run_start
            mins = int(elapsed // 60)
            secs = elapsed % 60
            if mins > 0:
                return f"{mins}m {secs:.0f}s"
            return f"{secs:.1f}s"
        return ""

    @property
    def log_file(self) -> Path | None:
        return self._log_file

    def start_run(self, total_sources: int, store_path: str | Path):
        """Mark run start and set up file logging."""
        self._run_start = time.time()
        self._done = 0
        self._total = total_sources

        if self._log_dir:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self._log_file = self._log_dir / f"collect_{timestamp}.log"

            file_handler = logging.FileHandler(self._log_file, encoding="utf-8")
            file_handler.setFormatter(FileFormatter())
            file_handler.setLevel(logging.DEBUG)
            self.logger.addHandler(file_handler)

        self.logger.info(f"[{self._ts()}] Collecting {total_sources} sources -> {store_path}")

    def source_result(self, name: str, record: dict[str, Any], elapsed: float | None = None):
        """Log one source's outcome as it settles.

        Shows:   [3/9] Detroit ok ytd=412 prior=455 asof=2026-02-19 (4.2s)
        """
        self._done += 1
        count = f"[{self._done}/{self._total}]" if self._total else ""
        suffix = f" ({elapsed:.1f}s)" if elapsed is not None else ""
        if record.get("ok"):
            details = f"ytd={record.get('ytd')} prior={record.get('prior')} asof={record.get('asof')}"
            self.logger.info(f"  {count} {name} ok {details}{suffix}")
        else:
            self.logger.warning(f"  {count} {name} FAILED: {record.get('error')}{suffix}")

    def end_run(self, success: bool = True, stats: dict | None = None):
        """Mark run end."""
        elapsed = self._total_elapsed()
        status = "COMPLETE" if success else "FAILED"

        if stats:
            self.summary(stats)

        self.logger.info(f"{'='*50}")
        self.logger.info(f"Run {status} [{elapsed}]")
        self.logger.info(f"{'='*50}")

        if self._log_file:
            self.logger.info(f"Log: {self._log_file}")

    def debug(self, message: str, **data):
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.debug(f"[{self._ts()}] {message}")

    def info(self, message: str, **data):
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.info(f"  {message}")

    def warning(self, message: str, **data):
        if data:
            message = f"{message} | {_format_data(data)}"
        self.logger.warning(f"[{self._ts()}] WARN: {message}")

    def error(self, message: str, exc: Exception | None = None, **data):
        if data:
            message = f"{message} | {_format_data(data)}"
        if exc:
            message = f"{message} | {type(exc).__name__}: {exc}"
        self.logger.error(f"[{self._ts()}] ERROR: {message}")

    def summary(self, stats: dict):
        """Log a summary block for end-of-run stats."""
        lines = ["SUMMARY"]
        for key, value in stats.items():
            if isinstance(value, dict):
                lines.append(f"  {key}:")
                for k, v in value.items():
                    lines.append(f"    {k}: {v}")
            else:
                lines.append(f"  {key}: {value}")
        self.logger.info("\n".join(lines))


class ConsoleFormatter(logging.Formatter):
    """Console formatter - concise."""

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


class FileFormatter(logging.Formatter):
    """File formatter - includes full details for analysis."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname[:4]
        return f"{ts} [{level}] {record.name}: {record.getMessage()}"


def _format_data(data: dict[str, Any]) -> str:
    """Format structured data for logging."""
    parts = []
    for k, v in data.items():
        if isinstance(v, str) and len(v) > 50:
            v = v[:47] + "..."
        elif isinstance(v, list) and len(v) > 5:
            v = f"[{len(v)} items]"
        parts.append(f"{k}={v}")
    return ", ".join(parts)


# Global logger instance
_logger: RunLogger | None = None


def get_logger(verbose: bool = False, log_dir: str | Path | None = None) -> RunLogger:
    """Get or create the global run logger.

    Args:
        verbose: If True, show DEBUG level logs in console.
        log_dir: Directory for log files. Applied if the logger exists but
                 has no log directory yet.
    """
    global _logger
    if _logger is None:
        _logger = RunLogger(verbose=verbose, log_dir=log_dir)
    else:
        if verbose and not _logger.verbose:
            _logger.set_verbose(True)
        if log_dir and not _logger._log_dir:
            _logger._log_dir = Path(log_dir)
    return _logger


def reset_logger():
    """Reset the global logger (for testing)."""
    global _logger
    if _logger:
        for handler in _logger.logger.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                handler.close()
                _logger.logger.removeHandler(handler)
    _logger = None
