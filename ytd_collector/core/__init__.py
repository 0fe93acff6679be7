"""Core utilities for the collector."""

from ytd_collector.core.config import (
    API_KEY_ENV_VAR,
    BrowserConfig,
    FetchConfig,
    ParseLimits,
    PdfConfig,
    SourceTimeouts,
    SourceUrls,
    StoreConfig,
    VisionConfig,
)
from ytd_collector.core.errors import (
    ErrorCategory,
    HttpStatusError,
    NavigationError,
    NetworkError,
    ParseError,
    RunErrors,
    SourceError,
    SourceFailure,
    SourceTimeoutError,
    categorize,
)
from ytd_collector.core.clock import Clock, FixedClock, SystemClock, run_timestamp
from ytd_collector.core.fetcher import FetchResponse, fetch, fetch_text, require_ok
from ytd_collector.core.tokenizer import TokenStream, tokenize
from ytd_collector.core.pdf_reader import PDFDocument, open_pdf
from ytd_collector.core.cost_tracker import CostTracker, OracleCall
from ytd_collector.core.vision_client import VisionClient
from ytd_collector.core.reply_grammar import parse_reply
from ytd_collector.core.strategies import first_success
from ytd_collector.core.browser import OnFailure, Step, run_steps
from ytd_collector.core.store import append_history, load_store, merge_store, write_store_atomic
from ytd_collector.core.run_logger import RunLogger, get_logger, reset_logger

__all__ = [
    # Configuration
    "API_KEY_ENV_VAR",
    "BrowserConfig",
    "FetchConfig",
    "ParseLimits",
    "PdfConfig",
    "SourceTimeouts",
    "SourceUrls",
    "StoreConfig",
    "VisionConfig",
    # Errors
    "ErrorCategory",
    "HttpStatusError",
    "NavigationError",
    "NetworkError",
    "ParseError",
    "RunErrors",
    "SourceError",
    "SourceFailure",
    "SourceTimeoutError",
    "categorize",
    # Clock
    "Clock",
    "FixedClock",
    "SystemClock",
    "run_timestamp",
    # Documents
    "FetchResponse",
    "fetch",
    "fetch_text",
    "require_ok",
    "TokenStream",
    "tokenize",
    "PDFDocument",
    "open_pdf",
    # Vision
    "OracleCall",
    "CostTracker",
    "VisionClient",
    "parse_reply",
    # Extraction plumbing
    "first_success",
    "OnFailure",
    "Step",
    "run_steps",
    # Store
    "append_history",
    "load_store",
    "merge_store",
    "write_store_atomic",
    # Logging
    "RunLogger",
    "get_logger",
    "reset_logger",
]
