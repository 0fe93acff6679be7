"""Centralized configuration for the collector.

All timeouts, endpoints, and tunable constants are documented here.
Each constant includes:
- What it controls
- Where it is used
"""

import os
from typing import Final


# =============================================================================
# Vision Oracle Configuration
# =============================================================================
#
# The vision oracle is an Anthropic model reached through litellm. Set:
#   - ANTHROPIC_API_KEY: API key (header-based auth, sent by litellm)
#   - VISION_MODEL: optional model override
#
# =============================================================================

API_KEY_ENV_VAR: Final[str] = "ANTHROPIC_API_KEY"
"""Environment variable holding the vision oracle credential."""


class VisionConfig:
    """Parameters for vision oracle calls.

    Used by: vision_client.py, llm_router.py
    """

    MODEL: Final[str] = os.environ.get("VISION_MODEL", "anthropic/claude-sonnet-4-20250514")
    """litellm model identifier. The anthropic/ prefix routes to the Messages API."""

    MAX_TOKENS: Final[int] = 300
    """Replies are a handful of KEY=N tokens; 300 leaves room for stray prose."""

    NUM_RETRIES: Final[int] = 0
    """Router-level retries. Sources are not retried within a run."""

    TIMEOUT_SECONDS: Final[float] = 60.0
    """Per-call request timeout."""

    DEFAULT_MEDIA_TYPE: Final[str] = "image/png"


# =============================================================================
# Fetching and Rendering
# =============================================================================


class FetchConfig:
    """Document fetcher settings.

    Used by: fetcher.py
    """

    TIMEOUT_SECONDS: Final[float] = 20.0
    """Budget per request hop. Each redirect hop gets the full budget again."""

    MAX_REDIRECTS: Final[int] = 10
    """Redirect hops followed before giving up with a NetworkError."""

    REDIRECT_STATUSES: Final[frozenset[int]] = frozenset({301, 302, 303, 307, 308})

    USER_AGENT: Final[str] = "Mozilla/5.0 (compatible; ShootingDashboard/1.0)"


class PdfConfig:
    """Text-layer and raster settings for PDF documents.

    Used by: pdf_reader.py
    """

    ROW_TOLERANCE: Final[float] = 1.0
    """Spans whose baselines round to the same value (in points) share a row."""

    WORD_GAP: Final[float] = 3.0
    """Horizontal gap (points) between spans that inserts a space in a row."""

    RENDER_DPI: Final[int] = 150
    """Raster resolution for pages sent to the vision oracle.

    150 keeps chart labels legible while staying well under image size limits.
    """


class BrowserConfig:
    """Headless browser defaults.

    Used by: browser.py and the dashboard adapters
    """

    HEADLESS: Final[bool] = os.environ.get("YTD_HEADLESS", "1") != "0"

    VIEWPORT: Final[dict[str, int]] = {"width": 1600, "height": 1200}

    NAVIGATION_TIMEOUT_MS: Final[int] = 60_000
    """Default timeout for page.goto and waits that do not set their own."""

    STEP_TIMEOUT_SECONDS: Final[float] = 15.0
    """Default budget for a single interpreter step."""

    SETTLE_MS: Final[int] = 4_000
    """Pause after navigation so client-side widgets finish rendering."""


# =============================================================================
# Orchestration
# =============================================================================


class SourceTimeouts:
    """Per-source budgets in seconds, raced against each adapter.

    PDF adapters need one or two fetches. Browser adapters drive a full
    dashboard and may also call the vision oracle.

    Used by: adapters/__init__.py
    """

    PDF: Final[float] = 60.0
    HTML: Final[float] = 45.0
    VISION_PDF: Final[float] = 120.0
    BROWSER: Final[float] = 180.0


class StoreConfig:
    """Persisted store settings.

    Used by: store.py, cli.py
    """

    PATH: Final[str] = os.environ.get("YTD_STORE_PATH", "data/manual-auto.json")
    """Single JSON document rewritten on every run."""

    INDENT: Final[int] = 2

    MANUAL_SOURCES: Final[tuple[str, ...]] = ("oakland",)
    """Curated by hand outside the pipeline; copied forward unchanged."""

    MANUAL_PLACEHOLDER_ERROR: Final[str] = "No manual data yet"


class ParseLimits:
    """Limits applied while parsing documents.

    Used by: text_parsing.py, errors.py
    """

    EXCERPT_CHARS: Final[int] = 300
    """Diagnostic excerpt length attached to ParseError messages."""

    FUZZY_LABEL_SCORE: Final[int] = 85
    """Minimum rapidfuzz score (0-100) for the fuzzy row-label fallback."""


# =============================================================================
# Publisher Endpoints
# =============================================================================


class SourceUrls:
    """Publisher URLs. Layout drift usually means editing one of these."""

    DETROIT_PDF: Final[str] = (
        "https://detroitmi.gov/sites/detroitmi.localhost/files/events/"
        "{yyyy}-{mm}/{yy}{mm}{dd}%20DPD%20Stats.pdf"
    )
    DURHAM_ARCHIVE: Final[str] = "https://www.durhamnc.gov/Archive.aspx?AMID=211"
    DURHAM_FILE: Final[str] = "https://www.durhamnc.gov/ArchiveCenter/ViewFile/Item/{adid}"
    WILMINGTON_ORIGIN: Final[str] = "https://www.wilmingtonde.gov"
    WILMINGTON_PAGE: Final[str] = (
        "https://www.wilmingtonde.gov/government/public-safety/"
        "wilmington-police-department/compstat-reports"
    )
    KANSASCITY_PAGE: Final[str] = "https://www.kcpd.org/crime/crime-statistics/"
    MEMPHIS_PDF: Final[str] = "https://www.memphispolice.org/crime-stats/{yyyy}/ytd-summary.pdf"
    BALTIMORE_DASHBOARD: Final[str] = (
        "https://experience.arcgis.com/experience/bpd-part1-victim-based-crime"
    )
    CLEVELAND_DASHBOARD: Final[str] = "https://www.clevelandohio.gov/city-hall/departments/public-safety/police/crime-data"
    STLOUIS_DASHBOARD: Final[str] = "https://www.slmpd.org/crime-stats/ytd-dashboard"
    MILWAUKEE_DASHBOARD: Final[str] = "https://city.milwaukee.gov/police/Information-Services/Crime-Maps-and-Statistics"
