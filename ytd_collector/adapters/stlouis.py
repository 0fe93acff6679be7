"""St. Louis: SLMPD year-to-date dashboard, read through its CSV export.

The export repeats each category once per dimension the dashboard is sliced
by (district, neighborhood...), so only the first row per category counts.
Every category whose name contains "shooting" is summed.
"""

import csv
import io
from pathlib import Path

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.browser import OnFailure, click_text, goto, page_text, run_steps, wait
from ytd_collector.core.clock import current_year
from ytd_collector.core.config import BrowserConfig, SourceUrls
from ytd_collector.core.errors import NavigationError, ParseError
from ytd_collector.core.text_parsing import date_from_name, parse_int, resolve_asof, stated_date
from ytd_collector.pydantic_models.records import SourceResult

NAME = "St. Louis"

CATEGORY_MATCH = "shooting"
CATEGORY_HEADERS = ("category", "offense", "crime")
EXPORT_LABEL = "Export"

STEPS = (
    goto(SourceUrls.STLOUIS_DASHBOARD),
    click_text("Accept", on_failure=OnFailure.CONTINUE),
    click_text("Year to Date", on_failure=OnFailure.CONTINUE),
    wait(BrowserConfig.SETTLE_MS),
)


def _find_column(headers: list[str], *needles: str) -> str | None:
    for header in headers:
        lowered = header.lower()
        if any(needle in lowered for needle in needles):
            return header
    return None


def sum_categories(data: str, year: int, match: str = CATEGORY_MATCH) -> tuple[int, int | None]:
    """Sum (current, prior) year counts over categories containing ``match``.

    Columns are located by header: the category column by name, the count
    columns by the year they mention ("2026 YTD", "YTD 2025").

    Raises:
        ParseError: If a needed column is missing, no category matches, or a
            matched count is not an integer.
    """
    reader = csv.DictReader(io.StringIO(data))
    headers = [h.strip() for h in reader.fieldnames or []]
    reader.fieldnames = headers

    category_col = _find_column(headers, *CATEGORY_HEADERS)
    current_col = _find_column(headers, str(year))
    prior_col = _find_column(headers, str(year - 1))
    if category_col is None or current_col is None:
        raise ParseError(NAME, f"export is missing category or {year} column: {headers}", excerpt=data)

    seen: set[str] = set()
    ytd = 0
    prior: int | None = 0 if prior_col else None
    for row in reader:
        category = (row.get(category_col) or "").strip()
        if match not in category.lower() or category in seen:
            continue
        seen.add(category)

        value = parse_int(row.get(current_col) or "")
        if value is None:
            raise ParseError(NAME, f"non-integer {current_col} for '{category}'", excerpt=str(row))
        ytd += value
        if prior is not None:
            prior_value = parse_int(row.get(prior_col) or "")
            prior = prior + prior_value if prior_value is not None else None

    if not seen:
        raise ParseError(NAME, f"no categories containing '{match}' in export", excerpt=data)
    return ytd, prior


async def download_export(page, label: str = EXPORT_LABEL) -> tuple[str, str]:
    """Click the export control and capture the file (text, suggested name)."""
    try:
        async with page.expect_download(timeout=BrowserConfig.NAVIGATION_TIMEOUT_MS) as download_info:
            await page.get_by_text(label, exact=False).first.click()
        download = await download_info.value
        path = await download.path()
    except Exception as exc:
        raise NavigationError(NAME, f"export download failed: {type(exc).__name__}: {exc}") from exc
    data = Path(path).read_text(encoding="utf-8-sig")
    return data, download.suggested_filename


async def fetch_stlouis(ctx: AdapterContext) -> SourceResult:
    year = current_year(ctx.clock)

    async with ctx.open_page(NAME) as page:
        await run_steps(page, STEPS, NAME, ctx.logger)
        text = await page_text(page)
        data, filename = await download_export(page)

    ctx.logger.debug(f"{NAME}: export {filename} ({len(data)} chars)")
    ytd, prior = sum_categories(data, year)
    asof = resolve_asof(stated_date(text), date_from_name(filename))
    return SourceResult(ytd=ytd, prior=prior, asof=asof, sourceUrl=SourceUrls.STLOUIS_DASHBOARD)
