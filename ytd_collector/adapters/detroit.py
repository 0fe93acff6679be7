"""Detroit: weekly DPD statistics PDF.

The report is published every Thursday at a URL built from its date. Its
"Non-Fatal Shooting" row reads: prior day, prior 7 days, YTD current, YTD
prior, then change columns.
"""

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.clock import most_recent_weekday, today
from ytd_collector.core.config import SourceUrls
from ytd_collector.core.pdf_reader import open_pdf
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import (
    RowLayout,
    date_from_name,
    first_numeric_date,
    read_label,
    read_row,
    resolve_asof,
    stated_date,
)
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Detroit"
THURSDAY = 3

LAYOUT = RowLayout(
    label="Non-Fatal Shooting",
    columns=("prior_day", "prior_7_days", "ytd", "prior"),
    required=("ytd", "prior"),
)


def report_url(clock) -> str:
    """URL of the report for the most recent Thursday on or before today."""
    day = most_recent_weekday(today(clock), THURSDAY)
    return SourceUrls.DETROIT_PDF.format(
        yyyy=f"{day.year:04d}",
        yy=f"{day.year % 100:02d}",
        mm=f"{day.month:02d}",
        dd=f"{day.day:02d}",
    )


async def fetch_detroit(ctx: AdapterContext) -> SourceResult:
    url = report_url(ctx.clock)
    ctx.logger.info(f"{NAME}: fetching {url}")
    response = await ctx.get(url, NAME)

    with open_pdf(NAME, response.body, url) as pdf:
        rows = pdf.rows(1)
        token_text = pdf.tokens(1).text()
    ctx.logger.debug(f"{NAME}: {len(rows)} rows, first: {rows[:5]}")

    async def from_rows():
        return read_row(NAME, rows, LAYOUT)

    async def from_tokens():
        return read_label(NAME, token_text, LAYOUT)

    values = await first_success(NAME, [("rows", from_rows), ("tokens", from_tokens)], ctx.logger)

    page_text = "\n".join(rows)
    asof = resolve_asof(stated_date(page_text), first_numeric_date(page_text), date_from_name(url))
    return SourceResult(ytd=values["ytd"], prior=values["prior"], asof=asof, sourceUrl=url)
