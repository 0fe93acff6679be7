"""Wilmington: weekly CompStat PDF linked from the reports page.

The "Shooting Victims" row has three blocks of (current, prior, % change):
7-day, 28-day, and year-to-date. Change cells are percentages or "*", which
occupy their column without being read as counts.
"""

import html as html_lib
import re
from urllib.parse import urljoin

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.config import SourceUrls
from ytd_collector.core.errors import ParseError
from ytd_collector.core.pdf_reader import open_pdf
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import (
    RowLayout,
    date_from_name,
    read_label,
    read_row,
    resolve_asof,
    stated_date,
)
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Wilmington"

LAYOUT = RowLayout(
    label="Shooting Victims",
    columns=(
        "week", "week_prior", None,
        "days_28", "days_28_prior", None,
        "ytd", "prior", None,
    ),
    required=("ytd", "prior"),
)

_LINK_PATTERNS = (
    re.compile(r"""href=["']([^"']*showpublisheddocument[^"']*)["']""", re.IGNORECASE),
    re.compile(r"""href=["']([^"']+\.pdf(?:\?[^"']*)?)["']""", re.IGNORECASE),
)


def find_report_link(markup: str) -> str | None:
    """Absolute URL of the first published-document (or .pdf) link."""
    for pattern in _LINK_PATTERNS:
        match = pattern.search(markup)
        if match:
            return urljoin(SourceUrls.WILMINGTON_ORIGIN + "/", html_lib.unescape(match.group(1)))
    return None


async def fetch_wilmington(ctx: AdapterContext) -> SourceResult:
    markup = (await ctx.get(SourceUrls.WILMINGTON_PAGE, NAME)).text()
    url = find_report_link(markup)
    if url is None:
        raise ParseError(NAME, f"no report link found on page ({len(markup)} chars)", excerpt=markup)

    ctx.logger.info(f"{NAME}: fetching {url}")
    response = await ctx.get(url, NAME)
    with open_pdf(NAME, response.body, url) as pdf:
        rows = pdf.rows(1)
        token_text = pdf.tokens(1).text()

    async def from_rows():
        return read_row(NAME, rows, LAYOUT)

    async def from_tokens():
        return read_label(NAME, token_text, LAYOUT)

    values = await first_success(NAME, [("rows", from_rows), ("tokens", from_tokens)], ctx.logger)

    asof = resolve_asof(stated_date("\n".join(rows)), date_from_name(url))
    return SourceResult(ytd=values["ytd"], prior=values["prior"], asof=asof, sourceUrl=url)
