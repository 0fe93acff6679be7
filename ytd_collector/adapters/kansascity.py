"""Kansas City: KCPD crime statistics page (plain HTML table)."""

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.config import SourceUrls
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import RowLayout, html_to_text, read_label, scan_lines, stated_date
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Kansas City"

LAYOUT = RowLayout(label="Non-Fatal Shooting Victims", columns=("ytd", "prior"))


async def fetch_kansascity(ctx: AdapterContext) -> SourceResult:
    markup = (await ctx.get(SourceUrls.KANSASCITY_PAGE, NAME)).text()
    text = html_to_text(markup)

    async def from_table():
        return read_label(NAME, text, LAYOUT)

    async def from_lines():
        numbers = scan_lines(text, LAYOUT.label)
        if not numbers:
            return None
        return {"ytd": numbers[0], "prior": numbers[1] if len(numbers) > 1 else None}

    values = await first_success(NAME, [("table", from_table), ("line scan", from_lines)], ctx.logger)
    return SourceResult(
        ytd=values["ytd"],
        prior=values["prior"],
        asof=stated_date(text),
        sourceUrl=SourceUrls.KANSASCITY_PAGE,
    )
