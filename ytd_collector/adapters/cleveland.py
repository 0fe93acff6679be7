"""Cleveland: Power BI crime dashboard.

The report opens on a summary tab; the "Persons Shot" table sits behind a
tab click. Power BI exposes table rows to screen readers as
"Select Row <year> <value>", which survives layout changes better than the
visible grid, so it is the second strategy before vision.
"""

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.browser import OnFailure, click_text, goto, page_text, run_steps, screenshot, wait
from ytd_collector.core.clock import current_year
from ytd_collector.core.config import BrowserConfig, SourceUrls
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import RowLayout, read_label, select_row_values, stated_date
from ytd_collector.prompts.vision_prompts import year_chart_prompt
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Cleveland"

LAYOUT = RowLayout(label="Persons Shot", columns=("ytd", "prior"))

STEPS = (
    goto(SourceUrls.CLEVELAND_DASHBOARD),
    click_text("Accept", on_failure=OnFailure.CONTINUE),
    wait(BrowserConfig.SETTLE_MS),
    click_text("Persons Shot", on_failure=OnFailure.CONTINUE),
    wait(BrowserConfig.SETTLE_MS),
)


async def fetch_cleveland(ctx: AdapterContext) -> SourceResult:
    year = current_year(ctx.clock)

    async with ctx.open_page(NAME) as page:
        await run_steps(page, STEPS, NAME, ctx.logger)
        text = await page_text(page)

        async def from_table():
            return read_label(NAME, text, LAYOUT)

        async def from_select_rows():
            by_year = select_row_values(text)
            if year not in by_year:
                return None
            return {"ytd": by_year[year], "prior": by_year.get(year - 1)}

        async def from_vision():
            keys = [str(year - 1), str(year)]
            prompt = year_chart_prompt("persons shot", year - 1, year)
            values = await ctx.ask_values(await screenshot(page), prompt, keys, NAME)
            return {"ytd": values[str(year)], "prior": values[str(year - 1)]}

        values = await first_success(
            NAME,
            [("table", from_table), ("select rows", from_select_rows), ("vision", from_vision)],
            ctx.logger,
        )

    return SourceResult(
        ytd=values["ytd"],
        prior=values["prior"],
        asof=stated_date(text),
        sourceUrl=SourceUrls.CLEVELAND_DASHBOARD,
    )
