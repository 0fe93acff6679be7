"""Baltimore: ArcGIS Experience dashboard of victim-based crime.

The dashboard renders its indicator cards client-side. After navigation the
page text usually carries "Non-Fatal Shootings <current> <prior>"; when the
cards render as canvas the screenshot goes to the vision oracle.
"""

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.browser import OnFailure, click_text, goto, page_text, run_steps, screenshot, wait
from ytd_collector.core.clock import current_year
from ytd_collector.core.config import BrowserConfig, SourceUrls
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import RowLayout, read_label, stated_date
from ytd_collector.prompts.vision_prompts import year_chart_prompt
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Baltimore"

LAYOUT = RowLayout(label="Non-Fatal Shootings", columns=("ytd", "prior"))

STEPS = (
    goto(SourceUrls.BALTIMORE_DASHBOARD),
    click_text("Accept", on_failure=OnFailure.CONTINUE),
    click_text("Year to Date", on_failure=OnFailure.CONTINUE),
    wait(BrowserConfig.SETTLE_MS),
)


async def fetch_baltimore(ctx: AdapterContext) -> SourceResult:
    year = current_year(ctx.clock)

    async with ctx.open_page(NAME) as page:
        await run_steps(page, STEPS, NAME, ctx.logger)
        text = await page_text(page)

        async def from_page_text():
            return read_label(NAME, text, LAYOUT)

        async def from_vision():
            keys = [str(year - 1), str(year)]
            prompt = year_chart_prompt(
                "non-fatal shootings", year - 1, year,
                context="Read the Non-Fatal Shootings indicator, not homicides or total shootings.",
            )
            values = await ctx.ask_values(await screenshot(page), prompt, keys, NAME)
            return {"ytd": values[str(year)], "prior": values[str(year - 1)]}

        values = await first_success(
            NAME, [("page text", from_page_text), ("vision", from_vision)], ctx.logger
        )

    return SourceResult(
        ytd=values["ytd"],
        prior=values["prior"],
        asof=stated_date(text),
        sourceUrl=SourceUrls.BALTIMORE_DASHBOARD,
    )
