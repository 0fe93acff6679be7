"""Milwaukee: MPD crime statistics dashboard.

The dashboard cannot cross-filter aggravated assaults by weapon, so the
all-weapon "Aggravated Assault" count stands in for non-fatal shootings.
The substitution is logged and recorded on the result as ``approximation``.
"""

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.browser import OnFailure, click_text, goto, page_text, run_steps, screenshot, wait
from ytd_collector.core.clock import current_year
from ytd_collector.core.config import BrowserConfig, SourceUrls
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import RowLayout, read_label, stated_date
from ytd_collector.prompts.vision_prompts import year_chart_prompt
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Milwaukee"

APPROXIMATION = "all-weapon aggravated assaults (firearm-only count not available)"

LAYOUT = RowLayout(label="Aggravated Assault", columns=("ytd", "prior"))

STEPS = (
    goto(SourceUrls.MILWAUKEE_DASHBOARD),
    click_text("Accept", on_failure=OnFailure.CONTINUE),
    wait(BrowserConfig.SETTLE_MS),
)


async def fetch_milwaukee(ctx: AdapterContext) -> SourceResult:
    year = current_year(ctx.clock)

    async with ctx.open_page(NAME) as page:
        await run_steps(page, STEPS, NAME, ctx.logger)
        text = await page_text(page)

        async def from_page_text():
            return read_label(NAME, text, LAYOUT)

        async def from_vision():
            keys = [str(year - 1), str(year)]
            prompt = year_chart_prompt(
                "aggravated assaults (all weapons)", year - 1, year,
                context="Use the Aggravated Assault total, not any sub-category.",
            )
            values = await ctx.ask_values(await screenshot(page), prompt, keys, NAME)
            return {"ytd": values[str(year)], "prior": values[str(year - 1)]}

        values = await first_success(
            NAME, [("page text", from_page_text), ("vision", from_vision)], ctx.logger
        )

    ctx.logger.warning(f"{NAME}: reporting {APPROXIMATION}")
    return SourceResult(
        ytd=values["ytd"],
        prior=values["prior"],
        asof=stated_date(text),
        sourceUrl=SourceUrls.MILWAUKEE_DASHBOARD,
        approximation=APPROXIMATION,
    )
