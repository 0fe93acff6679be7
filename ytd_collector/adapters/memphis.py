"""Memphis: year-to-date summary PDF.

Some editions ship with a text layer ("Total Shooting Incidents <prior>
<current>"), others are scanned images; those go to the vision oracle.
"""

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.clock import current_year
from ytd_collector.core.config import SourceUrls
from ytd_collector.core.pdf_reader import open_pdf
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import RowLayout, date_from_name, read_label, resolve_asof, stated_date
from ytd_collector.prompts.vision_prompts import year_chart_prompt
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Memphis"

LAYOUT = RowLayout(label="Total Shooting Incidents", columns=("prior", "ytd"), required=("prior", "ytd"))


async def fetch_memphis(ctx: AdapterContext) -> SourceResult:
    year = current_year(ctx.clock)
    url = SourceUrls.MEMPHIS_PDF.format(yyyy=year)
    ctx.logger.info(f"{NAME}: fetching {url}")
    response = await ctx.get(url, NAME)

    with open_pdf(NAME, response.body, url) as pdf:
        text = pdf.text(1)

        async def from_text_layer():
            return read_label(NAME, text, LAYOUT)

        async def from_vision():
            keys = [str(year - 1), str(year)]
            prompt = year_chart_prompt("total shooting incidents", year - 1, year)
            values = await ctx.ask_values(pdf.render_png(1), prompt, keys, NAME)
            return {"ytd": values[str(year)], "prior": values[str(year - 1)]}

        values = await first_success(
            NAME, [("text layer", from_text_layer), ("vision", from_vision)], ctx.logger
        )

    asof = resolve_asof(stated_date(text), date_from_name(url))
    return SourceResult(ytd=values["ytd"], prior=values["prior"], asof=asof, sourceUrl=url)
