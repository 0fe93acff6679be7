"""Durham: weekly shootings chart PDF from the city archive.

The archive page links every report by ADID; the highest ADID is the newest.
The PDF is a bar chart whose data labels come out of the text layer in
year-major order, four groups per year:

    [Shootings, Persons Shot, Fatal, Non-Fatal] x [two years ago, last year, this year]

Persons shot YTD is Fatal + Non-Fatal for this year; prior is the same for
last year. When the labels are not in the text layer the rasterized page goes
to the vision oracle.
"""

import re

from ytd_collector.adapters.base import AdapterContext
from ytd_collector.core.clock import current_year
from ytd_collector.core.config import SourceUrls
from ytd_collector.core.errors import ParseError
from ytd_collector.core.pdf_reader import open_pdf
from ytd_collector.core.strategies import first_success
from ytd_collector.core.text_parsing import stated_date
from ytd_collector.prompts.vision_prompts import grammar_prompt
from ytd_collector.pydantic_models.records import SourceResult

NAME = "Durham"

CHART_GROUPS = ("shootings", "persons_shot", "fatal", "non_fatal")
CHART_YEARS = 3
CHART_MIN, CHART_MAX = 1, 500

_ADID_RE = re.compile(r"ADID=(\d+)", re.IGNORECASE)


async def latest_adid(ctx: AdapterContext) -> int:
    html = (await ctx.get(SourceUrls.DURHAM_ARCHIVE, NAME)).text()
    adids = [int(m) for m in _ADID_RE.findall(html)]
    if not adids:
        raise ParseError(NAME, "no ADID links found on archive page", excerpt=html)
    return max(adids)


def label_tokens(fragments) -> list[str]:
    """Raw fragments split on whitespace. Adjacent one-digit labels stay separate."""
    return [token for fragment in fragments for token in fragment.split()]


def chart_numbers(tokens) -> list[int]:
    """Bar labels: bare integers in the chart's plausible range, in text order."""
    numbers = []
    for token in tokens:
        if token.isdigit() and CHART_MIN <= int(token) <= CHART_MAX:
            numbers.append(int(token))
    return numbers


def persons_shot(numbers: list[int]) -> tuple[int, int]:
    """(this year, last year) Fatal + Non-Fatal from year-major chart labels."""
    width = len(CHART_GROUPS)
    needed = width * CHART_YEARS
    if len(numbers) < needed:
        raise ParseError(NAME, f"expected {needed} chart numbers, found {len(numbers)}: {numbers}")
    chart = numbers[:needed]
    fatal, non_fatal = CHART_GROUPS.index("fatal"), CHART_GROUPS.index("non_fatal")
    current = (CHART_YEARS - 1) * width
    prior = (CHART_YEARS - 2) * width
    return chart[current + fatal] + chart[current + non_fatal], chart[prior + fatal] + chart[prior + non_fatal]


def vision_keys(year: int) -> list[str]:
    return [f"FATAL_{year - 1}", f"NONFATAL_{year - 1}", f"FATAL_{year}", f"NONFATAL_{year}"]


async def fetch_durham(ctx: AdapterContext) -> SourceResult:
    adid = await latest_adid(ctx)
    url = SourceUrls.DURHAM_FILE.format(adid=adid)
    ctx.logger.info(f"{NAME}: fetching {url} (ADID {adid})")
    response = await ctx.get(url, NAME)

    year = current_year(ctx.clock)
    with open_pdf(NAME, response.body, url) as pdf:
        labels = label_tokens(pdf.fragments(1))
        text = pdf.tokens(1).text()

        async def from_chart_labels():
            return persons_shot(chart_numbers(labels))

        async def from_vision():
            keys = vision_keys(year)
            prompt = grammar_prompt(
                "This image is a bar chart of shootings by year. For each year, read the "
                f"Fatal and Non-Fatal bar labels for {year - 1} and {year}. "
                f"Use keys FATAL_<year> and NONFATAL_<year>.",
                keys,
            )
            values = await ctx.ask_values(pdf.render_png(1), prompt, keys, NAME)
            return (
                values[f"FATAL_{year}"] + values[f"NONFATAL_{year}"],
                values[f"FATAL_{year - 1}"] + values[f"NONFATAL_{year - 1}"],
            )

        ytd, prior = await first_success(
            NAME, [("chart labels", from_chart_labels), ("vision", from_vision)], ctx.logger
        )

    return SourceResult(ytd=ytd, prior=prior, asof=stated_date(text), adid=adid, sourceUrl=url)
