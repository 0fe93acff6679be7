"""Label, number, and date parsing shared by the source adapters.

Publishers drift: labels gain or lose hyphens ("Non-Fatal" vs "Non Fatal"),
cells gain footnote markers, and dates move between the page text and the
file name. Everything here is tolerant of that drift but never guesses: a
value is either parsed exactly or reported missing.

Usage:
    layout = RowLayout("Non-Fatal Shooting", ("prior_day", "prior_7", "ytd", "prior"))
    values = read_row("Detroit", rows, layout)
    values["ytd"], values["prior"]
"""

import html
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from urllib.parse import unquote

from rapidfuzz import fuzz

from ytd_collector.core.config import ParseLimits
from ytd_collector.core.errors import ParseError

logger = logging.getLogger(__name__)


# =============================================================================
# Numbers
# =============================================================================

_INT_RE = re.compile(r"^-?(?:\d{1,3}(?:,\d{3})+|\d+)$")

# Cells that occupy a column but are not integers: footnote stars, dashes,
# percentages, decimals, n/a.
_PLACEHOLDER_RE = re.compile(r"^(?:[*–—-]+|n/?a|-?[\d,]*\.\d+%?|-?[\d,]+%|\(?-?[\d,.]+%?\)?)$", re.IGNORECASE)

_WORD_RE = re.compile(r"[A-Za-z]{2,}")


def _is_label_suffix(token: str) -> bool:
    return token.startswith("(") or token.endswith((")", ":"))


def parse_int(token: str) -> int | None:
    """Parse an integer cell, stripping thousands separators.

    Returns None for anything that is not a whole integer ("33%", "1.5", "*").

    Examples:
        >>> parse_int("1,204")
        1204
        >>> parse_int("33%") is None
        True
    """
    token = token.strip()
    if not _INT_RE.match(token):
        return None
    return int(token.replace(",", ""))


def is_placeholder(token: str) -> bool:
    return bool(_PLACEHOLDER_RE.match(token.strip())) and parse_int(token) is None


def bare_integers(text: str) -> list[int]:
    """Every whitespace-delimited token of ``text`` that is a whole integer."""
    values = []
    for token in text.split():
        value = parse_int(token)
        if value is not None:
            values.append(value)
    return values


def cells_after(text: str, limit: int) -> list[int | None]:
    """Collect up to ``limit`` table cells from the start of ``text``.

    Integers become ints, placeholders become None (they still occupy a
    column position). Label suffixes before the first cell ("(YTD)",
    "Victims:") are skipped; any other word ends the row, so prose such as
    "Select Row 2026 388" is never read as cells.
    """
    cells: list[int | None] = []
    for token in text.split():
        if len(cells) >= limit:
            break
        value = parse_int(token)
        if value is not None:
            cells.append(value)
        elif is_placeholder(token):
            cells.append(None)
        elif _WORD_RE.search(token) and (cells or not _is_label_suffix(token)):
            break
    return cells


# =============================================================================
# Labels and rows
# =============================================================================


def label_regex(label: str, line_start: bool = False) -> re.Pattern:
    """Compile a label into a separator-tolerant, case-insensitive regex.

    "Non-Fatal Shooting" matches "Non-Fatal Shooting", "Non Fatal Shooting",
    "NonFatalShooting" and "non_fatal  shooting".
    """
    words = [w for w in re.split(r"[\s\-_]+", label.strip()) if w]
    body = r"[\s\-_]*".join(re.escape(w) for w in words)
    prefix = r"^\s*" if line_start else r"(?<![A-Za-z])"
    return re.compile(prefix + body + r"(?![a-z])", re.IGNORECASE | re.MULTILINE)


def _row_prefix(row: str) -> str:
    """Leading non-numeric part of a row, used for fuzzy label matching."""
    match = re.match(r"[^\d]*", row)
    return match.group(0).strip() if match else ""


def find_row(rows: Sequence[str], label: str) -> str | None:
    """Find the row that starts with ``label``.

    Tries an exact, separator-tolerant match first; if no row matches, falls
    back to fuzzy matching on each row's leading text so small OCR-style
    drift ("Non-Fatai Shooting") still resolves.
    """
    pattern = label_regex(label, line_start=True)
    for row in rows:
        if pattern.search(row):
            return row

    best_row, best_score = None, 0.0
    for row in rows:
        prefix = _row_prefix(row)
        if not prefix:
            continue
        score = fuzz.ratio(label.lower(), prefix.lower())
        if score > best_score:
            best_row, best_score = row, score

    if best_row is not None and best_score >= ParseLimits.FUZZY_LABEL_SCORE:
        logger.debug(f"Fuzzy row match for '{label}': '{best_row}' ({best_score:.0f})")
        return best_row
    return None


@dataclass(frozen=True)
class RowLayout:
    """Column positions for a labelled table row.

    Attributes:
        label: Row label, matched separator-tolerantly.
        columns: Name for each cell position after the label. None skips a
            position (e.g. a percent-change column).
        required: Columns that must parse as integers.
    """

    label: str
    columns: tuple[str | None, ...]
    required: tuple[str, ...] = ("ytd",)

    @property
    def width(self) -> int:
        return len(self.columns)

    def assign(self, cells: Sequence[int | None]) -> dict[str, int | None]:
        values: dict[str, int | None] = {}
        for name, cell in zip(self.columns, cells):
            if name is not None:
                values[name] = cell
        for name in self.columns:
            if name is not None:
                values.setdefault(name, None)
        return values

    def missing(self, values: dict[str, int | None]) -> list[str]:
        return [name for name in self.required if values.get(name) is None]


def read_row(source: str, rows: Sequence[str], layout: RowLayout) -> dict[str, int | None]:
    """Locate ``layout.label`` among reconstructed rows and map its cells.

    Raises:
        ParseError: If the row is absent or a required column is not an integer.
    """
    row = find_row(rows, layout.label)
    if row is None:
        raise ParseError(source, f"'{layout.label}' row not found", excerpt=" | ".join(rows))

    match = label_regex(layout.label).search(row)
    tail = row[match.end():] if match else row[re.match(r"[^\d]*", row).end():]
    values = layout.assign(cells_after(tail, layout.width))
    missing = layout.missing(values)
    if missing:
        raise ParseError(
            source,
            f"'{layout.label}' row is missing {', '.join(missing)}",
            excerpt=row,
        )
    return values


def read_label(source: str, text: str, layout: RowLayout) -> dict[str, int | None]:
    """Find ``layout.label`` anywhere in flat text and map the cells after it.

    Used on token streams and page text where row boundaries are lost.
    """
    match = label_regex(layout.label).search(text)
    if match is None:
        raise ParseError(source, f"'{layout.label}' label not found", excerpt=text)

    values = layout.assign(cells_after(text[match.end():], layout.width))
    missing = layout.missing(values)
    if missing:
        raise ParseError(
            source,
            f"fewer than {len(layout.required)} required values after '{layout.label}'",
            excerpt=text[match.start():match.start() + ParseLimits.EXCERPT_CHARS],
        )
    return values


def scan_lines(text: str, label: str) -> list[int] | None:
    """Line-by-line fallback: the bare integers on the first line starting with ``label``."""
    pattern = label_regex(label, line_start=True)
    for line in text.splitlines():
        match = pattern.search(line)
        if match:
            return bare_integers(line[match.end():])
    return None


_SELECT_ROW_RE = re.compile(r"Select\s+Row\s+(20\d\d)\s+(-?[\d,]+)(?![\d.%])", re.IGNORECASE)


def select_row_values(text: str) -> dict[int, int]:
    """Parse accessibility text of the form "Select Row 2026 388".

    Dashboard tables expose one such phrase per visible row. The first
    occurrence of each year wins.
    """
    values: dict[int, int] = {}
    for year, raw in _SELECT_ROW_RE.findall(text):
        value = parse_int(raw)
        if value is not None:
            values.setdefault(int(year), value)
    return values


# =============================================================================
# HTML
# =============================================================================

_SCRIPT_RE = re.compile(r"<(script|style)\b.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BREAK_RE = re.compile(r"<br\s*/?>|</(?:p|tr|li|div|h[1-6]|table|caption)\s*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


def html_to_text(markup: str) -> str:
    """Strip markup to text, one table row or block per line."""
    text = _SCRIPT_RE.sub(" ", markup)
    text = _BREAK_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    lines = (" ".join(line.split()) for line in text.splitlines())
    return "\n".join(line for line in lines if line)


# =============================================================================
# Dates
# =============================================================================

MONTHS: dict[str, int] = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}

_MONTH_NAMES = (
    r"(?:January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec)"
)

_DATE_EXPR = (
    rf"(?P<month_name>{_MONTH_NAMES})\.?\s*(?P<day_a>\d{{1,2}})(?:st|nd|rd|th)?,?\s*(?P<year_a>\d{{4}})"
    r"|(?P<month_b>\d{1,2})/(?P<day_b>\d{1,2})/(?P<year_b>\d{2,4})"
    r"|(?P<year_c>\d{4})-(?P<month_c>\d{2})-(?P<day_c>\d{2})"
)

_STATED_DATE_RE = re.compile(
    r"\b(?:Data\s+Current\s+Through|Last\s+Updated(?:\s+on)?|Updated|Through|As\s+of)\s*:?\s*"
    rf"(?:(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)[a-z]*,?\s*)?(?:{_DATE_EXPR})",
    re.IGNORECASE,
)

_WEEKDAY_DATE_RE = re.compile(
    rf"(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)\w*,?\s*(?P<month_name>{_MONTH_NAMES})\s*(?P<day_a>\d{{1,2}}),?\s*(?P<year_a>\d{{4}})",
    re.IGNORECASE,
)

_NUMERIC_DATE_RE = re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4})(?!\d)")


def make_date(year: int | str, month: int | str, day: int | str) -> date | None:
    """Build a date, expanding two-digit years; None if the parts are invalid."""
    year = int(year)
    if year < 100:
        year += 2000
    try:
        return date(year, int(month), int(day))
    except ValueError:
        return None


def _date_from_match(match: re.Match) -> date | None:
    parts = match.groupdict()
    if parts.get("month_name"):
        month = MONTHS.get(parts["month_name"].lower().rstrip("."))
        if month is None:
            return None
        return make_date(parts["year_a"], month, parts["day_a"])
    if parts.get("month_b"):
        return make_date(parts["year_b"], parts["month_b"], parts["day_b"])
    if parts.get("year_c"):
        return make_date(parts["year_c"], parts["month_c"], parts["day_c"])
    return None


def stated_date(text: str) -> date | None:
    """The publication's own cutoff date, if the text states one.

    Recognizes "through", "Last Updated", "Data Current Through", "Updated:",
    and "as of", followed by a month-name, M/D/YY(YY), or ISO date, and the
    run-together weekday form "Thursday,February19,2026".
    """
    for pattern in (_STATED_DATE_RE, _WEEKDAY_DATE_RE):
        for match in pattern.finditer(text):
            found = _date_from_match(match)
            if found is not None:
                return found
    return None


def first_numeric_date(text: str) -> date | None:
    """The first M/D/YYYY date anywhere in ``text``."""
    for match in _NUMERIC_DATE_RE.finditer(text):
        found = make_date(match.group(3), match.group(1), match.group(2))
        if found is not None:
            return found
    return None


_URL_DATE_PATTERNS = (
    re.compile(r"(?<!\d)(20\d\d)[-_](\d\d)[-_](\d\d)(?!\d)"),
    re.compile(r"(?<!\d)(20\d\d)(\d\d)(\d\d)(?!\d)"),
    re.compile(r"(?<!\d)(\d\d)(\d\d)(\d\d)(?!\d)"),
)


def date_from_name(name: str) -> date | None:
    """A date encoded in a URL or file name (YYYY-MM-DD, YYYYMMDD, or YYMMDD)."""
    decoded = unquote(name)
    # Only the final path segment carries the report date; folders often
    # hold the upload month instead.
    segment = decoded.rstrip("/").rsplit("/", 1)[-1]
    for pattern in _URL_DATE_PATTERNS:
        for match in pattern.finditer(segment):
            found = make_date(*match.groups())
            if found is not None:
                return found
    return None


def resolve_asof(*candidates: date | None) -> date | None:
    """First non-None candidate, in preference order."""
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
