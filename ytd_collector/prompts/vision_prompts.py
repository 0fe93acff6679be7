"""Prompts for the vision oracle.

All vision adapters share one reply contract (see core/reply_grammar.py).
The prompt states the contract explicitly and shows the exact shape, because
the oracle otherwise tends to answer in a sentence.
"""

from collections.abc import Sequence

VISION_REPLY_RULES = """Reply with ONLY the values in this exact format, on one line, separated by spaces:
{template}
Replace each N with the integer shown in the image. Use digits only: no commas, no words, no explanation.
If a value is not visible, omit that KEY=N pair entirely rather than guessing."""


def reply_template(keys: Sequence[str]) -> str:
    """The literal reply shape, e.g. "2025=N 2026=N"."""
    return " ".join(f"{key}=N" for key in keys)


def grammar_prompt(description: str, keys: Sequence[str]) -> str:
    """Build an oracle prompt for one image.

    Args:
        description: What the image shows and which values to read, in plain
            language. Should name every key.
        keys: Keys the reply must contain, in the order they should appear.

    Returns:
        The full prompt text.
    """
    rules = VISION_REPLY_RULES.format(template=reply_template(keys))
    return f"{description.strip()}\n\n{rules}"


def year_chart_prompt(metric: str, prior_year: int, current_year: int, context: str = "") -> str:
    """Prompt for a chart or table comparing a metric across two years."""
    keys = [str(prior_year), str(current_year)]
    description = (
        f"This image is a crime statistics report. Find the year-to-date count of {metric} "
        f"for {prior_year} and for {current_year}."
    )
    if context:
        description = f"{description} {context}"
    return grammar_prompt(description, keys)
