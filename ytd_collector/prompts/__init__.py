"""Prompt templates for the vision oracle."""

from ytd_collector.prompts.vision_prompts import (
    VISION_REPLY_RULES,
    grammar_prompt,
    reply_template,
    year_chart_prompt,
)

__all__ = [
    "VISION_REPLY_RULES",
    "grammar_prompt",
    "reply_template",
    "year_chart_prompt",
]
