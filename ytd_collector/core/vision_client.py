"""Vision oracle client.

One image plus one prompt in, free text out. No conversation state.

The oracle is non-deterministic and sometimes wraps its answer in prose
("Sure! Here are the values: ..."), so callers never trust the reply's shape:
they build the prompt with prompts.vision_prompts.grammar_prompt() and parse
the reply with core.reply_grammar.parse_reply().

The pattern this wraps:
    response = await router.acompletion(model=..., messages=[image, text])
    if cost_tracker: cost_tracker.record(...)
    return response.choices[0].message.content
"""

import base64
import logging
from dataclasses import dataclass

from ytd_collector.core.config import VisionConfig
from ytd_collector.core.cost_tracker import CostTracker
from ytd_collector.core.errors import NetworkError, SourceTimeoutError
from ytd_collector.core.llm_router import get_router

logger = logging.getLogger(__name__)

# Suppress LiteLLM debug noise (done once at module load)
logging.getLogger("litellm").setLevel(logging.ERROR)
logging.getLogger("httpx").setLevel(logging.ERROR)


def build_messages(image: bytes, media_type: str, prompt: str) -> list[dict]:
    """Single user turn: the image first, then the extraction prompt."""
    encoded = base64.b64encode(image).decode("ascii")
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{media_type};base64,{encoded}"},
                },
                {"type": "text", "text": prompt},
            ],
        }
    ]


@dataclass
class VisionClient:
    """Client for vision oracle calls.

    Usage:
        client = VisionClient(cost_tracker=tracker)
        reply = await client.ask(png_bytes, "image/png", prompt, source="Durham")
        values = parse_reply(reply, ["2025", "2026"], source="Durham")
    """

    model: str = VisionConfig.MODEL
    max_tokens: int = VisionConfig.MAX_TOKENS
    cost_tracker: CostTracker | None = None

    async def ask(
        self,
        image: bytes,
        media_type: str = VisionConfig.DEFAULT_MEDIA_TYPE,
        prompt: str = "",
        source: str = "",
    ) -> str:
        """Send one image and prompt; return the oracle's reply text.

        Args:
            image: Encoded image bytes (PNG or JPEG).
            media_type: MIME type of ``image``.
            prompt: Extraction prompt. Must fully constrain the reply format.
            source: Display name of the calling adapter (errors and costs).

        Raises:
            SourceTimeoutError: If the oracle does not answer in time.
            NetworkError: For any other transport or API failure.
        """
        import litellm

        try:
            response = await get_router().acompletion(
                model=self.model,
                messages=build_messages(image, media_type, prompt),
                max_tokens=self.max_tokens,
            )
        except litellm.Timeout as exc:
            raise SourceTimeoutError(source, f"vision oracle timed out: {exc}") from exc
        except litellm.APIError as exc:
            raise NetworkError(source, f"vision oracle call failed: {type(exc).__name__}: {exc}") from exc

        if self.cost_tracker:
            self.cost_tracker.record(self.model, getattr(response, "usage", None), source=source)

        reply = response.choices[0].message.content or ""
        logger.debug(f"{source or 'vision'} oracle reply: {reply[:200]!r}")
        return reply
