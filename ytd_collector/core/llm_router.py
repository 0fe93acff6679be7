"""LiteLLM Router configuration for the vision oracle.

The oracle is an Anthropic vision model. litellm translates the OpenAI-style
message list into a Messages API request (x-api-key header, base64 image
content blocks) and maps the reply back to choices[0].message.content.

The router is built lazily so importing the package never requires a key.
"""

from functools import lru_cache

from litellm import Router

from ytd_collector.core.config import API_KEY_ENV_VAR, VisionConfig


def _build_model_list() -> list[dict]:
    """Build the model list for the vision deployment."""
    return [
        {
            "model_name": VisionConfig.MODEL,
            "litellm_params": {
                "model": VisionConfig.MODEL,
                "api_key": f"os.environ/{API_KEY_ENV_VAR}",
                "timeout": VisionConfig.TIMEOUT_SECONDS,
            },
        },
    ]


def build_router() -> Router:
    """Build the Router for oracle calls.

    Retries stay at VisionConfig.NUM_RETRIES (zero by default) so a slow
    oracle cannot stretch a source past its orchestrator budget.
    """
    return Router(
        model_list=_build_model_list(),
        num_retries=VisionConfig.NUM_RETRIES,
        cooldown_time=60,
        allowed_fails=2,
    )


@lru_cache(maxsize=1)
def get_router() -> Router:
    return build_router()
