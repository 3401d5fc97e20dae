"""Shared Anthropic client for enrichment and scoring prompts."""

import logging

from anthropic import AsyncAnthropic

from eventops.config import settings

logger = logging.getLogger(__name__)

_client: AsyncAnthropic | None = None


def get_anthropic_client() -> AsyncAnthropic:
    global _client
    if _client is None:
        _client = AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


async def complete_text(prompt: str, client: AsyncAnthropic | None = None) -> str:
    """Send a single-turn prompt and return the concatenated text blocks."""
    client = client or get_anthropic_client()
    logger.debug("Sending %d-char prompt to %s", len(prompt), settings.anthropic_model)
    response = await client.messages.create(
        model=settings.anthropic_model,
        max_tokens=settings.anthropic_max_tokens,
        messages=[{"role": "user", "content": prompt}],
    )
    return "".join(block.text for block in response.content if block.type == "text")


def extract_json_object(text: str) -> str | None:
    """Return the outermost ``{...}`` span of a model reply, if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]
