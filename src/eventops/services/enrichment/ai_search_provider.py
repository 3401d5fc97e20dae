"""Claude-backed enrichment provider.

Synthesizes a professional profile from the model's own knowledge; no
paid data APIs are involved.
"""

import json
import logging

from anthropic import AnthropicError

from eventops.services.enrichment.types import EnrichmentInput, EnrichmentResult
from eventops.services.llm import complete_text, extract_json_object

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = (
    "title",
    "company",
    "industry",
    "role_seniority",
    "linkedin_url",
    "twitter_url",
    "net_worth_range",
    "ai_summary",
)


class AiSearchProvider:
    name = "ai-claude"

    def __init__(self, client=None):
        self._client = client

    async def enrich(self, data: EnrichmentInput) -> EnrichmentResult:
        try:
            text = await complete_text(build_enrichment_prompt(data), client=self._client)
        except AnthropicError as exc:
            return EnrichmentResult(success=False, provider=self.name, error=str(exc) or "Enrichment failed")

        return EnrichmentResult(success=True, provider=self.name, **parse_enrichment_response(text))


def build_enrichment_prompt(data: EnrichmentInput) -> str:
    parts = ["Analyze this professional contact and provide enrichment data."]
    parts.append(f"Name: {data.full_name}")
    if data.emails:
        parts.append(f"Email: {data.emails[0].get('email', '')}")
    if data.company:
        parts.append(f"Company: {data.company}")
    if data.title:
        parts.append(f"Title: {data.title}")
    if data.linkedin_url:
        parts.append(f"LinkedIn: {data.linkedin_url}")

    parts.append("")
    parts.append("Respond with raw JSON only, using these keys (null when unknown):")
    parts.append(json.dumps({key: "string or null" for key in _PROFILE_FIELDS} | {
        "board_affiliations": ["string"],
    }))
    parts.append("Only state facts you are confident about; keep ai_summary to 2-3 sentences.")
    return "\n".join(parts)


def parse_enrichment_response(text: str) -> dict:
    """Pull known profile fields out of a model reply.

    An unparseable reply keeps the raw text as the summary instead of
    failing the contact.
    """
    candidate = extract_json_object(text)
    if candidate is None:
        return {"ai_summary": text.strip() or None, "raw_data": {"raw_text": text}}
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        logger.debug("Enrichment reply was not valid JSON")
        return {"ai_summary": text.strip() or None, "raw_data": {"raw_text": text}}
    if not isinstance(parsed, dict):
        return {"raw_data": {"raw_text": text}}

    fields = {key: parsed[key] for key in _PROFILE_FIELDS if isinstance(parsed.get(key), str)}
    affiliations = parsed.get("board_affiliations")
    if isinstance(affiliations, list):
        fields["board_affiliations"] = [str(a) for a in affiliations]
    fields["raw_data"] = parsed
    return fields
