"""Relevance scoring of a contact against an event's weighted objectives."""

import json
import logging
from typing import Any, Protocol

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.config import settings
from eventops.db.base import utcnow
from eventops.repositories.guest_score_repo import GuestScoreRepository
from eventops.services.llm import complete_text, extract_json_object

logger = logging.getLogger(__name__)

MAX_TALKING_POINTS = 5


class ContactForScoring(BaseModel):
    id: str
    full_name: str
    company: str | None = None
    title: str | None = None
    industry: str | None = None
    role_seniority: str | None = None
    ai_summary: str | None = None
    tags: list[str] = Field(default_factory=list)
    enrichment_data: dict[str, Any] = Field(default_factory=dict)


class ObjectiveForScoring(BaseModel):
    id: str
    objective_text: str
    weight: int


class MatchedObjective(BaseModel):
    objective_id: str
    objective_text: str
    match_score: int
    explanation: str


class ScoringResult(BaseModel):
    relevance_score: int
    matched_objectives: list[MatchedObjective] = Field(default_factory=list)
    score_rationale: str = ""
    talking_points: list[str] = Field(default_factory=list)


class ScoringModel(Protocol):
    model_version: str

    async def score(
        self,
        contact: ContactForScoring,
        objectives: list[ObjectiveForScoring],
        event_title: str,
    ) -> ScoringResult: ...


class ClaudeScoringModel:
    def __init__(self, client=None):
        self._client = client
        self.model_version = settings.anthropic_model

    async def score(self, contact, objectives, event_title):
        return await score_contact_for_event(contact, objectives, event_title, client=self._client)


async def score_contact_for_event(
    contact: ContactForScoring,
    objectives: list[ObjectiveForScoring],
    event_title: str,
    client=None,
) -> ScoringResult:
    """Score a single contact against event objectives using Claude."""
    text = await complete_text(build_scoring_prompt(contact, objectives, event_title), client=client)
    return parse_scoring_response(text, objectives)


def build_scoring_prompt(
    contact: ContactForScoring,
    objectives: list[ObjectiveForScoring],
    event_title: str,
) -> str:
    lines = [
        f'Score this contact\'s relevance to the event "{event_title}".',
        "",
        "## Contact Profile",
        f"Name: {contact.full_name}",
    ]

    if contact.company:
        lines.append(f"Company: {contact.company}")
    if contact.title:
        lines.append(f"Title: {contact.title}")
    if contact.industry:
        lines.append(f"Industry: {contact.industry}")
    if contact.role_seniority:
        lines.append(f"Seniority: {contact.role_seniority}")
    if contact.ai_summary:
        lines.append(f"Summary: {contact.ai_summary}")
    if contact.tags:
        lines.append(f"Tags: {', '.join(contact.tags)}")

    lines.append("")
    lines.append("## Event Objectives (weighted)")
    for obj in objectives:
        lines.append(f"- [Weight {obj.weight}] {obj.objective_text}")

    lines.append("")
    lines.append("Respond in this exact JSON format (no markdown, just raw JSON):")
    lines.append(json.dumps({
        "relevance_score": "number 0-100",
        "matched_objectives": [
            {
                "objective_index": 0,
                "match_score": "number 0-100",
                "explanation": "Why this contact matches/doesn't match this objective",
            },
        ],
        "score_rationale": "2-3 sentence overall assessment",
        "talking_points": ["Point 1", "Point 2", "Point 3"],
    }))
    lines.append("")
    lines.append(
        "Score guidelines: 80-100 = strong match, 60-79 = good match, 40-59 = moderate, "
        "20-39 = weak, 0-19 = poor match."
    )
    lines.append(
        "If you lack information about the contact, score conservatively (30-50) "
        "and note the data gap in rationale."
    )
    return "\n".join(lines)


def _clamp_score(value: Any, default: int) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return min(100, max(0, round(number)))


def parse_scoring_response(text: str, objectives: list[ObjectiveForScoring]) -> ScoringResult:
    candidate = extract_json_object(text)
    if candidate is None:
        return default_scoring_result(objectives)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        return default_scoring_result(objectives)
    if not isinstance(parsed, dict):
        return default_scoring_result(objectives)

    matched = []
    for i, mo in enumerate(parsed.get("matched_objectives") or []):
        if not isinstance(mo, dict):
            continue
        index = mo.get("objective_index", i)
        if not isinstance(index, int) or not 0 <= index < len(objectives):
            index = 0
        obj = objectives[index] if objectives else None
        matched.append(MatchedObjective(
            objective_id=obj.id if obj else "",
            objective_text=obj.objective_text if obj else "",
            match_score=_clamp_score(mo.get("match_score"), 0),
            explanation=str(mo.get("explanation") or ""),
        ))

    talking_points = parsed.get("talking_points")
    return ScoringResult(
        relevance_score=_clamp_score(parsed.get("relevance_score"), 50),
        matched_objectives=matched,
        score_rationale=str(parsed.get("score_rationale") or ""),
        talking_points=[str(p) for p in talking_points[:MAX_TALKING_POINTS]]
        if isinstance(talking_points, list) else [],
    )


def default_scoring_result(objectives: list[ObjectiveForScoring]) -> ScoringResult:
    return ScoringResult(
        relevance_score=50,
        matched_objectives=[
            MatchedObjective(
                objective_id=o.id,
                objective_text=o.objective_text,
                match_score=50,
                explanation="Insufficient data for accurate scoring",
            )
            for o in objectives
        ],
        score_rationale=(
            "Could not generate detailed scoring due to parsing error. Manual review recommended."
        ),
        talking_points=[],
    )


async def save_scoring_result(
    session: AsyncSession,
    contact_id: str,
    event_id: str,
    workspace_id: str,
    result: ScoringResult,
    model_version: str,
) -> None:
    await GuestScoreRepository(session).upsert(
        contact_id,
        event_id,
        workspace_id,
        relevance_score=result.relevance_score,
        matched_objectives=[m.model_dump() for m in result.matched_objectives],
        score_rationale=result.score_rationale,
        talking_points=result.talking_points,
        scored_at=utcnow(),
        model_version=model_version,
    )
