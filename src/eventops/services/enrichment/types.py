"""Pluggable enrichment provider interface.

A provider turns what we already know about a contact into extra profile
data. Providers never raise for an ordinary miss; they return
``EnrichmentResult(success=False, error=...)`` and the worker records the
contact as failed.
"""

from typing import Any, Protocol

from pydantic import BaseModel, Field


class EnrichmentInput(BaseModel):
    full_name: str
    emails: list[dict] = Field(default_factory=list)
    company: str | None = None
    title: str | None = None
    linkedin_url: str | None = None


class EnrichmentResult(BaseModel):
    success: bool
    provider: str

    title: str | None = None
    company: str | None = None
    industry: str | None = None
    role_seniority: str | None = None
    linkedin_url: str | None = None
    twitter_url: str | None = None
    net_worth_range: str | None = None
    board_affiliations: list[str] = Field(default_factory=list)
    ai_summary: str | None = None

    raw_data: dict[str, Any] = Field(default_factory=dict)

    cost_cents: int = 0
    error: str | None = None


class EnrichmentProvider(Protocol):
    name: str

    async def enrich(self, data: EnrichmentInput) -> EnrichmentResult: ...
