"""Pydantic models for waitlist promotion."""

from pydantic import BaseModel


class PromotionResult(BaseModel):
    promoted: bool
    promoted_id: str | None = None


class DeclineResult(BaseModel):
    invitation_id: str
    previous_status: str
    promotion: PromotionResult
