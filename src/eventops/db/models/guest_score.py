"""Per-event relevance score for a contact."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eventops.db.base import Base, TimestampMixin


class GuestScoreRow(Base, TimestampMixin):
    __tablename__ = "guest_scores"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    contact_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("contacts.id"), nullable=False, index=True
    )
    event_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("events.id"), nullable=False, index=True
    )
    workspace_id: Mapped[str] = mapped_column(String(128), nullable=False)
    relevance_score: Mapped[int] = mapped_column(Integer, nullable=False)
    matched_objectives: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    score_rationale: Mapped[str | None] = mapped_column(Text, nullable=True)
    talking_points: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    scored_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    model_version: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint("contact_id", "event_id", name="uq_guest_score_contact_event"),
    )
