"""Enrichment and scoring job tables (the progress store)."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from eventops.db.base import Base, TimestampMixin


class JobColumnsMixin(TimestampMixin):
    """Columns shared by every job table."""

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    workspace_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING", index=True)
    target_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class EnrichmentJobRow(Base, JobColumnsMixin):
    __tablename__ = "enrichment_jobs"

    provider: Mapped[str | None] = mapped_column(String(50), nullable=True)


class ScoringJobRow(Base, JobColumnsMixin):
    __tablename__ = "scoring_jobs"

    event_id: Mapped[str | None] = mapped_column(
        String(128), ForeignKey("events.id"), nullable=True, index=True
    )
