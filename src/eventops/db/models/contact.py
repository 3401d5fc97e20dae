"""Contact table."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from eventops.db.base import Base, TimestampMixin


class ContactRow(Base, TimestampMixin):
    __tablename__ = "contacts"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    workspace_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    emails: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    primary_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phones: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    source: Mapped[str] = mapped_column(String(30), nullable=False, default="MANUAL")
    source_detail: Mapped[str | None] = mapped_column(String(200), nullable=True)
    dedup_key: Mapped[str | None] = mapped_column(String(600), nullable=True, index=True)

    enrichment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="NOT_STARTED")
    enrichment_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    ai_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role_seniority: Mapped[str | None] = mapped_column(String(100), nullable=True)
    enriched_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    enrichment_cost_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("workspace_id", "primary_email", name="uq_contact_workspace_email"),
    )
