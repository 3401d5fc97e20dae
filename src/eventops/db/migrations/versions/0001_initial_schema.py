"""Initial schema: jobs, contacts, events, invitations, guest scores, audit logs

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _job_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("workspace_id", sa.String(128), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("target_ids", sa.JSON(), nullable=False),
        sa.Column("total_count", sa.Integer(), nullable=False),
        sa.Column("completed_count", sa.Integer(), nullable=False),
        sa.Column("failed_count", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    ]


def upgrade() -> None:
    op.create_table(
        "events",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("workspace_id", sa.String(128), nullable=False, index=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("total_capacity", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_table(
        "event_objectives",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("event_id", sa.String(128), sa.ForeignKey("events.id"), nullable=False, index=True),
        sa.Column("workspace_id", sa.String(128), nullable=False),
        sa.Column("objective_text", sa.Text(), nullable=False),
        sa.Column("weight", sa.Integer(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "contacts",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("workspace_id", sa.String(128), nullable=False, index=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("emails", sa.JSON(), nullable=False),
        sa.Column("primary_email", sa.String(320), nullable=True),
        sa.Column("phones", sa.JSON(), nullable=False),
        sa.Column("company", sa.String(200), nullable=True),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("linkedin_url", sa.String(500), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("internal_notes", sa.Text(), nullable=True),
        sa.Column("source", sa.String(30), nullable=False),
        sa.Column("source_detail", sa.String(200), nullable=True),
        sa.Column("dedup_key", sa.String(600), nullable=True, index=True),
        sa.Column("enrichment_status", sa.String(20), nullable=False),
        sa.Column("enrichment_data", sa.JSON(), nullable=True),
        sa.Column("ai_summary", sa.Text(), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("role_seniority", sa.String(100), nullable=True),
        sa.Column("enriched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("enrichment_cost_cents", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("workspace_id", "primary_email", name="uq_contact_workspace_email"),
    )
    op.create_table(
        "invitations",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("workspace_id", sa.String(128), nullable=False, index=True),
        sa.Column("event_id", sa.String(128), sa.ForeignKey("events.id"), nullable=False, index=True),
        sa.Column("contact_id", sa.String(128), sa.ForeignKey("contacts.id"), nullable=True),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, index=True),
        sa.Column("tier", sa.String(20), nullable=True),
        sa.Column("priority", sa.String(20), nullable=True),
        sa.Column("internal_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "guest_scores",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("contact_id", sa.String(128), sa.ForeignKey("contacts.id"), nullable=False, index=True),
        sa.Column("event_id", sa.String(128), sa.ForeignKey("events.id"), nullable=False, index=True),
        sa.Column("workspace_id", sa.String(128), nullable=False),
        sa.Column("relevance_score", sa.Integer(), nullable=False),
        sa.Column("matched_objectives", sa.JSON(), nullable=False),
        sa.Column("score_rationale", sa.Text(), nullable=True),
        sa.Column("talking_points", sa.JSON(), nullable=False),
        sa.Column("scored_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("model_version", sa.String(100), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("contact_id", "event_id", name="uq_guest_score_contact_event"),
    )
    op.create_table(
        "enrichment_jobs",
        *_job_columns(),
        sa.Column("provider", sa.String(50), nullable=True),
    )
    op.create_table(
        "scoring_jobs",
        *_job_columns(),
        sa.Column("event_id", sa.String(128), sa.ForeignKey("events.id"), nullable=True, index=True),
    )
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(128), primary_key=True),
        sa.Column("workspace_id", sa.String(128), nullable=True, index=True),
        sa.Column("actor_email", sa.String(320), nullable=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(128), nullable=True),
        sa.Column("previous_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    for table in (
        "audit_logs",
        "scoring_jobs",
        "enrichment_jobs",
        "guest_scores",
        "invitations",
        "contacts",
        "event_objectives",
        "events",
    ):
        op.drop_table(table)
