"""Pydantic models for enrichment/scoring job state and scheduler ticks."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from eventops.models.enums import JobKind, JobStatus


class JobStatusModel(BaseModel):
    """Persisted state of a job as reported to progress pollers."""

    model_config = ConfigDict(extra="forbid", from_attributes=True)

    id: str
    kind: JobKind
    workspace_id: str
    event_id: str | None = None
    status: JobStatus
    total_count: int = Field(..., ge=0)
    completed_count: int = Field(..., ge=0)
    failed_count: int = Field(..., ge=0)
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None

    @computed_field
    @property
    def progress_pct(self) -> float:
        if self.total_count == 0:
            return 100.0 if self.status == JobStatus.COMPLETED else 0.0
        done = self.completed_count + self.failed_count
        return round(100.0 * done / self.total_count, 1)


class CreateEnrichmentJobRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    contact_ids: list[str] = Field(..., max_length=10_000)


class CreateScoringJobRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    event_id: str
    contact_ids: list[str] = Field(..., max_length=10_000)


class JobProgress(BaseModel):
    """Fresh counter snapshot read at the start of a batch."""

    status: JobStatus
    total_count: int
    completed_count: int
    failed_count: int

    @property
    def done(self) -> int:
        return self.completed_count + self.failed_count


class AdvanceResult(BaseModel):
    """Outcome of one advance() pass over a single job kind."""

    kind: JobKind
    jobs_seen: int = 0
    processed: int = 0
    failed: int = 0
    jobs_completed: int = 0
    jobs_failed: int = 0


class TickResult(BaseModel):
    """Aggregate counts returned by one scheduler tick."""

    enrichment_processed: int = 0
    scoring_processed: int = 0
    enrichment_failed: int = 0
    scoring_failed: int = 0
