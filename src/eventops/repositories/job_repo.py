"""Job repositories over the enrichment and scoring progress tables.

Every state change is a single conditional UPDATE so that overlapping
scheduler ticks never overwrite each other's counters.
"""

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.base import utcnow
from eventops.db.models.job import EnrichmentJobRow, ScoringJobRow
from eventops.models.enums import ACTIVE_JOB_STATUSES, TERMINAL_JOB_STATUSES, JobKind, JobStatus
from eventops.models.job import JobProgress
from eventops.repositories.base import BaseRepository

JobRow = EnrichmentJobRow | ScoringJobRow

_JOB_MODELS: dict[JobKind, type] = {
    JobKind.ENRICHMENT: EnrichmentJobRow,
    JobKind.SCORING: ScoringJobRow,
}


class JobRepository(BaseRepository):
    def __init__(self, session: AsyncSession, kind: JobKind):
        super().__init__(session, _JOB_MODELS[kind])
        self.kind = kind

    @property
    def _done(self):
        return self.model_class.completed_count + self.model_class.failed_count

    async def get(self, job_id: str) -> JobRow | None:
        return await self.get_by_id(job_id)

    async def list_active(self, limit: int) -> list[JobRow]:
        """PENDING / IN_PROGRESS jobs, oldest first, at most ``limit``."""
        stmt = (
            select(self.model_class)
            .where(self.model_class.status.in_(ACTIVE_JOB_STATUSES))
            .order_by(self.model_class.created_at.asc(), self.model_class.id.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_progress(self, job_id: str) -> JobProgress | None:
        """Read status and counters straight from the table.

        Selects columns rather than the entity so a row already in the
        session's identity map cannot hand back stale counters.
        """
        m = self.model_class
        stmt = select(m.status, m.total_count, m.completed_count, m.failed_count).where(m.id == job_id)
        row = (await self.session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return JobProgress(
            status=row.status,
            total_count=row.total_count,
            completed_count=row.completed_count,
            failed_count=row.failed_count,
        )

    async def _conditional_update(self, *conditions, **values) -> bool:
        stmt = (
            update(self.model_class)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def mark_in_progress(self, job_id: str) -> bool:
        m = self.model_class
        return await self._conditional_update(
            m.id == job_id,
            m.status == JobStatus.PENDING,
            status=JobStatus.IN_PROGRESS,
            started_at=func.coalesce(m.started_at, utcnow()),
            updated_at=utcnow(),
        )

    async def record_batch(self, job_id: str, expected_done: int, completed: int, failed: int) -> bool:
        """Add a batch's tallies if nobody else advanced the job since ``expected_done`` was read."""
        m = self.model_class
        return await self._conditional_update(
            m.id == job_id,
            m.status.in_(ACTIVE_JOB_STATUSES),
            self._done == expected_done,
            m.total_count >= expected_done + completed + failed,
            completed_count=m.completed_count + completed,
            failed_count=m.failed_count + failed,
            updated_at=utcnow(),
        )

    async def mark_completed(self, job_id: str) -> bool:
        m = self.model_class
        now = utcnow()
        return await self._conditional_update(
            m.id == job_id,
            m.status.in_(ACTIVE_JOB_STATUSES),
            self._done >= m.total_count,
            status=JobStatus.COMPLETED,
            completed_at=now,
            updated_at=now,
        )

    async def mark_failed(self, job_id: str, message: str) -> bool:
        m = self.model_class
        now = utcnow()
        return await self._conditional_update(
            m.id == job_id,
            m.status.in_(ACTIVE_JOB_STATUSES),
            status=JobStatus.FAILED,
            error_message=message[:2000],
            completed_at=now,
            updated_at=now,
        )

    async def delete_terminal_before(self, cutoff: datetime) -> int:
        stmt = delete(self.model_class).where(
            self.model_class.status.in_(TERMINAL_JOB_STATUSES),
            self.model_class.completed_at < cutoff,
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
