"""Batch-advance engine for enrichment and scoring jobs.

Each call to ``advance`` moves every active job of one kind forward by at
most one batch. Nothing is remembered between calls: progress is re-read
from the job table, and the batch's tallies are written back with a
conditional UPDATE that only applies if no overlapping tick advanced the
job in the meantime. A tick that dies mid-batch leaves the job at its last
persisted counters and the next tick redoes that batch.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventops.config import settings
from eventops.events.audit import JOB_COMPLETED, JOB_FAILED, AuditSink
from eventops.logging_config import job_context
from eventops.models.enums import TERMINAL_JOB_STATUSES, JobKind, JobStatus
from eventops.models.job import AdvanceResult, TickResult
from eventops.repositories.job_repo import JobRepository
from eventops.workers.base import BaseJobWorker, JobSnapshot

logger = logging.getLogger(__name__)


@dataclass
class _JobOutcome:
    succeeded: int = 0
    failed: int = 0
    completed: bool = False


class JobEngine:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        workers: dict[JobKind, BaseJobWorker] | None = None,
        audit: AuditSink | None = None,
        batch_size: int | None = None,
        fetch_limit: int | None = None,
    ):
        if workers is None:
            from eventops.workers.registry import default_workers

            workers = default_workers()
        self.session_factory = session_factory
        self.workers = workers
        self.audit = audit
        self.batch_size = batch_size or settings.job_batch_size
        self.fetch_limit = fetch_limit or settings.job_fetch_limit

    async def advance(self, kind: JobKind) -> AdvanceResult:
        """Advance every active job of ``kind`` by one batch."""
        result = AdvanceResult(kind=kind)

        async with self.session_factory() as session:
            rows = await JobRepository(session, kind).list_active(self.fetch_limit)
            jobs = [JobSnapshot.from_row(row) for row in rows]
        result.jobs_seen = len(jobs)

        for job in jobs:
            with job_context(kind.value, job.id):
                try:
                    outcome = await self._advance_job(kind, job)
                except Exception as exc:
                    logger.exception("%s job %s failed", kind.value.capitalize(), job.id)
                    if await self._fail_job(kind, job, exc):
                        result.jobs_failed += 1
                    continue

            result.processed += outcome.succeeded
            result.failed += outcome.failed
            if outcome.completed:
                result.jobs_completed += 1

        return result

    async def _advance_job(self, kind: JobKind, job: JobSnapshot) -> _JobOutcome:
        worker = self.workers[kind]
        outcome = _JobOutcome()

        async with self.session_factory() as session:
            repo = JobRepository(session, kind)

            progress = await repo.get_progress(job.id)
            if progress is None:
                logger.info("Job %s no longer exists; skipping", job.id)
                return outcome
            if progress.status in TERMINAL_JOB_STATUSES:
                return outcome

            done = progress.done
            if done >= progress.total_count:
                outcome.completed = await self._complete(session, repo, kind, job)
                return outcome

            batch = job.target_ids[done:done + self.batch_size]

            if progress.status == JobStatus.PENDING:
                await repo.mark_in_progress(job.id)
                await session.commit()

            context = await worker.prepare(job, session)

            succeeded = failed = 0
            for target_id in batch:
                if await worker.process(job, target_id, context, session):
                    succeeded += 1
                else:
                    failed += 1

            if not await repo.record_batch(job.id, done, succeeded, failed):
                await session.rollback()
                logger.warning(
                    "Job %s was advanced past %d by another tick; discarding this batch",
                    job.id, done,
                )
                return outcome
            await session.commit()

            outcome.succeeded = succeeded
            outcome.failed = failed
            logger.info(
                "Advanced %s job %s: %d/%d (+%d ok, +%d failed)",
                kind.value, job.id, done + succeeded + failed, progress.total_count, succeeded, failed,
            )

            if done + succeeded + failed >= progress.total_count:
                outcome.completed = await self._complete(session, repo, kind, job)

        return outcome

    async def _complete(self, session: AsyncSession, repo: JobRepository, kind: JobKind, job: JobSnapshot) -> bool:
        if not await repo.mark_completed(job.id):
            return False
        await session.commit()

        final = await repo.get_progress(job.id)
        logger.info("%s job %s completed", kind.value.capitalize(), job.id)
        if self.audit is not None and final is not None:
            self.audit.log_action(
                JOB_COMPLETED,
                f"{kind.value}_job",
                entity_id=job.id,
                workspace_id=job.workspace_id,
                new_value={
                    "status": JobStatus.COMPLETED.value,
                    "completed_count": final.completed_count,
                    "failed_count": final.failed_count,
                    "total_count": final.total_count,
                },
            )
        return True

    async def _fail_job(self, kind: JobKind, job: JobSnapshot, exc: Exception) -> bool:
        """Record a job-level failure in a fresh session. Returns True if the job was marked."""
        message = str(exc) or exc.__class__.__name__
        try:
            async with self.session_factory() as session:
                marked = await JobRepository(session, kind).mark_failed(job.id, message)
                await session.commit()
        except SQLAlchemyError:
            logger.exception("Could not mark %s job %s as FAILED", kind.value, job.id)
            return False

        if marked and self.audit is not None:
            self.audit.log_action(
                JOB_FAILED,
                f"{kind.value}_job",
                entity_id=job.id,
                workspace_id=job.workspace_id,
                new_value={"status": JobStatus.FAILED.value, "error_message": message},
            )
        return marked

    async def tick(self) -> TickResult:
        """One scheduler tick: advance each job kind once."""
        enrichment = await self.advance(JobKind.ENRICHMENT)
        scoring = await self.advance(JobKind.SCORING)
        return TickResult(
            enrichment_processed=enrichment.processed,
            scoring_processed=scoring.processed,
            enrichment_failed=enrichment.failed,
            scoring_failed=scoring.failed,
        )
