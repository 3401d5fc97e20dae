"""Scheduler entry point: one tick advances every job kind once."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventops.config import settings
from eventops.models.enums import JobKind
from eventops.models.job import TickResult
from eventops.repositories.audit_log_repo import AuditLogRepository
from eventops.repositories.job_repo import JobRepository
from eventops.workers.engine import JobEngine

logger = logging.getLogger(__name__)


async def process_jobs(engine: JobEngine) -> TickResult:
    """Run one tick and log its aggregate counts."""
    result = await engine.tick()
    logger.info(
        "Processed jobs tick (enrichment=%d, scoring=%d, enrichment_failed=%d, scoring_failed=%d)",
        result.enrichment_processed,
        result.scoring_processed,
        result.enrichment_failed,
        result.scoring_failed,
    )
    return result


async def cleanup_expired(
    session_factory: async_sessionmaker[AsyncSession],
    now: datetime | None = None,
) -> dict[str, int]:
    """Delete terminal jobs and audit logs past their retention window."""
    now = now or datetime.now(timezone.utc)
    job_cutoff = now - timedelta(days=settings.job_retention_days)
    audit_cutoff = now - timedelta(days=settings.audit_log_retention_days)

    async with session_factory() as session:
        results = {
            "audit_logs_deleted": await AuditLogRepository(session).delete_before(audit_cutoff),
            "enrichment_jobs_deleted": await JobRepository(session, JobKind.ENRICHMENT).delete_terminal_before(job_cutoff),
            "scoring_jobs_deleted": await JobRepository(session, JobKind.SCORING).delete_terminal_before(job_cutoff),
        }
        await session.commit()

    logger.info("Retention cleanup finished: %s", results)
    return results


async def run_scheduler(app) -> None:
    """Background task that ticks the job engine on a fixed interval."""
    interval = settings.scheduler_interval_seconds
    logger.info("Job scheduler started (interval=%ds)", interval)

    while True:
        try:
            await asyncio.sleep(interval)

            engine = getattr(app.state, "job_engine", None)
            if engine is None:
                continue

            await process_jobs(engine)

        except asyncio.CancelledError:
            logger.info("Job scheduler stopped")
            break
        except Exception as exc:
            logger.exception("Scheduler error: %s", exc)
            # Continue running despite errors
