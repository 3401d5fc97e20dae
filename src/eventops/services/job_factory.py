"""Creation of enrichment and scoring jobs with a frozen target list."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.models.job import EnrichmentJobRow, ScoringJobRow
from eventops.errors.exceptions import NotFoundError
from eventops.models.enums import JobKind, JobStatus
from eventops.repositories.contact_repo import ContactRepository
from eventops.repositories.event_repo import EventRepository
from eventops.repositories.job_repo import JobRepository
from eventops.services.id_generator import ENRICHMENT_JOB, SCORING_JOB, generate_id

logger = logging.getLogger(__name__)


async def _freeze_targets(session: AsyncSession, workspace_id: str, contact_ids: list[str]) -> list[str]:
    """Keep workspace contacts only, first occurrence wins, input order preserved."""
    known = await ContactRepository(session).filter_ids_in_workspace(workspace_id, list(set(contact_ids)))
    return [cid for cid in dict.fromkeys(contact_ids) if cid in known]


async def create_enrichment_job(
    session: AsyncSession,
    workspace_id: str,
    contact_ids: list[str],
    provider: str | None = None,
) -> EnrichmentJobRow:
    targets = await _freeze_targets(session, workspace_id, contact_ids)
    job = await JobRepository(session, JobKind.ENRICHMENT).create(
        id=generate_id(ENRICHMENT_JOB),
        workspace_id=workspace_id,
        status=JobStatus.PENDING,
        target_ids=targets,
        total_count=len(targets),
        completed_count=0,
        failed_count=0,
        provider=provider,
    )
    await session.commit()
    logger.info("Created enrichment job %s with %d targets", job.id, len(targets))
    return job


async def create_scoring_job(
    session: AsyncSession,
    workspace_id: str,
    event_id: str,
    contact_ids: list[str],
) -> ScoringJobRow:
    if await EventRepository(session).get(event_id, workspace_id) is None:
        raise NotFoundError("Event", event_id)

    targets = await _freeze_targets(session, workspace_id, contact_ids)
    job = await JobRepository(session, JobKind.SCORING).create(
        id=generate_id(SCORING_JOB),
        workspace_id=workspace_id,
        event_id=event_id,
        status=JobStatus.PENDING,
        target_ids=targets,
        total_count=len(targets),
        completed_count=0,
        failed_count=0,
    )
    await session.commit()
    logger.info("Created scoring job %s for event %s with %d targets", job.id, event_id, len(targets))
    return job
