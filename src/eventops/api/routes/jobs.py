"""Enrichment / scoring job creation and progress polling."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.dependencies import get_db
from eventops.errors.exceptions import NotFoundError
from eventops.models.enums import JobKind
from eventops.models.job import CreateEnrichmentJobRequest, CreateScoringJobRequest, JobStatusModel
from eventops.repositories.job_repo import JobRepository
from eventops.services.job_factory import create_enrichment_job, create_scoring_job

router = APIRouter(prefix="/workspaces/{workspace_id}", tags=["Jobs"])


def _to_model(kind: JobKind, row) -> dict:
    return JobStatusModel(
        id=row.id,
        kind=kind,
        workspace_id=row.workspace_id,
        event_id=getattr(row, "event_id", None),
        status=row.status,
        total_count=row.total_count,
        completed_count=row.completed_count,
        failed_count=row.failed_count,
        error_message=row.error_message,
        started_at=row.started_at,
        completed_at=row.completed_at,
        created_at=row.created_at,
    ).model_dump(mode="json")


async def _get_job(db: AsyncSession, kind: JobKind, workspace_id: str, job_id: str) -> dict:
    row = await JobRepository(db, kind).get_in_workspace(job_id, workspace_id)
    if not row:
        raise NotFoundError(f"{kind.value.capitalize()} job", job_id)
    return _to_model(kind, row)


@router.post("/enrichment-jobs", status_code=201)
async def create_enrichment_job_endpoint(
    workspace_id: str,
    body: CreateEnrichmentJobRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    row = await create_enrichment_job(db, workspace_id, body.contact_ids)
    return _to_model(JobKind.ENRICHMENT, row)


@router.get("/enrichment-jobs/{job_id}")
async def get_enrichment_job(workspace_id: str, job_id: str, db: AsyncSession = Depends(get_db)) -> dict:
    return await _get_job(db, JobKind.ENRICHMENT, workspace_id, job_id)


@router.post("/scoring-jobs", status_code=201)
async def create_scoring_job_endpoint(
    workspace_id: str,
    body: CreateScoringJobRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    row = await create_scoring_job(db, workspace_id, body.event_id, body.contact_ids)
    return _to_model(JobKind.SCORING, row)


@router.get("/scoring-jobs/{job_id}")
async def get_scoring_job(workspace_id: str, job_id: str, db: AsyncSession = Depends(get_db)) -> dict:
    return await _get_job(db, JobKind.SCORING, workspace_id, job_id)
