"""Periodic trigger endpoints (called by an external cron every minute / daily)."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from eventops.dependencies import RequireCronSecret, get_job_engine
from eventops.errors.exceptions import EventOpsError
from eventops.workers.scheduler import cleanup_expired, process_jobs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["Cron"], dependencies=[RequireCronSecret])


@router.get("/process-jobs")
async def process_jobs_endpoint(engine=Depends(get_job_engine)) -> dict:
    try:
        result = await process_jobs(engine)
    except Exception as exc:
        logger.exception("Cron: process-jobs failed")
        raise EventOpsError("JOB_PROCESSING_FAILED", "Job processing failed") from exc

    return {
        "ok": True,
        **result.model_dump(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/cleanup")
async def cleanup_endpoint(request: Request) -> dict:
    results = await cleanup_expired(request.app.state.db_session_factory)
    return {"ok": True, **results}
