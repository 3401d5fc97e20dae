"""Tests for the scheduler tick and retention cleanup."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from eventops.db.models import AuditLogRow, EnrichmentJobRow, ScoringJobRow
from eventops.models.enums import JobKind
from eventops.workers.engine import JobEngine
from eventops.workers.scheduler import cleanup_expired, process_jobs

NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_process_jobs_runs_one_tick(session_factory, seed, fake_workers, audit):
    await seed.job(JobKind.ENRICHMENT, ["c1", "c2"])
    await seed.job(JobKind.SCORING, ["c3"], event_id=None)

    result = await process_jobs(JobEngine(session_factory, workers=fake_workers, audit=audit))

    assert result.enrichment_processed == 2
    assert result.scoring_processed == 1


@pytest.mark.asyncio
async def test_cleanup_removes_only_expired_terminal_rows(session_factory, seed):
    old = NOW - timedelta(days=45)
    recent = NOW - timedelta(days=2)
    expired = await seed.job(JobKind.ENRICHMENT, ["c1"], status="COMPLETED", completed_count=1, completed_at=old)
    fresh = await seed.job(JobKind.ENRICHMENT, ["c1"], status="FAILED", completed_at=recent)
    running = await seed.job(JobKind.ENRICHMENT, ["c1"], status="IN_PROGRESS")
    await seed.job(JobKind.SCORING, [], status="COMPLETED", completed_at=old)
    await seed.add(AuditLogRow(id="aud_old", action="job.completed", entity_type="enrichment_job",
                               created_at=NOW - timedelta(days=400)))
    await seed.add(AuditLogRow(id="aud_new", action="job.completed", entity_type="enrichment_job",
                               created_at=recent))

    results = await cleanup_expired(session_factory, now=NOW)

    assert results == {"audit_logs_deleted": 1, "enrichment_jobs_deleted": 1, "scoring_jobs_deleted": 1}
    async with session_factory() as session:
        remaining = set((await session.execute(select(EnrichmentJobRow.id))).scalars().all())
        scoring = (await session.execute(select(ScoringJobRow.id))).scalars().all()
        audit_ids = (await session.execute(select(AuditLogRow.id))).scalars().all()
    assert remaining == {fresh.id, running.id}
    assert expired.id not in remaining
    assert scoring == []
    assert audit_ids == ["aud_new"]
