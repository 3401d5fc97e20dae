"""Tests for the batch-advance job engine."""

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import OperationalError

from eventops.db.models import EnrichmentJobRow
from eventops.models.enums import JobKind, JobStatus
from eventops.repositories.job_repo import JobRepository
from eventops.workers.engine import JobEngine

from conftest import FakeWorker


def _engine(session_factory, workers, audit, batch_size=10, fetch_limit=5):
    return JobEngine(session_factory, workers=workers, audit=audit, batch_size=batch_size, fetch_limit=fetch_limit)


def _assert_counters_consistent(job):
    assert job.completed_count + job.failed_count <= job.total_count
    if job.status == JobStatus.COMPLETED:
        assert job.completed_count + job.failed_count == job.total_count


@pytest.mark.asyncio
async def test_tick_with_no_jobs_returns_zero_counts(session_factory, fake_workers, audit):
    engine = _engine(session_factory, fake_workers, audit)
    result = await engine.tick()
    assert result.enrichment_processed == 0
    assert result.scoring_processed == 0
    assert audit.entries == []


@pytest.mark.asyncio
async def test_job_progresses_across_ticks_to_completed(session_factory, seed, fake_workers, audit, load_job):
    job = await seed.job(target_ids=["c1", "c2", "c3"])
    engine = _engine(session_factory, fake_workers, audit, batch_size=2)

    first = await engine.tick()
    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.status == JobStatus.IN_PROGRESS
    assert row.started_at is not None
    assert row.completed_at is None
    assert row.completed_count == 2
    _assert_counters_consistent(row)

    second = await engine.tick()
    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.status == JobStatus.COMPLETED
    assert row.completed_count == 3
    assert row.failed_count == 0
    assert row.completed_at is not None
    _assert_counters_consistent(row)

    assert first.enrichment_processed + second.enrichment_processed == 3
    assert [t for _, t in fake_workers[JobKind.ENRICHMENT].calls] == ["c1", "c2", "c3"]
    assert audit.actions() == ["job.completed"]


@pytest.mark.asyncio
async def test_started_at_is_kept_on_later_ticks(session_factory, seed, fake_workers, audit, load_job):
    job = await seed.job(target_ids=["c1", "c2", "c3"])
    engine = _engine(session_factory, fake_workers, audit, batch_size=1)

    await engine.tick()
    started = (await load_job(JobKind.ENRICHMENT, job.id)).started_at
    await engine.tick()
    assert (await load_job(JobKind.ENRICHMENT, job.id)).started_at == started


@pytest.mark.asyncio
async def test_empty_job_completes_on_first_tick_without_work(session_factory, seed, fake_workers, audit, load_job):
    job = await seed.job(target_ids=[])
    engine = _engine(session_factory, fake_workers, audit)

    result = await engine.tick()

    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.status == JobStatus.COMPLETED
    assert row.completed_at is not None
    assert result.enrichment_processed == 0
    assert fake_workers[JobKind.ENRICHMENT].calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [JobStatus.COMPLETED, JobStatus.FAILED])
async def test_terminal_job_is_not_touched(session_factory, seed, fake_workers, audit, load_job, status):
    job = await seed.job(target_ids=["c1", "c2"], status=status.value, completed_count=1, failed_count=0)
    engine = _engine(session_factory, fake_workers, audit)

    await engine.tick()
    await engine.tick()

    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.status == status
    assert row.completed_count == 1
    assert row.failed_count == 0
    assert fake_workers[JobKind.ENRICHMENT].calls == []


@pytest.mark.asyncio
async def test_unit_failures_are_counted_and_raising_worker_fails_job(session_factory, seed, audit, load_job):
    workers = {
        JobKind.ENRICHMENT: FakeWorker(JobKind.ENRICHMENT, fail_on={"c2"}, raise_on={"c3": RuntimeError("boom")}),
        JobKind.SCORING: FakeWorker(JobKind.SCORING),
    }
    job = await seed.job(target_ids=["c1", "c2", "c3", "c4"])
    engine = _engine(session_factory, workers, audit)

    # A raising unit is a job-level error; only "c2" is an ordinary unit failure.
    await engine.tick()
    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.status == JobStatus.FAILED
    assert row.error_message == "boom"
    assert row.completed_count == 0

    other = await seed.job(target_ids=["c1", "c2", "c4"])
    workers[JobKind.ENRICHMENT].raise_on.clear()
    result = await engine.tick()
    row = await load_job(JobKind.ENRICHMENT, other.id)
    assert row.status == JobStatus.COMPLETED
    assert row.completed_count == 2
    assert row.failed_count == 1
    assert result.enrichment_processed == 2
    assert result.enrichment_failed == 1


@pytest.mark.asyncio
async def test_progress_read_failure_fails_only_that_job(
    session_factory, seed, fake_workers, audit, load_job, monkeypatch
):
    broken = await seed.job(target_ids=["c1"])
    healthy = await seed.job(target_ids=["c9"])

    original = JobRepository.get_progress

    async def flaky_get_progress(self, job_id):
        if job_id == broken.id:
            raise OperationalError("SELECT completed_count", {}, Exception("DB error"))
        return await original(self, job_id)

    monkeypatch.setattr(JobRepository, "get_progress", flaky_get_progress)
    engine = _engine(session_factory, fake_workers, audit)

    result = await engine.tick()

    broken_row = await load_job(JobKind.ENRICHMENT, broken.id)
    assert broken_row.status == JobStatus.FAILED
    assert "DB error" in broken_row.error_message
    assert broken_row.completed_count == 0
    assert broken_row.completed_at is not None

    healthy_row = await load_job(JobKind.ENRICHMENT, healthy.id)
    assert healthy_row.status == JobStatus.COMPLETED

    assert result.enrichment_processed == 1
    assert result.scoring_processed == 0
    assert fake_workers[JobKind.ENRICHMENT].calls == [(healthy.id, "c9")]
    assert sorted(audit.actions()) == ["job.completed", "job.failed"]


@pytest.mark.asyncio
async def test_duplicate_targets_are_processed_independently(session_factory, seed, fake_workers, audit, load_job):
    job = await seed.job(target_ids=["c1", "c1", "c2"])
    engine = _engine(session_factory, fake_workers, audit)

    await engine.tick()

    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.total_count == 3
    assert row.completed_count == 3
    assert [t for _, t in fake_workers[JobKind.ENRICHMENT].calls] == ["c1", "c1", "c2"]


@pytest.mark.asyncio
async def test_resumes_from_persisted_counters(session_factory, seed, fake_workers, audit, load_job):
    """A job left IN_PROGRESS by a crashed tick resumes at its stored offset."""
    job = await seed.job(target_ids=["c1", "c2", "c3", "c4"], status="IN_PROGRESS", completed_count=1, failed_count=1)
    engine = _engine(session_factory, fake_workers, audit)

    await engine.tick()

    assert [t for _, t in fake_workers[JobKind.ENRICHMENT].calls] == ["c3", "c4"]
    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.status == JobStatus.COMPLETED
    assert (row.completed_count, row.failed_count) == (3, 1)


@pytest.mark.asyncio
async def test_overlapping_tick_does_not_double_count(session_factory, seed, audit, load_job):
    """A tick that loses the race to another tick throws its batch away."""
    job = await seed.job(target_ids=["c1", "c2"])
    inner_engine = _engine(session_factory, {JobKind.ENRICHMENT: FakeWorker(JobKind.ENRICHMENT)}, audit)

    class OverlappingWorker(FakeWorker):
        triggered = False

        async def process(self, job_snapshot, target_id, context, session):
            if not self.triggered:
                self.triggered = True
                await inner_engine.advance(JobKind.ENRICHMENT)
            return await super().process(job_snapshot, target_id, context, session)

    outer_engine = _engine(session_factory, {JobKind.ENRICHMENT: OverlappingWorker(JobKind.ENRICHMENT)}, audit)
    outer = await outer_engine.advance(JobKind.ENRICHMENT)

    row = await load_job(JobKind.ENRICHMENT, job.id)
    assert row.status == JobStatus.COMPLETED
    assert row.completed_count == 2
    assert row.failed_count == 0
    assert outer.processed == 0
    assert audit.actions() == ["job.completed"]


@pytest.mark.asyncio
async def test_job_deleted_mid_batch_is_a_no_op(session_factory, seed, audit, load_job):
    job = await seed.job(target_ids=["c1", "c2"])

    class DeletingWorker(FakeWorker):
        async def process(self, job_snapshot, target_id, context, session):
            async with session_factory() as other:
                await other.execute(delete(EnrichmentJobRow).where(EnrichmentJobRow.id == job_snapshot.id))
                await other.commit()
            return True

    engine = _engine(session_factory, {JobKind.ENRICHMENT: DeletingWorker(JobKind.ENRICHMENT)}, audit)
    result = await engine.advance(JobKind.ENRICHMENT)

    assert await load_job(JobKind.ENRICHMENT, job.id) is None
    assert result.processed == 0
    assert result.jobs_failed == 0


@pytest.mark.asyncio
async def test_fetch_limit_bounds_jobs_per_tick(session_factory, seed, fake_workers, audit, load_job):
    jobs = [await seed.job(target_ids=[f"c{i}"]) for i in range(3)]
    engine = _engine(session_factory, fake_workers, audit, fetch_limit=2)

    result = await engine.advance(JobKind.ENRICHMENT)

    assert result.jobs_seen == 2
    statuses = [(await load_job(JobKind.ENRICHMENT, j.id)).status for j in jobs]
    # Oldest first
    assert statuses == [JobStatus.COMPLETED, JobStatus.COMPLETED, JobStatus.PENDING]


@pytest.mark.asyncio
async def test_record_batch_rejects_stale_offset(db_session, seed):
    job = await seed.job(target_ids=["c1", "c2", "c3"], status="IN_PROGRESS", completed_count=1)
    repo = JobRepository(db_session, JobKind.ENRICHMENT)

    assert await repo.record_batch(job.id, expected_done=0, completed=1, failed=0) is False
    assert await repo.record_batch(job.id, expected_done=1, completed=5, failed=0) is False
    assert await repo.record_batch(job.id, expected_done=1, completed=1, failed=1) is True
    await db_session.commit()

    progress = await repo.get_progress(job.id)
    assert (progress.completed_count, progress.failed_count) == (2, 1)


@pytest.mark.asyncio
async def test_workspaces_are_processed_in_isolation(session_factory, seed, fake_workers, audit, load_job):
    mine = await seed.job(target_ids=["c1"], workspace_id="ws_a")
    theirs = await seed.job(target_ids=["c2"], workspace_id="ws_b")
    engine = _engine(session_factory, fake_workers, audit)

    await engine.tick()

    assert (await load_job(JobKind.ENRICHMENT, mine.id)).completed_count == 1
    assert (await load_job(JobKind.ENRICHMENT, theirs.id)).completed_count == 1
    entries = {e["entity_id"]: e["workspace_id"] for e in audit.entries}
    assert entries == {mine.id: "ws_a", theirs.id: "ws_b"}
