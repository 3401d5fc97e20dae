"""Tests for the enrichment and scoring workers driven through the engine."""

import pytest
from sqlalchemy import select

from eventops.db.models import ContactRow, GuestScoreRow
from eventops.models.enums import JobKind, JobStatus
from eventops.workers.enrichment_worker import EnrichmentWorker
from eventops.workers.engine import JobEngine
from eventops.workers.scoring_worker import ScoringWorker

from conftest import OTHER_WORKSPACE, FakeEnrichmentProvider, FakeScoringModel


async def _contact(session_factory, contact_id):
    async with session_factory() as session:
        return await session.get(ContactRow, contact_id)


async def _scores(session_factory, event_id):
    async with session_factory() as session:
        result = await session.execute(select(GuestScoreRow).where(GuestScoreRow.event_id == event_id))
        return {row.contact_id: row for row in result.scalars().all()}


def _engine(session_factory, audit, provider=None, model=None):
    workers = {
        JobKind.ENRICHMENT: EnrichmentWorker(provider or FakeEnrichmentProvider()),
        JobKind.SCORING: ScoringWorker(model or FakeScoringModel()),
    }
    return JobEngine(session_factory, workers=workers, audit=audit, batch_size=10)


class TestEnrichmentWorker:
    @pytest.mark.asyncio
    async def test_successful_enrichment_updates_contact(self, session_factory, seed, audit, load_job):
        contact = await seed.contact("Grace Hopper", "grace@navy.mil", company="US Navy")
        job = await seed.job(JobKind.ENRICHMENT, [contact.id])

        await _engine(session_factory, audit).tick()

        row = await _contact(session_factory, contact.id)
        assert row.enrichment_status == "COMPLETED"
        assert row.industry == "Biotech"
        assert row.role_seniority == "Executive"
        assert row.ai_summary == "Grace Hopper runs things."
        assert row.enrichment_data == {"source": "fake"}
        assert row.enrichment_cost_cents == 3
        assert row.enriched_at is not None

        job_row = await load_job(JobKind.ENRICHMENT, job.id)
        assert job_row.status == JobStatus.COMPLETED
        assert job_row.completed_count == 1

    @pytest.mark.asyncio
    async def test_provider_miss_and_error_are_unit_failures(self, session_factory, seed, audit, load_job):
        ok = await seed.contact("Ok Person", "ok@x.com")
        miss = await seed.contact("Nobody Known", "nobody@x.com")
        slow = await seed.contact("Slow Lookup", "slow@x.com")
        job = await seed.job(JobKind.ENRICHMENT, [ok.id, miss.id, slow.id])
        provider = FakeEnrichmentProvider(failing={"Nobody Known"}, raising={"Slow Lookup"})

        result = await _engine(session_factory, audit, provider=provider).tick()

        assert result.enrichment_processed == 1
        assert result.enrichment_failed == 2
        job_row = await load_job(JobKind.ENRICHMENT, job.id)
        assert job_row.status == JobStatus.COMPLETED
        assert (job_row.completed_count, job_row.failed_count) == (1, 2)
        assert (await _contact(session_factory, miss.id)).enrichment_status == "FAILED"
        assert (await _contact(session_factory, slow.id)).enrichment_status == "FAILED"

    @pytest.mark.asyncio
    async def test_contact_from_other_workspace_is_not_enriched(self, session_factory, seed, audit, load_job):
        foreign = await seed.contact("Foreign Contact", "f@x.com", workspace_id=OTHER_WORKSPACE)
        job = await seed.job(JobKind.ENRICHMENT, [foreign.id, "ct_missing"])
        provider = FakeEnrichmentProvider()

        await _engine(session_factory, audit, provider=provider).tick()

        assert provider.seen == []
        job_row = await load_job(JobKind.ENRICHMENT, job.id)
        assert (job_row.completed_count, job_row.failed_count) == (0, 2)
        assert (await _contact(session_factory, foreign.id)).enrichment_status == "NOT_STARTED"


class TestScoringWorker:
    @pytest.mark.asyncio
    async def test_scores_are_saved_per_contact(self, session_factory, seed, audit, load_job):
        event = await seed.event(objectives=[("Meet biotech investors", 8), ("Find a CTO", 5)])
        a = await seed.contact("Alice", "alice@x.com")
        b = await seed.contact("Bob", "bob@x.com")
        job = await seed.job(JobKind.SCORING, [a.id, b.id], event_id=event.id)
        model = FakeScoringModel()

        result = await _engine(session_factory, audit, model=model).tick()

        assert result.scoring_processed == 2
        scores = await _scores(session_factory, event.id)
        assert set(scores) == {a.id, b.id}
        assert scores[a.id].relevance_score == 72
        assert scores[a.id].model_version == "fake-scorer-1"
        assert scores[a.id].talking_points == ["Ask about funding"]
        assert model.calls == [(a.id, "Founders Dinner"), (b.id, "Founders Dinner")]
        assert (await load_job(JobKind.SCORING, job.id)).status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_rescoring_overwrites_existing_score(self, session_factory, seed, audit):
        event = await seed.event(objectives=[("Meet investors", 5)])
        contact = await seed.contact("Alice", "alice@x.com")
        await seed.job(JobKind.SCORING, [contact.id], event_id=event.id)
        await _engine(session_factory, audit).tick()

        await seed.job(JobKind.SCORING, [contact.id], event_id=event.id)
        await _engine(session_factory, audit).tick()

        scores = await _scores(session_factory, event.id)
        assert len(scores) == 1

    @pytest.mark.asyncio
    async def test_model_error_is_unit_failure(self, session_factory, seed, audit, load_job):
        event = await seed.event(objectives=[("Meet investors", 5)])
        a = await seed.contact("Alice", "alice@x.com")
        b = await seed.contact("Bob", "bob@x.com")
        job = await seed.job(JobKind.SCORING, [a.id, b.id], event_id=event.id)

        result = await _engine(session_factory, audit, model=FakeScoringModel(failing={a.id})).tick()

        assert (result.scoring_processed, result.scoring_failed) == (1, 1)
        job_row = await load_job(JobKind.SCORING, job.id)
        assert job_row.status == JobStatus.COMPLETED
        assert (job_row.completed_count, job_row.failed_count) == (1, 1)
        assert set(await _scores(session_factory, event.id)) == {b.id}

    @pytest.mark.asyncio
    async def test_event_without_objectives_fails_job(self, session_factory, seed, audit, load_job):
        event = await seed.event(objectives=[])
        contact = await seed.contact("Alice", "alice@x.com")
        job = await seed.job(JobKind.SCORING, [contact.id], event_id=event.id)
        model = FakeScoringModel()

        result = await _engine(session_factory, audit, model=model).tick()

        job_row = await load_job(JobKind.SCORING, job.id)
        assert job_row.status == JobStatus.FAILED
        assert job_row.error_message == "No objectives defined for this event"
        assert job_row.completed_count == 0
        assert result.scoring_processed == 0
        assert model.calls == []
        assert audit.actions() == ["job.failed"]

    @pytest.mark.asyncio
    async def test_event_in_other_workspace_fails_job(self, session_factory, seed, audit, load_job):
        event = await seed.event(workspace_id=OTHER_WORKSPACE, objectives=[("Meet investors", 5)])
        contact = await seed.contact("Alice", "alice@x.com")
        job = await seed.job(JobKind.SCORING, [contact.id], event_id=event.id)

        await _engine(session_factory, audit).tick()

        job_row = await load_job(JobKind.SCORING, job.id)
        assert job_row.status == JobStatus.FAILED
        assert "not found" in job_row.error_message
