"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventops.db.base import Base
# Import all models to register with Base.metadata
import eventops.db.models  # noqa: F401
from eventops.db.models import (
    ContactRow,
    EnrichmentJobRow,
    EventObjectiveRow,
    EventRow,
    InvitationRow,
    ScoringJobRow,
)
from eventops.events.audit import AuditSink
from eventops.models.enums import JobKind
from eventops.services.enrichment.types import EnrichmentResult
from eventops.services.id_generator import generate_id
from eventops.services.scoring.engine import ScoringResult
from eventops.workers.base import BaseJobWorker

WORKSPACE = "ws_test"
OTHER_WORKSPACE = "ws_other"


class RecordingAuditSink(AuditSink):
    """Audit sink that keeps entries in memory instead of scheduling writes."""

    def __init__(self):
        super().__init__()
        self.entries: list[dict] = []

    def log_action(self, action, entity_type, **kwargs):
        self.entries.append({"action": action, "entity_type": entity_type, **kwargs})

    def actions(self) -> list[str]:
        return [e["action"] for e in self.entries]


class FakeWorker(BaseJobWorker):
    """Records every target it is handed; targets in ``fail_on`` report failure."""

    def __init__(self, kind: JobKind, fail_on=(), raise_on=()):
        self.kind = kind
        self.fail_on = set(fail_on)
        self.raise_on = dict(raise_on)
        self.calls: list[tuple[str, str]] = []

    async def process(self, job, target_id, context, session):
        self.calls.append((job.id, target_id))
        if target_id in self.raise_on:
            raise self.raise_on[target_id]
        return target_id not in self.fail_on


class FakeEnrichmentProvider:
    name = "fake"

    def __init__(self, failing=(), raising=()):
        self.failing = set(failing)
        self.raising = set(raising)
        self.seen: list[str] = []

    async def enrich(self, data):
        self.seen.append(data.full_name)
        if data.full_name in self.raising:
            raise RuntimeError("provider timeout")
        if data.full_name in self.failing:
            return EnrichmentResult(success=False, provider=self.name, error="no match")
        return EnrichmentResult(
            success=True,
            provider=self.name,
            industry="Biotech",
            role_seniority="Executive",
            ai_summary=f"{data.full_name} runs things.",
            raw_data={"source": "fake"},
            cost_cents=3,
        )


class FakeScoringModel:
    model_version = "fake-scorer-1"

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.calls: list[tuple[str, str]] = []

    async def score(self, contact, objectives, event_title):
        self.calls.append((contact.id, event_title))
        if contact.id in self.failing:
            raise RuntimeError("model overloaded")
        return ScoringResult(relevance_score=72, score_rationale="Good fit", talking_points=["Ask about funding"])


class Seeder:
    """Inserts rows for tests and commits immediately."""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def tick_clock(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    async def add(self, row):
        async with self.session_factory() as session:
            session.add(row)
            await session.commit()
        return row

    async def contact(self, full_name="Ada Lovelace", email=None, workspace_id=WORKSPACE, **kwargs):
        emails = [{"email": email, "type": "work", "primary": True}] if email else []
        return await self.add(ContactRow(
            id=kwargs.pop("id", generate_id("ct_")),
            workspace_id=workspace_id,
            full_name=full_name,
            emails=emails,
            primary_email=email.lower() if email else None,
            **kwargs,
        ))

    async def job(self, kind=JobKind.ENRICHMENT, target_ids=(), workspace_id=WORKSPACE, **kwargs):
        model = EnrichmentJobRow if kind == JobKind.ENRICHMENT else ScoringJobRow
        target_ids = list(target_ids)
        fields = {
            "id": generate_id("job_"),
            "workspace_id": workspace_id,
            "status": "PENDING",
            "target_ids": target_ids,
            "total_count": len(target_ids),
            "completed_count": 0,
            "failed_count": 0,
            "created_at": self.tick_clock(),
        }
        fields.update(kwargs)
        return await self.add(model(**fields))

    async def event(self, total_capacity=None, workspace_id=WORKSPACE, title="Founders Dinner", objectives=()):
        event = await self.add(EventRow(
            id=generate_id("evt_"),
            workspace_id=workspace_id,
            title=title,
            total_capacity=total_capacity,
        ))
        for order, (text, weight) in enumerate(objectives):
            await self.add(EventObjectiveRow(
                id=generate_id("obj_"),
                event_id=event.id,
                workspace_id=workspace_id,
                objective_text=text,
                weight=weight,
                sort_order=order,
            ))
        return event

    async def invitation(self, event, status, tier=None, priority=None, created_at=None, **kwargs):
        return await self.add(InvitationRow(
            id=kwargs.pop("id", generate_id("inv_")),
            workspace_id=kwargs.pop("workspace_id", event.workspace_id),
            event_id=event.id,
            full_name=kwargs.pop("full_name", "Guest"),
            status=status,
            tier=tier,
            priority=priority,
            created_at=created_at or self.tick_clock(),
            **kwargs,
        ))


@pytest.fixture
async def db_engine(tmp_path):
    """File-backed SQLite so that every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'eventops_test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture
def audit():
    return RecordingAuditSink()


@pytest.fixture
def fake_workers():
    return {
        JobKind.ENRICHMENT: FakeWorker(JobKind.ENRICHMENT),
        JobKind.SCORING: FakeWorker(JobKind.SCORING),
    }


@pytest.fixture
def app(session_factory, audit, fake_workers):
    """Create a test application wired to the test database and fakes."""
    from eventops.main import create_app
    from eventops.workers.engine import JobEngine

    _app = create_app()
    _app.state.db_session_factory = session_factory
    _app.state.audit = audit
    _app.state.job_engine = JobEngine(session_factory, workers=fake_workers, audit=audit, batch_size=10)
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def load_job(session_factory):
    """Return a coroutine that reads a job row in a fresh session."""
    from eventops.repositories.job_repo import JobRepository

    async def _load(kind: JobKind, job_id: str):
        async with session_factory() as session:
            return await JobRepository(session, kind).get(job_id)

    return _load
