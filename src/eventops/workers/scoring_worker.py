"""Scoring unit of work: one contact against the job's event objectives."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.errors.exceptions import JobProcessingError
from eventops.models.enums import JobKind
from eventops.repositories.contact_repo import ContactRepository
from eventops.repositories.event_repo import EventRepository
from eventops.services.scoring.engine import (
    ContactForScoring,
    ObjectiveForScoring,
    ScoringModel,
    save_scoring_result,
)
from eventops.workers.base import BaseJobWorker, JobSnapshot

logger = logging.getLogger(__name__)


@dataclass
class ScoringContext:
    event_title: str
    objectives: list[ObjectiveForScoring]


class ScoringWorker(BaseJobWorker):
    kind = JobKind.SCORING

    def __init__(self, model: ScoringModel):
        self.model = model

    async def prepare(self, job: JobSnapshot, session: AsyncSession) -> ScoringContext:
        if job.event_id is None:
            raise JobProcessingError("Scoring job has no event")

        events = EventRepository(session)
        event = await events.get(job.event_id, job.workspace_id)
        if event is None:
            raise JobProcessingError(f"Event '{job.event_id}' not found")

        objectives = await events.list_objectives(job.event_id, job.workspace_id)
        if not objectives:
            raise JobProcessingError("No objectives defined for this event")

        return ScoringContext(
            event_title=event.title or "Event",
            objectives=[
                ObjectiveForScoring(id=o.id, objective_text=o.objective_text, weight=o.weight)
                for o in objectives
            ],
        )

    async def process(self, job: JobSnapshot, target_id: str, context: ScoringContext, session: AsyncSession) -> bool:
        contact = await ContactRepository(session).get(target_id, job.workspace_id)
        if contact is None:
            logger.warning("Contact %s not found in workspace %s", target_id, job.workspace_id)
            return False

        profile = ContactForScoring(
            id=contact.id,
            full_name=contact.full_name,
            company=contact.company,
            title=contact.title,
            industry=contact.industry,
            role_seniority=contact.role_seniority,
            ai_summary=contact.ai_summary,
            tags=contact.tags or [],
            enrichment_data=contact.enrichment_data or {},
        )
        try:
            result = await self.model.score(profile, context.objectives, context.event_title)
        except SQLAlchemyError:
            raise
        except Exception as exc:
            logger.error("Failed to score contact %s for event %s", target_id, job.event_id, exc_info=exc)
            return False

        await save_scoring_result(
            session, contact.id, job.event_id, job.workspace_id, result, self.model.model_version
        )
        return True
