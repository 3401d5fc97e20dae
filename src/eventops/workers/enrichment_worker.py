"""Enrichment unit of work: one contact through the enrichment provider."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.base import utcnow
from eventops.models.enums import EnrichmentStatus, JobKind
from eventops.repositories.contact_repo import ContactRepository
from eventops.services.enrichment.types import EnrichmentInput, EnrichmentProvider
from eventops.workers.base import BaseJobWorker, JobSnapshot

logger = logging.getLogger(__name__)


class EnrichmentWorker(BaseJobWorker):
    kind = JobKind.ENRICHMENT

    def __init__(self, provider: EnrichmentProvider):
        self.provider = provider

    async def process(self, job: JobSnapshot, target_id: str, context, session: AsyncSession) -> bool:
        contacts = ContactRepository(session)
        contact = await contacts.get(target_id, job.workspace_id)
        if contact is None:
            logger.warning("Contact %s not found in workspace %s", target_id, job.workspace_id)
            return False

        await contacts.update(contact, enrichment_status=EnrichmentStatus.IN_PROGRESS)

        data = EnrichmentInput(
            full_name=contact.full_name,
            emails=contact.emails or [],
            company=contact.company,
            title=contact.title,
            linkedin_url=contact.linkedin_url,
        )
        try:
            result = await self.provider.enrich(data)
        except SQLAlchemyError:
            raise
        except Exception as exc:
            logger.error("Enrichment provider %s raised for contact %s", self.provider.name, target_id, exc_info=exc)
            await contacts.update(contact, enrichment_status=EnrichmentStatus.FAILED)
            return False

        if not result.success:
            logger.error(
                "Enrichment failed for contact %s (provider=%s): %s",
                target_id, result.provider, result.error or "unknown",
            )
            await contacts.update(contact, enrichment_status=EnrichmentStatus.FAILED)
            return False

        await contacts.update(
            contact,
            enrichment_status=EnrichmentStatus.COMPLETED,
            enrichment_data=result.raw_data,
            ai_summary=result.ai_summary,
            industry=result.industry or contact.industry,
            role_seniority=result.role_seniority or contact.role_seniority,
            enriched_at=utcnow(),
            enrichment_cost_cents=(contact.enrichment_cost_cents or 0) + result.cost_cents,
        )
        return True
