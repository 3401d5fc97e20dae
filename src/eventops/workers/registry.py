"""Default worker for each job kind."""

from eventops.models.enums import JobKind
from eventops.workers.base import BaseJobWorker


def default_workers() -> dict[JobKind, BaseJobWorker]:
    """Workers backed by the Claude enrichment provider and scoring model."""
    from eventops.services.enrichment.ai_search_provider import AiSearchProvider
    from eventops.services.scoring.engine import ClaudeScoringModel
    from eventops.workers.enrichment_worker import EnrichmentWorker
    from eventops.workers.scoring_worker import ScoringWorker

    return {
        JobKind.ENRICHMENT: EnrichmentWorker(AiSearchProvider()),
        JobKind.SCORING: ScoringWorker(ClaudeScoringModel()),
    }
