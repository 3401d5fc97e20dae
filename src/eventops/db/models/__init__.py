"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from eventops.db.models.audit_log import AuditLogRow
from eventops.db.models.contact import ContactRow
from eventops.db.models.event import EventObjectiveRow, EventRow, InvitationRow
from eventops.db.models.guest_score import GuestScoreRow
from eventops.db.models.job import EnrichmentJobRow, ScoringJobRow

__all__ = [
    "AuditLogRow",
    "ContactRow",
    "EnrichmentJobRow",
    "EventObjectiveRow",
    "EventRow",
    "GuestScoreRow",
    "InvitationRow",
    "ScoringJobRow",
]
