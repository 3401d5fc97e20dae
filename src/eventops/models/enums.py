"""String enums and ordinal rank tables shared across the service."""

from enum import StrEnum


class JobKind(StrEnum):
    ENRICHMENT = "enrichment"
    SCORING = "scoring"


class JobStatus(StrEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


ACTIVE_JOB_STATUSES = (JobStatus.PENDING, JobStatus.IN_PROGRESS)
TERMINAL_JOB_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED)


class EnrichmentStatus(StrEnum):
    NOT_STARTED = "NOT_STARTED"
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ContactSource(StrEnum):
    MANUAL = "MANUAL"
    CSV_IMPORT = "CSV_IMPORT"
    EVENT_IMPORT = "EVENT_IMPORT"


class InvitationStatus(StrEnum):
    CONSIDERING = "CONSIDERING"
    INVITED = "INVITED"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    WAITLIST = "WAITLIST"


class GuestTier(StrEnum):
    VIP = "VIP"
    GENERAL = "GENERAL"
    PLUS_ONE = "PLUS_ONE"


class GuestPriority(StrEnum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# Lower rank is promoted first. Anything not listed ranks UNRANKED.
TIER_RANK: dict[GuestTier, int] = {
    GuestTier.VIP: 1,
    GuestTier.GENERAL: 2,
    GuestTier.PLUS_ONE: 3,
}

PRIORITY_RANK: dict[GuestPriority, int] = {
    GuestPriority.HIGH: 1,
    GuestPriority.MEDIUM: 2,
    GuestPriority.LOW: 3,
}

UNRANKED = 4
