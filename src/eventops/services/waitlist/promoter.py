"""Waitlist promotion when an event seat frees up.

Candidates are ranked by tier, then priority, then arrival. The ranking is
a plain sort key so it can be tested without a database.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from eventops.errors.exceptions import ConflictError, NotFoundError
from eventops.events.audit import INVITATION_DECLINED, WAITLIST_PROMOTED, AuditSink
from eventops.models.enums import PRIORITY_RANK, TIER_RANK, UNRANKED, InvitationStatus
from eventops.models.waitlist import DeclineResult, PromotionResult
from eventops.repositories.event_repo import EventRepository, InvitationRepository

logger = logging.getLogger(__name__)


def tier_rank(tier: str | None) -> int:
    return TIER_RANK.get(tier, UNRANKED)


def priority_rank(priority: str | None) -> int:
    return PRIORITY_RANK.get(priority, UNRANKED)


def waitlist_sort_key(entry) -> tuple[int, int, datetime, str]:
    """Total order over waitlist entries; the smallest key is promoted first."""
    return (tier_rank(entry.tier), priority_rank(entry.priority), entry.created_at, entry.id)


def select_candidate(entries):
    """Best-ranked entry, or None for an empty waitlist."""
    return min(entries, key=waitlist_sort_key, default=None)


async def promote_if_capacity_available(
    session: AsyncSession,
    event_id: str,
    workspace_id: str,
    audit: AuditSink | None = None,
) -> PromotionResult:
    """Invite the best waitlisted guest if the event has a free seat."""
    event = await EventRepository(session).get(event_id, workspace_id)
    if event is None or event.total_capacity is None:
        return PromotionResult(promoted=False)

    invitations = InvitationRepository(session)
    accepted = await invitations.count_accepted(event_id, workspace_id)
    if accepted >= event.total_capacity:
        return PromotionResult(promoted=False)

    waitlisted = await invitations.list_by_status(event_id, workspace_id, InvitationStatus.WAITLIST)

    # A concurrent promotion may take the top entry first; fall through to the next one.
    for candidate in sorted(waitlisted, key=waitlist_sort_key):
        if not await invitations.transition(candidate.id, InvitationStatus.WAITLIST, InvitationStatus.INVITED):
            continue
        await session.commit()

        logger.info(
            "Waitlist promotion (invitation=%s, event=%s, accepted=%d, capacity=%d)",
            candidate.id, event_id, accepted, event.total_capacity,
        )
        if audit is not None:
            audit.log_action(
                WAITLIST_PROMOTED,
                "invitation",
                entity_id=candidate.id,
                workspace_id=workspace_id,
                previous_value={"status": InvitationStatus.WAITLIST.value},
                new_value={"status": InvitationStatus.INVITED.value},
                metadata={"event_id": event_id, "reason": "capacity_opened"},
            )
        return PromotionResult(promoted=True, promoted_id=candidate.id)

    return PromotionResult(promoted=False)


async def decline_invitation(
    session: AsyncSession,
    workspace_id: str,
    invitation_id: str,
    audit: AuditSink | None = None,
) -> DeclineResult:
    """Decline an invitation; releasing an accepted seat triggers promotion."""
    invitations = InvitationRepository(session)
    invitation = await invitations.get(invitation_id, workspace_id)
    if invitation is None:
        raise NotFoundError("Invitation", invitation_id)

    previous = invitation.status
    event_id = invitation.event_id
    if previous == InvitationStatus.DECLINED:
        return DeclineResult(
            invitation_id=invitation_id,
            previous_status=previous,
            promotion=PromotionResult(promoted=False),
        )

    if not await invitations.transition(invitation_id, previous, InvitationStatus.DECLINED):
        raise ConflictError(f"Invitation '{invitation_id}' changed status concurrently")
    await session.commit()

    if audit is not None:
        audit.log_action(
            INVITATION_DECLINED,
            "invitation",
            entity_id=invitation_id,
            workspace_id=workspace_id,
            previous_value={"status": previous},
            new_value={"status": InvitationStatus.DECLINED.value},
            metadata={"event_id": event_id},
        )

    promotion = PromotionResult(promoted=False)
    if previous == InvitationStatus.ACCEPTED:
        promotion = await promote_if_capacity_available(session, event_id, workspace_id, audit)

    return DeclineResult(invitation_id=invitation_id, previous_status=previous, promotion=promotion)
