"""Event, objective and invitation repositories."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.base import utcnow
from eventops.db.models.event import EventObjectiveRow, EventRow, InvitationRow
from eventops.models.enums import InvitationStatus
from eventops.repositories.base import BaseRepository


class EventRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, EventRow)

    async def get(self, event_id: str, workspace_id: str) -> EventRow | None:
        return await self.get_in_workspace(event_id, workspace_id)

    async def list_objectives(self, event_id: str, workspace_id: str) -> list[EventObjectiveRow]:
        stmt = (
            select(EventObjectiveRow)
            .where(
                EventObjectiveRow.event_id == event_id,
                EventObjectiveRow.workspace_id == workspace_id,
            )
            .order_by(EventObjectiveRow.sort_order.asc(), EventObjectiveRow.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class InvitationRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, InvitationRow)

    async def get(self, invitation_id: str, workspace_id: str) -> InvitationRow | None:
        return await self.get_in_workspace(invitation_id, workspace_id)

    async def count_by_status(self, event_id: str, workspace_id: str, status: str) -> int:
        stmt = select(func.count()).select_from(InvitationRow).where(
            InvitationRow.event_id == event_id,
            InvitationRow.workspace_id == workspace_id,
            InvitationRow.status == status,
        )
        return (await self.session.execute(stmt)).scalar_one()

    async def list_by_status(self, event_id: str, workspace_id: str, status: str) -> list[InvitationRow]:
        return await self.find(event_id=event_id, workspace_id=workspace_id, status=status)

    async def list_unlinked(self, event_id: str, workspace_id: str) -> list[InvitationRow]:
        stmt = (
            select(InvitationRow)
            .where(
                InvitationRow.event_id == event_id,
                InvitationRow.workspace_id == workspace_id,
                InvitationRow.contact_id.is_(None),
            )
            .order_by(InvitationRow.created_at.asc(), InvitationRow.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def transition(self, invitation_id: str, from_status: str, to_status: str) -> bool:
        """Move an invitation between statuses only if it is still in ``from_status``."""
        stmt = (
            update(InvitationRow)
            .where(InvitationRow.id == invitation_id, InvitationRow.status == from_status)
            .values(status=to_status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def link_contact(self, invitation_id: str, contact_id: str) -> None:
        stmt = (
            update(InvitationRow)
            .where(InvitationRow.id == invitation_id)
            .values(contact_id=contact_id, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def count_accepted(self, event_id: str, workspace_id: str) -> int:
        return await self.count_by_status(event_id, workspace_id, InvitationStatus.ACCEPTED)
