"""Guest score repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.models.guest_score import GuestScoreRow
from eventops.repositories.base import BaseRepository
from eventops.services.id_generator import GUEST_SCORE, generate_id


class GuestScoreRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, GuestScoreRow)

    async def get_for(self, contact_id: str, event_id: str) -> GuestScoreRow | None:
        stmt = select(GuestScoreRow).where(
            GuestScoreRow.contact_id == contact_id,
            GuestScoreRow.event_id == event_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, contact_id: str, event_id: str, workspace_id: str, **fields) -> GuestScoreRow:
        """Insert or overwrite the score for ``(contact_id, event_id)``."""
        existing = await self.get_for(contact_id, event_id)
        if existing:
            return await self.update(existing, **fields)
        return await self.create(
            id=generate_id(GUEST_SCORE),
            contact_id=contact_id,
            event_id=event_id,
            workspace_id=workspace_id,
            **fields,
        )
