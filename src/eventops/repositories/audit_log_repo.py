"""Audit log repository."""

from datetime import datetime

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.models.audit_log import AuditLogRow
from eventops.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, AuditLogRow)

    async def list_by_action(self, action: str) -> list[AuditLogRow]:
        return await self.find(action=action)

    async def delete_before(self, cutoff: datetime) -> int:
        result = await self.session.execute(delete(AuditLogRow).where(AuditLogRow.created_at < cutoff))
        return result.rowcount or 0
