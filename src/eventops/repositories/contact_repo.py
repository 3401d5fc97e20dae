"""Contact repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.models.contact import ContactRow
from eventops.repositories.base import BaseRepository


class ContactRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session, ContactRow)

    async def get(self, contact_id: str, workspace_id: str) -> ContactRow | None:
        return await self.get_in_workspace(contact_id, workspace_id)

    async def email_index(self, workspace_id: str) -> dict[str, str]:
        """Map every lower-cased email in the workspace to its contact id, in one read."""
        stmt = select(ContactRow.id, ContactRow.emails).where(ContactRow.workspace_id == workspace_id)
        result = await self.session.execute(stmt)
        index: dict[str, str] = {}
        for contact_id, emails in result.all():
            for entry in emails or []:
                address = (entry or {}).get("email")
                if address:
                    index.setdefault(address.strip().lower(), contact_id)
        return index

    async def existing_emails(self, workspace_id: str) -> set[str]:
        return set(await self.email_index(workspace_id))

    async def filter_ids_in_workspace(self, workspace_id: str, contact_ids: list[str]) -> set[str]:
        if not contact_ids:
            return set()
        stmt = select(ContactRow.id).where(
            ContactRow.workspace_id == workspace_id,
            ContactRow.id.in_(contact_ids),
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())
