"""Shared async repository over one ORM table.

Every table in this service carries a string ``id`` primary key and, for
tenant-owned rows, a ``workspace_id``. Reads that cross a workspace
boundary go through ``get_in_workspace`` so a foreign id behaves exactly
like a missing one.
"""

from typing import Any, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.db.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository:
    def __init__(self, session: AsyncSession, model_class: type[T]):
        self.session = session
        self.model_class = model_class

    def _select(self, **filters: Any) -> Select:
        return select(self.model_class).filter_by(**filters)

    async def _one(self, stmt: Select) -> T | None:
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get_by_id(self, record_id: str) -> T | None:
        return await self._one(self._select(id=record_id))

    async def get_in_workspace(self, record_id: str, workspace_id: str) -> T | None:
        return await self._one(self._select(id=record_id, workspace_id=workspace_id))

    async def find(self, **filters: Any) -> list[T]:
        """All rows whose columns equal the given values."""
        result = await self.session.execute(self._select(**filters))
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> T:
        """Add a row and flush so constraint violations surface here."""
        row = self.model_class(**fields)
        self.session.add(row)
        await self.session.flush()
        return row

    async def update(self, row: T, **fields: Any) -> T:
        for key, value in fields.items():
            setattr(row, key, value)
        await self.session.flush()
        return row
