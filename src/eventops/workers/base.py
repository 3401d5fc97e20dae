"""Base worker interface for per-target units of work."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from eventops.models.enums import JobKind


@dataclass(frozen=True)
class JobSnapshot:
    """The immutable parts of a job row, detached from any session."""

    id: str
    workspace_id: str
    target_ids: tuple[str, ...]
    event_id: str | None = None

    @classmethod
    def from_row(cls, row) -> "JobSnapshot":
        return cls(
            id=row.id,
            workspace_id=row.workspace_id,
            target_ids=tuple(row.target_ids or ()),
            event_id=getattr(row, "event_id", None),
        )


class BaseJobWorker(ABC):
    """Performs the kind-specific work for one target of a job."""

    kind: JobKind

    async def prepare(self, job: JobSnapshot, session: AsyncSession) -> Any:
        """Load whatever every unit in the batch shares. Runs once per batch.

        Raising ``JobProcessingError`` here fails the whole job.
        """
        return None

    @abstractmethod
    async def process(self, job: JobSnapshot, target_id: str, context: Any, session: AsyncSession) -> bool:
        """Process one target and return True on success, False on failure.

        Database errors must propagate; they fail the job rather than the unit.
        """
        ...
