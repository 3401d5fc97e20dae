"""Fire-and-forget audit sink.

Callers hand over a state change and move on. The sink writes an
``audit_logs`` row in its own session and fans the event out to webhook
subscribers on a background task; nothing it does can change the outcome
of the job, import or promotion that produced the event.
"""

import asyncio
import logging
from typing import Any

from eventops.events.webhook_emitter import emit_event
from eventops.repositories.audit_log_repo import AuditLogRepository
from eventops.services.id_generator import AUDIT_LOG, generate_id

logger = logging.getLogger(__name__)

# Event type constants
JOB_COMPLETED = "job.completed"
JOB_FAILED = "job.failed"
WAITLIST_PROMOTED = "invitation.waitlist_promoted"
INVITATION_DECLINED = "invitation.declined"
CONTACTS_BULK_IMPORTED = "contact.bulk_imported"
CONTACTS_IMPORTED_FROM_EVENT = "contact.imported_from_event"


class AuditSink:
    def __init__(self, session_factory=None, registry=None) -> None:
        self._session_factory = session_factory
        self._registry = registry
        self._pending: set[asyncio.Task] = set()

    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: str | None = None,
        workspace_id: str | None = None,
        previous_value: dict | None = None,
        new_value: dict | None = None,
        metadata: dict | None = None,
        actor_email: str | None = "system",
    ) -> None:
        """Schedule the audit write and webhook fan-out without waiting for either."""
        entry = {
            "action": action,
            "entity_type": entity_type,
            "entity_id": entity_id,
            "workspace_id": workspace_id,
            "previous_value": previous_value,
            "new_value": new_value,
            "metadata": metadata,
            "actor_email": actor_email,
        }
        try:
            task = asyncio.get_running_loop().create_task(self._record(entry))
        except RuntimeError:
            logger.warning("No running event loop; audit entry %s dropped", action)
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _record(self, entry: dict[str, Any]) -> None:
        if self._session_factory is not None:
            try:
                async with self._session_factory() as session:
                    await AuditLogRepository(session).create(
                        id=generate_id(AUDIT_LOG),
                        workspace_id=entry["workspace_id"],
                        actor_email=entry["actor_email"],
                        action=entry["action"],
                        entity_type=entry["entity_type"],
                        entity_id=entry["entity_id"],
                        previous_value=entry["previous_value"],
                        new_value=entry["new_value"],
                        extra_data=entry["metadata"],
                    )
                    await session.commit()
            except Exception:
                logger.exception(
                    "Failed to write audit log (action=%s, entity=%s)",
                    entry["action"], entry["entity_id"],
                )

        try:
            await emit_event(entry["action"], entry, registry=self._registry)
        except Exception:
            logger.exception("Failed to emit audit webhook (action=%s)", entry["action"])

    async def drain(self) -> None:
        """Wait for every scheduled entry to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

