"""Dedup-aware bulk contact ingestion."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.models.contact import CsvContactRow, ImportResult, RowError
from eventops.models.enums import ContactSource
from eventops.repositories.contact_repo import ContactRepository
from eventops.repositories.event_repo import InvitationRepository
from eventops.services.contacts.dedup import compute_dedup_key, normalize_email
from eventops.services.contacts.validation import report_row
from eventops.services.id_generator import CONTACT, generate_id

logger = logging.getLogger(__name__)


@dataclass
class _PendingInsert:
    row_number: int
    row: CsvContactRow
    email: str | None


def _describe(exc: Exception) -> str:
    return str(getattr(exc, "orig", None) or exc)


def _contact_fields(workspace_id: str, row: CsvContactRow, email: str | None) -> dict:
    emails = [{"email": email, "type": "work", "primary": True}] if email else []
    phones = [{"phone": row.phone, "type": "mobile", "primary": True}] if row.phone else []
    return {
        "id": generate_id(CONTACT),
        "workspace_id": workspace_id,
        "full_name": row.full_name,
        "first_name": row.first_name,
        "last_name": row.last_name,
        "emails": emails,
        "primary_email": email,
        "phones": phones,
        "company": row.company,
        "title": row.title,
        "linkedin_url": row.linkedin_url,
        "tags": row.parsed_tags(),
        "internal_notes": row.notes,
        "source": ContactSource.CSV_IMPORT,
        "source_detail": "CSV upload",
        "dedup_key": compute_dedup_key(row.full_name, emails),
    }


async def import_rows(
    session: AsyncSession,
    workspace_id: str,
    rows: list[CsvContactRow],
    row_numbers: list[int] | None = None,
) -> ImportResult:
    """Insert rows whose email is new to the workspace and to this batch.

    Rows without an email have no dedup key and are always inserted. The
    first occurrence of an email within the batch wins. Each insert commits
    on its own so that one failing row leaves the others in place.

    ``row_numbers`` gives the reported row number of each entry in ``rows``
    (for example after invalid rows were filtered out); it defaults to the
    position in ``rows`` plus the header offset.
    """
    repo = ContactRepository(session)
    result = ImportResult()

    existing = await repo.existing_emails(workspace_id)
    seen: set[str] = set()
    pending: list[_PendingInsert] = []

    if row_numbers is None:
        row_numbers = [report_row(index) for index in range(len(rows))]

    for row_number, row in zip(row_numbers, rows, strict=True):
        email = normalize_email(row.email)
        if email is None:
            pending.append(_PendingInsert(row_number, row, None))
            continue
        if email in existing or email in seen:
            result.skipped += 1
            continue
        seen.add(email)
        pending.append(_PendingInsert(row_number, row, email))

    for item in pending:
        try:
            await repo.create(**_contact_fields(workspace_id, item.row, item.email))
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.warning("Contact import row %d rejected: %s", item.row_number, _describe(exc))
            result.errors.append(RowError(row=item.row_number, error=_describe(exc)))
            continue
        result.imported += 1

    logger.info(
        "Imported contacts for workspace %s: imported=%d skipped=%d errors=%d",
        workspace_id, result.imported, result.skipped, len(result.errors),
    )
    return result


async def import_from_event(session: AsyncSession, workspace_id: str, event_id: str) -> ImportResult:
    """Create contacts for an event's invitations that are not linked to one yet.

    An invitation whose email already belongs to a contact is linked to that
    contact and counted as skipped. Invitations without an email are skipped.
    """
    contacts = ContactRepository(session)
    invitations = InvitationRepository(session)
    result = ImportResult()

    index = await contacts.email_index(workspace_id)

    # Snapshot the rows; a rollback below expires ORM instances.
    unlinked = [
        (inv.id, inv.full_name, inv.email, inv.internal_notes, inv.tier)
        for inv in await invitations.list_unlinked(event_id, workspace_id)
    ]

    for position, (invitation_id, full_name, raw_email, notes, tier) in enumerate(unlinked, start=1):
        email = normalize_email(raw_email)
        if email is None:
            result.skipped += 1
            continue

        contact_id = index.get(email)
        created = contact_id is None
        try:
            if created:
                emails = [{"email": email, "type": "work", "primary": True}]
                name_parts = (full_name or "").split()
                contact = await contacts.create(
                    id=generate_id(CONTACT),
                    workspace_id=workspace_id,
                    full_name=full_name,
                    first_name=name_parts[0] if name_parts else None,
                    last_name=" ".join(name_parts[1:]) or None,
                    emails=emails,
                    primary_email=email,
                    source=ContactSource.EVENT_IMPORT,
                    source_detail=f"Event {event_id}",
                    dedup_key=compute_dedup_key(full_name, emails),
                    internal_notes=notes,
                    tags=[tier] if tier else [],
                )
                contact_id = contact.id
            await invitations.link_contact(invitation_id, contact_id)
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            result.errors.append(RowError(row=position, error=_describe(exc)))
            continue

        if created:
            index[email] = contact_id
            result.imported += 1
        else:
            result.skipped += 1

    return result
