"""Bulk contact import endpoints."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.config import settings
from eventops.dependencies import get_audit, get_db
from eventops.errors.exceptions import ValidationError
from eventops.events.audit import CONTACTS_BULK_IMPORTED, CONTACTS_IMPORTED_FROM_EVENT
from eventops.models.contact import ImportContactsRequest, ImportContactsResponse, RowError
from eventops.services.contacts.importer import import_from_event, import_rows
from eventops.services.contacts.validation import parse_csv, validate_rows

router = APIRouter(prefix="/workspaces/{workspace_id}/contacts", tags=["Contacts"])

MAX_REPORTED_ERRORS = 100
MAX_CSV_BYTES = 5 * 1024 * 1024


async def _run_import(db: AsyncSession, audit, workspace_id: str, raw_rows: list[dict], source: str) -> dict:
    if not raw_rows:
        raise ValidationError("Import has no data rows")
    if len(raw_rows) > settings.import_max_rows:
        raise ValidationError(f"Import must have at most {settings.import_max_rows:,} rows")

    validated = validate_rows(raw_rows)
    valid = [v for v in validated if v.kind == "valid"]
    validation_errors = [RowError(row=v.row, error=v.error) for v in validated if v.kind == "invalid"]
    if not valid:
        raise ValidationError(
            "No valid rows to import",
            details=[e.model_dump() for e in validation_errors[:50]],
        )

    result = await import_rows(db, workspace_id, [v.value for v in valid], row_numbers=[v.row for v in valid])

    audit.log_action(
        CONTACTS_BULK_IMPORTED,
        "contact",
        workspace_id=workspace_id,
        metadata={
            "source": source,
            "imported": result.imported,
            "skipped": result.skipped,
            "errors": len(result.errors),
        },
    )

    return ImportContactsResponse(
        imported=result.imported,
        skipped=result.skipped,
        errors=sorted(validation_errors + result.errors, key=lambda e: e.row)[:MAX_REPORTED_ERRORS],
        message=f"Successfully imported {result.imported} contacts",
    ).model_dump()


@router.post("/import")
async def import_contacts(
    workspace_id: str,
    body: ImportContactsRequest,
    db: AsyncSession = Depends(get_db),
    audit=Depends(get_audit),
) -> dict:
    return await _run_import(db, audit, workspace_id, body.rows, "json")


@router.post("/upload")
async def upload_contacts_csv(
    workspace_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    audit=Depends(get_audit),
) -> dict:
    body = await request.body()
    if len(body) > MAX_CSV_BYTES:
        raise ValidationError("File must be under 5MB")
    try:
        text = body.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationError("CSV must be UTF-8 encoded") from exc
    return await _run_import(db, audit, workspace_id, parse_csv(text), "csv")


@router.post("/import-from-event/{event_id}")
async def import_contacts_from_event(
    workspace_id: str,
    event_id: str,
    db: AsyncSession = Depends(get_db),
    audit=Depends(get_audit),
) -> dict:
    result = await import_from_event(db, workspace_id, event_id)

    audit.log_action(
        CONTACTS_IMPORTED_FROM_EVENT,
        "contact",
        workspace_id=workspace_id,
        metadata={
            "event_id": event_id,
            "imported": result.imported,
            "skipped": result.skipped,
            "errors": len(result.errors),
        },
    )
    return result.model_dump()
