"""Waitlist promotion and invitation decline endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventops.dependencies import get_audit, get_db
from eventops.services.waitlist.promoter import decline_invitation, promote_if_capacity_available

router = APIRouter(prefix="/workspaces/{workspace_id}", tags=["Waitlist"])


@router.post("/events/{event_id}/waitlist/promote")
async def promote_waitlist(
    workspace_id: str,
    event_id: str,
    db: AsyncSession = Depends(get_db),
    audit=Depends(get_audit),
) -> dict:
    result = await promote_if_capacity_available(db, event_id, workspace_id, audit)
    return result.model_dump()


@router.post("/invitations/{invitation_id}/decline")
async def decline(
    workspace_id: str,
    invitation_id: str,
    db: AsyncSession = Depends(get_db),
    audit=Depends(get_audit),
) -> dict:
    result = await decline_invitation(db, workspace_id, invitation_id, audit)
    return result.model_dump()
