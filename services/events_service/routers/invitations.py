"""Vendor availability invitations: sending in bulk and answering by token."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.db.session import get_async_db
from services.events_service.routers.events import EVENT_PLANNER_ROLES
from services.events_service.schemas import BulkInviteRequest, InvitationAvailabilitySubmit
from services.events_service.services.invitations import (
    ensure_not_expired,
    get_invitation_or_404,
    invitation_details,
    save_availability,
    send_bulk_invitations,
)
from services.identity_service.dependencies import require_roles
from services.identity_service.models import User
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post("/bulk-invite")
async def bulk_invite(
    payload: BulkInviteRequest,
    account: User = Depends(require_roles(*EVENT_PLANNER_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    if not payload.vendor_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Vendor IDs are required"
        )
    return await send_bulk_invitations(
        db,
        actor=account,
        vendor_ids=list(dict.fromkeys(payload.vendor_ids)),
        duration_weeks=payload.duration_weeks,
    )


@router.get("/{token}")
async def get_invitation(token: str, db: AsyncSession = Depends(get_async_db)):
    """The token is the credential; no session is required."""
    invitation = await get_invitation_or_404(db, token)
    await ensure_not_expired(db, invitation)
    return await invitation_details(db, invitation)


@router.post("/{token}")
async def submit_availability(
    token: str,
    payload: InvitationAvailabilitySubmit,
    db: AsyncSession = Depends(get_async_db),
):
    invitation = await get_invitation_or_404(db, token)
    return await save_availability(db, invitation, payload.availability, payload.notes)
