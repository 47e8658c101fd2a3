"""Event scheduling and team endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.events_service.models import Event, EventTeamMember
from services.events_service.schemas import (
    EventCreate,
    EventResponse,
    EventUpdate,
    TeamAddRequest,
    TeamResendRequest,
)
from services.events_service.services.access import (
    ensure_event_access,
    get_event_or_404,
    visible_creator_ids,
)
from services.events_service.services.team import (
    add_vendors_to_team,
    resend_team_confirmations,
    team_rows,
)
from services.events_service.services.timesheet import event_timesheet
from services.events_service.services.vendors import find_available_vendors
from services.identity_service.dependencies import get_current_account, require_roles
from services.identity_service.models import EXEC_ROLES, User
from services.identity_service.services.profiles import profile_names
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["events"])

EVENT_PLANNER_ROLES = ("manager", "supervisor", "supervisor2", "hr", "exec", "admin")
TEAM_EDITOR_ROLES = ("exec", "manager", "supervisor")
REQUIRED_EVENT_FIELDS = ("event_name", "venue", "event_date", "start_time", "end_time")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    account: User = Depends(require_roles(*EVENT_PLANNER_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    data = payload.model_dump()
    missing = [
        field
        for field in REQUIRED_EVENT_FIELDS
        if data.get(field) is None or (isinstance(data[field], str) and not data[field].strip())
    ]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing one or more required fields: " + ", ".join(REQUIRED_EVENT_FIELDS),
        )

    if data.get("state"):
        data["state"] = data["state"].strip().upper()
    event = Event(created_by=account.id, **data)
    db.add(event)
    await db.commit()

    logger.info("Event %s created by %s", event.id, account.id)
    return {"event": EventResponse.model_validate(event).model_dump(mode="json")}


@router.get("")
async def list_events(
    is_active: Optional[bool] = Query(None),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Events the caller created, plus their managers' events for supervisors."""
    creator_ids = await visible_creator_ids(db, account)
    query = (
        select(Event)
        .where(Event.created_by.in_(creator_ids))
        .order_by(Event.event_date.desc(), Event.start_time.desc())
    )
    if is_active is not None:
        query = query.where(Event.is_active == is_active)

    result = await db.execute(query)
    events = [
        EventResponse.model_validate(e).model_dump(mode="json")
        for e in result.scalars().all()
    ]
    return {"events": events}


@router.get("/{event_id}")
async def get_event(
    event_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    event = await get_event_or_404(db, event_id)
    if event.created_by not in await visible_creator_ids(db, account):
        ensure_event_access(event, account, EXEC_ROLES)
    return {"event": EventResponse.model_validate(event).model_dump(mode="json")}


@router.patch("/{event_id}")
async def update_event(
    event_id: uuid.UUID,
    payload: EventUpdate,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    event = await get_event_or_404(db, event_id)
    ensure_event_access(event, account, EXEC_ROLES)

    changes = payload.model_dump(exclude_unset=True)
    for field in REQUIRED_EVENT_FIELDS:
        if field in changes and changes[field] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} cannot be empty"
            )
    if changes.get("state"):
        changes["state"] = changes["state"].strip().upper()
    for field, value in changes.items():
        setattr(event, field, value)
    await db.commit()
    return {"event": EventResponse.model_validate(event).model_dump(mode="json")}


@router.delete("/{event_id}")
async def delete_event(
    event_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    event = await get_event_or_404(db, event_id)
    ensure_event_access(event, account, EXEC_ROLES)
    await db.delete(event)
    await db.commit()
    logger.info("Event %s deleted by %s", event_id, account.id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------


@router.post("/{event_id}/team")
async def add_team_members(
    event_id: uuid.UUID,
    payload: TeamAddRequest,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    if not payload.vendor_ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Vendor IDs are required"
        )
    event = await get_event_or_404(db, event_id)
    ensure_event_access(
        event,
        account,
        TEAM_EDITOR_ROLES,
        detail="You do not have permission to manage this event's team",
    )
    return await add_vendors_to_team(
        db,
        event=event,
        actor=account,
        vendor_ids=list(dict.fromkeys(payload.vendor_ids)),
        auto_confirm=payload.auto_confirm,
    )


@router.get("/{event_id}/team")
async def list_team_members(
    event_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    event = await get_event_or_404(db, event_id)
    ensure_event_access(event, account, (*TEAM_EDITOR_ROLES, *EXEC_ROLES, "hr"))

    rows = await team_rows(db, event.id)
    users = {}
    if rows:
        result = await db.execute(select(User).where(User.id.in_([r.vendor_id for r in rows])))
        users = {u.id: u for u in result.scalars().all()}

    members = []
    for row in rows:
        user = users.get(row.vendor_id)
        first_name, last_name = profile_names(user.profile if user else None)
        members.append(
            {
                "id": str(row.id),
                "vendor_id": str(row.vendor_id),
                "status": row.status.value,
                "email": user.email if user else None,
                "first_name": first_name,
                "last_name": last_name,
                "division": user.division.value if user and user.division else None,
                "responded_at": row.responded_at.isoformat() if row.responded_at else None,
                "created_at": row.created_at.isoformat() if row.created_at else None,
            }
        )
    return {"team": members, "teamSize": len(members)}


@router.post("/{event_id}/team/resend-confirmation")
async def resend_team_confirmation(
    event_id: uuid.UUID,
    payload: Optional[TeamResendRequest] = Body(None),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    event = await get_event_or_404(db, event_id)
    ensure_event_access(event, account, TEAM_EDITOR_ROLES)
    vendor_ids = list(dict.fromkeys(payload.vendor_ids)) if payload and payload.vendor_ids else None
    return await resend_team_confirmations(db, event=event, vendor_ids=vendor_ids)


@router.delete("/{event_id}/team/{vendor_id}")
async def remove_team_member(
    event_id: uuid.UUID,
    vendor_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    event = await get_event_or_404(db, event_id)
    ensure_event_access(event, account, ("exec", "manager"))

    result = await db.execute(
        select(EventTeamMember).where(
            EventTeamMember.event_id == event.id, EventTeamMember.vendor_id == vendor_id
        )
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team member not found")
    await db.delete(row)
    await db.commit()
    return {"success": True}


@router.get("/{event_id}/available-vendors")
async def available_vendors(
    event_id: uuid.UUID,
    region_id: Optional[uuid.UUID] = Query(None),
    geo_filter: bool = Query(False),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Vendors available on the event date, nearest to the venue first."""
    event = await get_event_or_404(db, event_id)
    if event.created_by != account.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    return await find_available_vendors(
        db, event=event, owner_id=account.id, region_id=region_id, geo_filter=geo_filter
    )


@router.get("/{event_id}/timesheet")
async def get_event_timesheet(
    event_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Worked milliseconds and clock/meal spans for each team member."""
    event = await get_event_or_404(db, event_id)
    ensure_event_access(event, account, (*TEAM_EDITOR_ROLES, *EXEC_ROLES, "hr", "finance"))
    return await event_timesheet(db, event)
