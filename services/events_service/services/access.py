"""Event lookups and ownership checks."""

import uuid
from typing import Iterable

from fastapi import HTTPException, status
from services.events_service.models import Event, ManagerTeamMember
from services.identity_service.models import User
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

SUPERVISOR_ROLES = ("supervisor", "supervisor2")


async def get_event_or_404(db: AsyncSession, event_id: uuid.UUID) -> Event:
    result = await db.execute(select(Event).where(Event.id == event_id))
    event = result.scalar_one_or_none()
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def ensure_event_access(
    event: Event,
    account: User,
    allowed_roles: Iterable[str] = (),
    detail: str = "Unauthorized",
) -> None:
    """Creators always pass; everyone else needs one of ``allowed_roles``."""
    if event.created_by == account.id:
        return
    if account.role.value in set(allowed_roles):
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


async def visible_creator_ids(db: AsyncSession, account: User) -> list[uuid.UUID]:
    """Creators whose events ``account`` may list: itself, plus its managers for supervisors."""
    creator_ids = [account.id]
    if account.role.value in SUPERVISOR_ROLES:
        result = await db.execute(
            select(ManagerTeamMember.manager_id).where(
                ManagerTeamMember.member_id == account.id,
                ManagerTeamMember.is_active.is_(True),
            )
        )
        creator_ids.extend(result.scalars().all())
    return creator_ids
