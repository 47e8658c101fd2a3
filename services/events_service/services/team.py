"""
Event team management.

Vendors are either added as confirmed straight away or invited with a
single-use confirmation link they answer from email.
"""

import secrets
import uuid
from typing import Any

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.emails.events import send_team_invitation_email
from libs.common.logging import get_logger
from services.events_service.models import Event, EventTeamMember, TeamMemberStatus
from services.identity_service.models import User
from services.identity_service.services.profiles import profile_names
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

CONFIRM_MESSAGE = "Thank you for confirming! You have been added to the event team."
DECLINE_MESSAGE = "Your decline has been recorded. We appreciate your response."


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def event_summary(event: Event) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "event_name": event.event_name,
        "artist": event.artist,
        "venue": event.venue,
        "city": event.city,
        "state": event.state,
        "event_date": event.event_date.isoformat(),
        "start_time": event.start_time.isoformat(),
        "end_time": event.end_time.isoformat(),
    }


async def team_rows(db: AsyncSession, event_id: uuid.UUID) -> list[EventTeamMember]:
    result = await db.execute(
        select(EventTeamMember)
        .where(EventTeamMember.event_id == event_id)
        .order_by(EventTeamMember.created_at)
    )
    return list(result.scalars().all())


async def add_vendors_to_team(
    db: AsyncSession,
    *,
    event: Event,
    actor: User,
    vendor_ids: list[uuid.UUID],
    auto_confirm: bool,
) -> dict[str, Any]:
    result = await db.execute(select(User).where(User.id.in_(vendor_ids)))
    vendors = list(result.scalars().all())
    if not vendors:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendors not found")

    existing = {row.vendor_id for row in await team_rows(db, event.id)}
    new_vendors = [v for v in vendors if v.id not in existing]
    already_on_team = len(vendors) - len(new_vendors)

    if not new_vendors:
        suffix = "No new members were added." if auto_confirm else "No new invitations sent."
        return {
            "success": True,
            "message": f"All selected vendors are already on the team. {suffix}",
            "teamSize": len(existing),
            "newMembers": 0,
            "alreadyOnTeam": already_on_team,
        }

    invitations: list[tuple[User, str]] = []
    for vendor in new_vendors:
        token = None if auto_confirm else secrets.token_hex(32)
        db.add(
            EventTeamMember(
                event_id=event.id,
                vendor_id=vendor.id,
                assigned_by=actor.id,
                status=(
                    TeamMemberStatus.CONFIRMED
                    if auto_confirm
                    else TeamMemberStatus.PENDING_CONFIRMATION
                ),
                confirmation_token=token,
                responded_at=utc_now() if auto_confirm else None,
            )
        )
        if token:
            invitations.append((vendor, token))
    await db.commit()

    response: dict[str, Any] = {
        "success": True,
        "teamSize": len(existing) + len(new_vendors),
        "newMembers": len(new_vendors),
        "alreadyOnTeam": already_on_team,
    }
    skipped = f" {_plural(already_on_team, 'vendor')} already on the team." if already_on_team else ""

    if auto_confirm:
        response["autoConfirmed"] = True
        response["message"] = (
            f"{_plural(len(new_vendors), 'vendor')} added to the team and confirmed.{skipped}"
        )
        return response

    sent = failed = 0
    for vendor, token in invitations:
        first_name, _ = profile_names(vendor.profile)
        delivered = await send_team_invitation_email(
            to_email=vendor.email,
            first_name=first_name,
            event_name=event.event_name,
            event_date=event.event_date.isoformat(),
            venue=event.venue,
            start_time=event.start_time.strftime("%H:%M"),
            end_time=event.end_time.strftime("%H:%M"),
            confirmation_token=token,
        )
        if delivered:
            sent += 1
        else:
            failed += 1

    logger.info(
        "Team invitations sent",
        extra={"extra_fields": {"event_id": str(event.id), "sent": sent, "failed": failed}},
    )
    response["emailStats"] = {"sent": sent, "failed": failed}
    response["message"] = (
        f"Invitations sent to {_plural(len(new_vendors), 'vendor')}.{skipped}"
    )
    return response


async def get_invitation_by_token(db: AsyncSession, token: str) -> EventTeamMember:
    result = await db.execute(
        select(EventTeamMember).where(EventTeamMember.confirmation_token == token)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid or expired confirmation link",
        )
    return row


async def respond_to_invitation(
    db: AsyncSession, row: EventTeamMember, action: str | None
) -> dict[str, Any]:
    if action not in ("confirm", "decline"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid action. Must be "confirm" or "decline"',
        )
    if row.status != TeamMemberStatus.PENDING_CONFIRMATION:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This invitation has already been responded to",
        )

    confirmed = action == "confirm"
    row.status = TeamMemberStatus.CONFIRMED if confirmed else TeamMemberStatus.DECLINED
    row.responded_at = utc_now()
    await db.commit()

    logger.info("Team invitation %s is now %s", row.id, row.status.value)
    return {
        "success": True,
        "status": row.status.value,
        "message": CONFIRM_MESSAGE if confirmed else DECLINE_MESSAGE,
    }


async def resend_team_confirmations(
    db: AsyncSession,
    *,
    event: Event,
    vendor_ids: list[uuid.UUID] | None,
) -> dict[str, Any]:
    """
    Email the confirmation link again to team members who have not answered.

    Members missing a token get a fresh one.
    """
    query = select(EventTeamMember).where(
        EventTeamMember.event_id == event.id,
        EventTeamMember.status.not_in(
            [TeamMemberStatus.CONFIRMED, TeamMemberStatus.DECLINED]
        ),
    )
    if vendor_ids:
        query = query.where(EventTeamMember.vendor_id.in_(vendor_ids))
    pending = list((await db.execute(query)).scalars().all())
    if not pending:
        return {
            "success": True,
            "message": "No invited vendors are pending confirmation.",
            "stats": {"sent": 0, "failed": 0, "requested": 0},
        }

    result = await db.execute(select(User).where(User.id.in_([row.vendor_id for row in pending])))
    users = {user.id: user for user in result.scalars().all()}

    refreshed = 0
    for row in pending:
        if not row.confirmation_token:
            row.confirmation_token = secrets.token_hex(32)
            refreshed += 1
        row.status = TeamMemberStatus.PENDING_CONFIRMATION
    await db.commit()

    sent = failed = 0
    for row in pending:
        vendor = users.get(row.vendor_id)
        if vendor is None or not vendor.email:
            failed += 1
            continue
        first_name, _ = profile_names(vendor.profile)
        delivered = await send_team_invitation_email(
            to_email=vendor.email,
            first_name=first_name,
            event_name=event.event_name,
            event_date=event.event_date.isoformat(),
            venue=event.venue,
            start_time=event.start_time.strftime("%H:%M"),
            end_time=event.end_time.strftime("%H:%M"),
            confirmation_token=row.confirmation_token,
        )
        if delivered:
            sent += 1
        else:
            failed += 1

    logger.info(
        "Team confirmations resent",
        extra={"extra_fields": {"event_id": str(event.id), "sent": sent, "failed": failed}},
    )
    return {
        "success": True,
        "message": f"Successfully resent confirmation to {_plural(sent, 'invited vendor')}.",
        "stats": {
            "requested": len(pending),
            "sent": sent,
            "failed": failed,
            "refreshed": refreshed,
        },
    }
