"""Clock-in, clock-out and meal break bookkeeping."""

import uuid
from datetime import datetime, time, timedelta, timezone
from typing import Iterable, Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import as_utc
from libs.common.logging import get_logger
from services.attendance_service.models import CLOCK_ACTIONS, TimeEntry, TimeEntryAction
from services.attendance_service.services.intervals import (
    WorkInterval,
    open_interval,
    pair_intervals,
)
from services.events_service.models import Event
from services.identity_service.models import User
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def user_entries(
    db: AsyncSession, user_id: uuid.UUID, since: Optional[datetime] = None
) -> list[TimeEntry]:
    query = (
        select(TimeEntry)
        .where(TimeEntry.user_id == user_id)
        .order_by(TimeEntry.timestamp)
    )
    if since is not None:
        query = query.where(TimeEntry.timestamp >= since)
    result = await db.execute(query)
    return list(result.scalars().all())


async def last_action(
    db: AsyncSession,
    user_id: uuid.UUID,
    actions: Optional[Iterable[TimeEntryAction]] = None,
) -> Optional[TimeEntry]:
    """The user's latest entry, optionally among ``actions`` only."""
    query = select(TimeEntry).where(TimeEntry.user_id == user_id)
    if actions is not None:
        query = query.where(TimeEntry.action.in_(list(actions)))
    result = await db.execute(query.order_by(TimeEntry.timestamp.desc()).limit(1))
    return result.scalar_one_or_none()


async def current_interval(db: AsyncSession, user_id: uuid.UUID) -> Optional[WorkInterval]:
    latest = await last_action(db, user_id, CLOCK_ACTIONS)
    if latest is None or latest.action != TimeEntryAction.CLOCK_IN:
        return None
    return open_interval([latest])


async def intervals_since(
    db: AsyncSession, user_id: uuid.UUID, since: Optional[datetime]
) -> list[WorkInterval]:
    intervals = pair_intervals(await user_entries(db, user_id, since))
    return sorted(intervals, key=lambda i: i.started_at, reverse=True)


async def clock_in(
    db: AsyncSession,
    user: User,
    *,
    notes: Optional[str],
    event_id: Optional[uuid.UUID],
) -> WorkInterval:
    latest = await last_action(db, user.id, CLOCK_ACTIONS)
    if latest is not None and latest.action == TimeEntryAction.CLOCK_IN:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You already have an open time entry.",
        )

    entry = TimeEntry(
        user_id=user.id,
        action=TimeEntryAction.CLOCK_IN,
        division=user.division.value if user.division else None,
        notes=notes,
        event_id=event_id,
    )
    db.add(entry)
    await db.commit()
    logger.info("User %s clocked in", user.id)
    return open_interval([entry])


async def clock_out(
    db: AsyncSession, user: User, *, notes: Optional[str]
) -> WorkInterval:
    latest = await last_action(db, user.id, CLOCK_ACTIONS)
    if latest is None or latest.action != TimeEntryAction.CLOCK_IN:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="No open time entry to close."
        )

    entry = TimeEntry(
        user_id=user.id,
        action=TimeEntryAction.CLOCK_OUT,
        division=latest.division,
        notes=notes,
        event_id=latest.event_id,
    )
    db.add(entry)
    await db.commit()
    logger.info("User %s clocked out", user.id)
    return pair_intervals([latest, entry])[-1]


# ---------------------------------------------------------------------------
# Meal breaks
# ---------------------------------------------------------------------------


def meal_payload(
    start: TimeEntry, ended_at: Optional[datetime] = None, notes: Optional[str] = None
) -> dict:
    started_at = as_utc(start.timestamp)
    return {
        "id": str(start.id),
        "user_id": str(start.user_id),
        "started_at": started_at.isoformat(),
        "ended_at": as_utc(ended_at).isoformat() if ended_at else None,
        "notes": notes if notes is not None else start.notes,
        "created_at": started_at.isoformat(),
    }


async def open_meal(db: AsyncSession, user_id: uuid.UUID) -> Optional[TimeEntry]:
    latest = await last_action(db, user_id)
    if latest is None or latest.action != TimeEntryAction.MEAL_START:
        return None
    return latest


async def start_meal(db: AsyncSession, user: User, *, notes: Optional[str]) -> TimeEntry:
    """A meal can start right after a clock-in or after the previous meal ended."""
    latest = await last_action(db, user.id)
    if latest is None or latest.action not in (
        TimeEntryAction.CLOCK_IN,
        TimeEntryAction.MEAL_END,
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You must be clocked in to start a meal.",
        )

    entry = TimeEntry(
        user_id=user.id,
        action=TimeEntryAction.MEAL_START,
        division=latest.division,
        notes=notes or "",
        event_id=latest.event_id,
    )
    db.add(entry)
    await db.commit()
    logger.info("User %s started a meal break", user.id)
    return entry


async def end_meal(
    db: AsyncSession, user: User, *, notes: Optional[str]
) -> tuple[TimeEntry, TimeEntry]:
    start = await open_meal(db, user.id)
    if start is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="No open meal to end."
        )

    entry = TimeEntry(
        user_id=user.id,
        action=TimeEntryAction.MEAL_END,
        division=start.division,
        notes=notes,
        event_id=start.event_id,
    )
    db.add(entry)
    await db.commit()
    logger.info("User %s ended a meal break", user.id)
    return start, entry


# ---------------------------------------------------------------------------
# Event windows
# ---------------------------------------------------------------------------


def event_day_window(event: Event) -> tuple[datetime, datetime]:
    """UTC window covering the event date, extended a day for overnight events."""
    start = datetime.combine(event.event_date, time.min, tzinfo=timezone.utc)
    end = start + timedelta(days=1)
    overnight = event.ends_next_day or (
        event.start_time is not None
        and event.end_time is not None
        and event.end_time <= event.start_time
    )
    if overnight:
        end += timedelta(days=1)
    return start, end


async def entries_for_event(
    db: AsyncSession, event: Event, user_ids: Optional[Iterable[uuid.UUID]] = None
) -> list[TimeEntry]:
    """Entries tagged with the event, falling back to the event-day window."""
    ids = list(user_ids) if user_ids is not None else None

    query = select(TimeEntry).where(TimeEntry.event_id == event.id)
    if ids is not None:
        query = query.where(TimeEntry.user_id.in_(ids))
    entries = list((await db.execute(query)).scalars().all())

    start, end = event_day_window(event)
    if entries and end - start <= timedelta(days=1):
        return entries

    query = select(TimeEntry).where(
        TimeEntry.timestamp >= start,
        TimeEntry.timestamp < end,
        or_(TimeEntry.event_id.is_(None), TimeEntry.event_id == event.id),
    )
    if ids is not None:
        query = query.where(TimeEntry.user_id.in_(ids))
    seen = {entry.id for entry in entries}
    for entry in (await db.execute(query)).scalars().all():
        if entry.id not in seen:
            entries.append(entry)
    return entries
