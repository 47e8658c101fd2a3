"""
Per-event timesheet for the team.

Worked time comes from paired clock actions. Meal spans use the recorded
meal actions; without any, the first two gaps between worked intervals are
reported as meals.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from libs.common.datetime_utils import as_utc
from services.attendance_service.models import TimeEntry, TimeEntryAction
from services.attendance_service.services.intervals import pair_intervals
from services.attendance_service.services.time_entries import entries_for_event
from services.events_service.models import Event, EventTeamMember
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


def _iso(value: Optional[datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


def _timestamps(entries: list[TimeEntry], action: TimeEntryAction) -> list[datetime]:
    return [as_utc(e.timestamp) for e in entries if e.action == action]


def member_spans(entries: list[TimeEntry]) -> tuple[int, dict[str, Optional[str]]]:
    """Worked milliseconds and the clock and meal spans for one member."""
    intervals = [i for i in pair_intervals(entries) if i.ended_at is not None]
    total_ms = int(round(sum(i.hours for i in intervals) * 3600 * 1000))

    clock_ins = _timestamps(entries, TimeEntryAction.CLOCK_IN)
    clock_outs = _timestamps(entries, TimeEntryAction.CLOCK_OUT)
    meal_starts = _timestamps(entries, TimeEntryAction.MEAL_START)
    meal_ends = _timestamps(entries, TimeEntryAction.MEAL_END)

    if not meal_starts and not meal_ends:
        ordered = sorted(intervals, key=lambda i: i.started_at)
        for previous, following in zip(ordered, ordered[1:]):
            if following.started_at > previous.ended_at:
                meal_starts.append(previous.ended_at)
                meal_ends.append(following.started_at)
            if len(meal_starts) == 2:
                break

    def nth(values: list[datetime], index: int) -> Optional[str]:
        return _iso(values[index]) if len(values) > index else None

    spans = {
        "firstIn": nth(clock_ins, 0),
        "lastOut": _iso(clock_outs[-1]) if clock_outs else None,
        "firstMealStart": nth(meal_starts, 0),
        "lastMealEnd": nth(meal_ends, 0),
        "secondMealStart": nth(meal_starts, 1),
        "secondMealEnd": nth(meal_ends, 1),
    }
    return total_ms, spans


async def event_timesheet(db: AsyncSession, event: Event) -> dict[str, Any]:
    team_ids = list(
        (
            await db.execute(
                select(EventTeamMember.vendor_id).where(EventTeamMember.event_id == event.id)
            )
        ).scalars().all()
    )
    summary = {
        "totalWorkers": len(team_ids),
        "totalEntriesFound": 0,
        "dateQueried": event.event_date.isoformat(),
    }
    if not team_ids:
        return {"totals": {}, "spans": {}, "summary": summary}

    entries = sorted(
        await entries_for_event(db, event, team_ids), key=lambda e: as_utc(e.timestamp)
    )
    summary["totalEntriesFound"] = len(entries)

    grouped: dict[uuid.UUID, list[TimeEntry]] = {user_id: [] for user_id in team_ids}
    for entry in entries:
        grouped[entry.user_id].append(entry)

    totals = {}
    spans = {}
    for user_id, user_entries in grouped.items():
        totals[str(user_id)], spans[str(user_id)] = member_spans(user_entries)
    return {"totals": totals, "spans": spans, "summary": summary}
