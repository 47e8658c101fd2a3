"""
Pairing of clock-in/clock-out actions into worked intervals.

Entries are paired in timestamp order. A clock-in while another interval is
open restarts that interval; a clock-out with nothing open is ignored. Meal
starts and ends sit inside an interval and do not close it.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from libs.common.datetime_utils import as_utc
from services.attendance_service.models import TimeEntry, TimeEntryAction


@dataclass
class WorkInterval:
    id: uuid.UUID
    user_id: uuid.UUID
    started_at: datetime
    ended_at: Optional[datetime]
    notes: Optional[str]
    event_id: Optional[uuid.UUID]
    created_at: Optional[datetime]

    @property
    def hours(self) -> float:
        if self.ended_at is None:
            return 0.0
        return max(0.0, (self.ended_at - self.started_at).total_seconds() / 3600)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def pair_intervals(entries: Iterable[TimeEntry]) -> list[WorkInterval]:
    """Pair one user's entries; the trailing open interval is kept with no end."""
    ordered = sorted(entries, key=lambda e: as_utc(e.timestamp))
    intervals: list[WorkInterval] = []
    open_entry: Optional[TimeEntry] = None

    for entry in ordered:
        if entry.action == TimeEntryAction.CLOCK_IN:
            open_entry = entry
        elif entry.action == TimeEntryAction.CLOCK_OUT and open_entry is not None:
            intervals.append(_interval(open_entry, as_utc(entry.timestamp), entry.notes))
            open_entry = None

    if open_entry is not None:
        intervals.append(_interval(open_entry, None, None))
    return intervals


def _interval(
    start: TimeEntry, ended_at: Optional[datetime], closing_notes: Optional[str]
) -> WorkInterval:
    return WorkInterval(
        id=start.id,
        user_id=start.user_id,
        started_at=as_utc(start.timestamp),
        ended_at=ended_at,
        notes=closing_notes or start.notes,
        event_id=start.event_id,
        created_at=as_utc(start.created_at),
    )


def open_interval(entries: Sequence[TimeEntry]) -> Optional[WorkInterval]:
    intervals = pair_intervals(entries)
    if intervals and intervals[-1].ended_at is None:
        return intervals[-1]
    return None


def _closed_hours(entries: list[TimeEntry], since: Optional[datetime]) -> float:
    total = 0.0
    for interval in pair_intervals(entries):
        if interval.ended_at is None:
            continue
        if since is not None and interval.ended_at < since:
            continue
        total += interval.hours
    return total


def hours_by_user(
    entries: Iterable[TimeEntry],
    *,
    since: Optional[datetime] = None,
) -> dict[uuid.UUID, float]:
    """
    Closed-interval hours per user.

    With ``since``, only intervals whose clock-out falls at or after it count.
    """
    grouped: dict[uuid.UUID, list[TimeEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.user_id, []).append(entry)
    return {user_id: _closed_hours(group, since) for user_id, group in grouped.items()}


def hours_by_user_event(
    entries: Iterable[TimeEntry],
    *,
    since: Optional[datetime] = None,
) -> dict[tuple[uuid.UUID, Optional[uuid.UUID]], float]:
    """Closed-interval hours per (user, event), pairing within each event."""
    grouped: dict[tuple[uuid.UUID, Optional[uuid.UUID]], list[TimeEntry]] = {}
    for entry in entries:
        grouped.setdefault((entry.user_id, entry.event_id), []).append(entry)
    return {key: _closed_hours(group, since) for key, group in grouped.items()}
