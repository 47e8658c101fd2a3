"""Clock-in, clock-out and meal break endpoints."""

from datetime import datetime, time, timezone
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from libs.common.datetime_utils import parse_iso_date
from libs.db.session import get_async_db
from services.attendance_service.schemas import ClockInRequest, ClockOutRequest, MealRequest
from services.attendance_service.services.time_entries import (
    clock_in,
    clock_out,
    current_interval,
    end_meal,
    intervals_since,
    meal_payload,
    open_meal,
    start_meal,
)
from services.identity_service.dependencies import get_current_account
from services.identity_service.models import User
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/time-entries", tags=["time-entries"])


@router.get("")
async def list_time_entries(
    open_only: Optional[str] = Query(None, alias="open"),
    since: Optional[str] = Query(None),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """The open interval with ``open=1``, otherwise intervals since a date."""
    if open_only in ("1", "true"):
        interval = await current_interval(db, account.id)
        return {"entry": interval.to_dict() if interval else None}

    since_at = None
    if since:
        day = parse_iso_date(since)
        if day is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="since must be a date in YYYY-MM-DD format",
            )
        since_at = datetime.combine(day, time.min, tzinfo=timezone.utc)

    intervals = await intervals_since(db, account.id, since_at)
    return {"entries": [i.to_dict() for i in intervals]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def start_time_entry(
    payload: ClockInRequest,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    interval = await clock_in(db, account, notes=payload.notes, event_id=payload.event_id)
    return {"entry": interval.to_dict()}


@router.patch("")
async def close_time_entry(
    payload: ClockOutRequest,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    interval = await clock_out(db, account, notes=payload.notes)
    return {"entry": interval.to_dict()}


@router.get("/meal")
async def get_open_meal(
    open_only: Optional[str] = Query(None, alias="open"),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    if not open_only:
        return {"open": None}
    start = await open_meal(db, account.id)
    return {"open": meal_payload(start) if start else None}


@router.post("/meal", status_code=status.HTTP_201_CREATED)
async def begin_meal(
    payload: Optional[MealRequest] = Body(None),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    entry = await start_meal(db, account, notes=payload.notes if payload else None)
    return {"entry": meal_payload(entry)}


@router.patch("/meal")
async def finish_meal(
    payload: Optional[MealRequest] = Body(None),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    notes = payload.notes if payload else None
    start, entry = await end_meal(db, account, notes=notes)
    return {"entry": meal_payload(start, entry.timestamp, notes)}
