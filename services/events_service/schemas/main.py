"""Pydantic schemas for Events Service."""

import uuid
from datetime import date, datetime, time
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventCreate(BaseModel):
    """Required fields are checked by the handler to report them together."""

    event_name: Optional[str] = None
    artist: Optional[str] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    ends_next_day: bool = False
    artist_share_percent: float = 0
    venue_share_percent: float = 0
    pds_share_percent: float = 0
    commission_pool: Optional[float] = None
    ticket_sales: Optional[float] = None
    tips: Optional[float] = None
    tax_rate_percent: Optional[float] = None
    is_active: bool = True


class EventUpdate(BaseModel):
    event_name: Optional[str] = None
    artist: Optional[str] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    event_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    ends_next_day: Optional[bool] = None
    artist_share_percent: Optional[float] = None
    venue_share_percent: Optional[float] = None
    pds_share_percent: Optional[float] = None
    commission_pool: Optional[float] = None
    ticket_sales: Optional[float] = None
    tips: Optional[float] = None
    tax_rate_percent: Optional[float] = None
    is_active: Optional[bool] = None


class EventResponse(BaseModel):
    id: uuid.UUID
    created_by: uuid.UUID
    event_name: str
    artist: Optional[str] = None
    venue: str
    city: Optional[str] = None
    state: Optional[str] = None
    event_date: date
    start_time: time
    end_time: time
    ends_next_day: bool
    artist_share_percent: float
    venue_share_percent: float
    pds_share_percent: float
    commission_pool: Optional[float] = None
    ticket_sales: Optional[float] = None
    tips: Optional[float] = None
    tax_rate_percent: Optional[float] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TeamAddRequest(BaseModel):
    vendor_ids: Optional[list[uuid.UUID]] = Field(default=None, alias="vendorIds")
    auto_confirm: bool = Field(default=False, alias="autoConfirm")

    model_config = ConfigDict(populate_by_name=True)


class TeamResendRequest(BaseModel):
    vendor_ids: Optional[list[uuid.UUID]] = Field(default=None, alias="vendorIds")

    model_config = ConfigDict(populate_by_name=True)


class BulkInviteRequest(BaseModel):
    vendor_ids: Optional[list[uuid.UUID]] = Field(default=None, alias="vendorIds")
    duration_weeks: int = Field(default=3, ge=1, le=12, alias="durationWeeks")

    model_config = ConfigDict(populate_by_name=True)


class InvitationAvailabilitySubmit(BaseModel):
    availability: Any = None
    notes: Optional[str] = None


class TeamConfirmationAction(BaseModel):
    action: Optional[str] = None


class RegionCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    center_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    center_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    radius_miles: Optional[float] = Field(default=None, gt=0)
    is_active: bool = True


class RegionResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    center_lat: Optional[float] = None
    center_lng: Optional[float] = None
    radius_miles: Optional[float] = None
    is_active: bool
    created_at: datetime
    vendor_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class VenueResponse(BaseModel):
    id: uuid.UUID
    venue_name: str
    city: Optional[str] = None
    state: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
