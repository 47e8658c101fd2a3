import secrets
import uuid
from datetime import date, datetime, time, timedelta
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.events_service.models.enums import (
    InvitationStatus,
    InvitationType,
    TeamMemberStatus,
    enum_values,
)
from sqlalchemy import JSON, Boolean, Date, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, Text, Time, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Event(Base):
    __tablename__ = "events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    event_name: Mapped[str] = mapped_column(String, nullable=False)
    artist: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    venue: Mapped[str] = mapped_column(String, nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    event_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    ends_next_day: Mapped[bool] = mapped_column(Boolean, default=False)

    # Revenue split, in percent
    artist_share_percent: Mapped[float] = mapped_column(Float, default=0)
    venue_share_percent: Mapped[float] = mapped_column(Float, default=0)
    pds_share_percent: Mapped[float] = mapped_column(Float, default=0)
    # Fraction of net sales paid out as vendor commission (e.g. 0.04)
    commission_pool: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    ticket_sales: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    tips: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    tax_rate_percent: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class EventTeamMember(Base):
    __tablename__ = "event_teams"
    __table_args__ = (UniqueConstraint("event_id", "vendor_id", name="uq_event_team_vendor"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), index=True
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    assigned_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    status: Mapped[TeamMemberStatus] = mapped_column(
        SAEnum(
            TeamMemberStatus,
            name="team_member_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TeamMemberStatus.PENDING_CONFIRMATION,
    )
    confirmation_token: Mapped[Optional[str]] = mapped_column(
        String(64), unique=True, nullable=True
    )
    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


INVITATION_TTL = timedelta(days=30)


def _invitation_token() -> str:
    return secrets.token_hex(32)


def _invitation_expiry() -> datetime:
    return utc_now() + INVITATION_TTL


class VendorInvitation(Base):
    """Availability request sent to a vendor; ``availability`` holds their answers."""

    __tablename__ = "vendor_invitations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    token: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False, default=_invitation_token
    )
    # None for bulk invitations covering every event in the period
    event_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True
    )
    vendor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    invited_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    invitation_type: Mapped[InvitationType] = mapped_column(
        SAEnum(
            InvitationType,
            name="invitation_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=InvitationType.BULK,
    )
    # [{"date": "YYYY-MM-DD", "available": true}, ...]
    availability: Mapped[list] = mapped_column(JSON, default=list)
    status: Mapped[InvitationStatus] = mapped_column(
        SAEnum(
            InvitationStatus,
            name="invitation_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=InvitationStatus.PENDING,
        index=True,
    )
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    duration_weeks: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_invitation_expiry
    )
    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class Region(Base):
    __tablename__ = "regions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    center_lat: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    center_lng: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    radius_miles: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )


class VenueReference(Base):
    __tablename__ = "venue_reference"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    venue_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    city: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )


class ManagerTeamMember(Base):
    """Links a supervisor to the manager whose events they help run."""

    __tablename__ = "manager_team_members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    manager_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    member_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
