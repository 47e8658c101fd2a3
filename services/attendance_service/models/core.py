import uuid
from datetime import datetime, timezone
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.attendance_service.models.enums import (
    TimeEntryAction,
    ZoneType,
    enum_values,
)
from sqlalchemy import JSON, Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

# Codes never expire on their own; they are switched off instead
NEVER_EXPIRES = datetime(9999, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)


class CheckinCode(Base):
    __tablename__ = "checkin_codes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(6), nullable=False, index=True)
    label: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    # Personal codes are usable only by this user
    target_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=NEVER_EXPIRES
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )


class CheckinLog(Base):
    __tablename__ = "checkin_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("checkin_codes.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    checked_in_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )


class TimeEntry(Base):
    """A single clock action; intervals are formed by pairing in and out."""

    __tablename__ = "time_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    action: Mapped[TimeEntryAction] = mapped_column(
        SAEnum(
            TimeEntryAction,
            name="time_entry_action_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )
    division: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    event_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )


class GeofenceZone(Base):
    __tablename__ = "geofence_zones"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    zone_type: Mapped[ZoneType] = mapped_column(
        SAEnum(
            ZoneType,
            name="geofence_zone_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=ZoneType.CIRCLE,
    )
    center_latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    center_longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    radius_meters: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    # [{"lat": .., "lng": ..}, ...]
    polygon_coordinates: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    applies_to_roles: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    def as_zone(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "zone_type": self.zone_type.value,
            "center_latitude": self.center_latitude,
            "center_longitude": self.center_longitude,
            "radius_meters": self.radius_meters,
            "polygon_coordinates": self.polygon_coordinates,
            "applies_to_roles": self.applies_to_roles or [],
            "is_active": self.is_active,
        }


class LoginLocation(Base):
    __tablename__ = "login_locations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    accuracy_meters: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    within_geofence: Mapped[bool] = mapped_column(Boolean, default=False)
    matched_zone_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    distance_meters: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
