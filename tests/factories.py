"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    user = UserFactory.create(role=UserRole.HR)
    db_session.add(user)
    await db_session.commit()
"""

import uuid
from datetime import date, datetime, time, timedelta, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"test-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Identity Service
# ---------------------------------------------------------------------------


class UserFactory:
    @staticmethod
    def create(**overrides):
        from services.identity_service.models import Division, User, UserRole

        defaults = {
            "id": _uuid(),
            "email": _unique_email(),
            "role": UserRole.VENDOR,
            "division": Division.VENDOR,
            "is_active": True,
            "failed_login_attempts": 0,
            "is_temporary_password": False,
            "must_change_password": False,
            "background_check_completed": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return User(**defaults)


class ProfileFactory:
    @staticmethod
    def create(**overrides):
        from libs.common.encryption import encrypt
        from services.identity_service.models import OnboardingStatus, Profile

        defaults = {
            "id": _uuid(),
            "first_name": encrypt("Test"),
            "last_name": encrypt("Vendor"),
            "phone": encrypt("5551234567"),
            "city": "Los Angeles",
            "state": "CA",
            "zip_code": "90001",
            "onboarding_status": OnboardingStatus.PENDING,
            "mfa_enabled": False,
            "backup_codes": [],
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Profile(**defaults)


# ---------------------------------------------------------------------------
# Events Service
# ---------------------------------------------------------------------------


class EventFactory:
    @staticmethod
    def create(**overrides):
        from services.events_service.models import Event

        defaults = {
            "id": _uuid(),
            "event_name": "Summer Concert",
            "artist": "The Band",
            "venue": "Hollywood Bowl",
            "city": "Los Angeles",
            "state": "CA",
            "event_date": date.today() + timedelta(days=7),
            "start_time": time(18, 0),
            "end_time": time(23, 0),
            "ends_next_day": False,
            "artist_share_percent": 0,
            "venue_share_percent": 0,
            "pds_share_percent": 0,
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Event(**defaults)


class TeamMemberFactory:
    @staticmethod
    def create(**overrides):
        from services.events_service.models import EventTeamMember, TeamMemberStatus

        defaults = {
            "id": _uuid(),
            "status": TeamMemberStatus.CONFIRMED,
            "confirmation_token": uuid.uuid4().hex,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return EventTeamMember(**defaults)


class VenueFactory:
    @staticmethod
    def create(**overrides):
        from services.events_service.models import VenueReference

        defaults = {
            "id": _uuid(),
            "venue_name": "Hollywood Bowl",
            "city": "Los Angeles",
            "state": "CA",
            "latitude": 34.1122,
            "longitude": -118.3391,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return VenueReference(**defaults)


class RegionFactory:
    @staticmethod
    def create(**overrides):
        from services.events_service.models import Region

        defaults = {
            "id": _uuid(),
            "name": f"Region {uuid.uuid4().hex[:6]}",
            "center_lat": 34.0522,
            "center_lng": -118.2437,
            "radius_miles": 50,
            "is_active": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return Region(**defaults)


class VendorInvitationFactory:
    @staticmethod
    def create(**overrides):
        from services.events_service.models import InvitationType, VendorInvitation

        defaults = {
            "id": _uuid(),
            "invitation_type": InvitationType.BULK,
            "availability": [],
            "created_at": _now(),
        }
        defaults.update(overrides)
        return VendorInvitation(**defaults)


# ---------------------------------------------------------------------------
# Attendance Service
# ---------------------------------------------------------------------------


class TimeEntryFactory:
    @staticmethod
    def create(**overrides):
        from services.attendance_service.models import TimeEntry, TimeEntryAction

        defaults = {
            "id": _uuid(),
            "action": TimeEntryAction.CLOCK_IN,
            "timestamp": _now(),
            "division": "vendor",
            "created_at": _now(),
        }
        defaults.update(overrides)
        return TimeEntry(**defaults)


class GeofenceZoneFactory:
    @staticmethod
    def create(**overrides):
        from services.attendance_service.models import GeofenceZone, ZoneType

        defaults = {
            "id": _uuid(),
            "name": "Main Office",
            "zone_type": ZoneType.CIRCLE,
            "center_latitude": 34.0522,
            "center_longitude": -118.2437,
            "radius_meters": 200,
            "applies_to_roles": ["vendor"],
            "is_active": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return GeofenceZone(**defaults)


# ---------------------------------------------------------------------------
# Payroll Service
# ---------------------------------------------------------------------------


class StateRateFactory:
    @staticmethod
    def create(**overrides):
        from services.payroll_service.models import StateRate

        defaults = {
            "id": _uuid(),
            "state_code": "CA",
            "state_name": "California",
            "base_rate": 17.28,
            "overtime_rate": 1.5,
            "doubletime_rate": 2.0,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return StateRate(**defaults)


class SickLeaveFactory:
    @staticmethod
    def create(**overrides):
        from services.payroll_service.models import SickLeave, SickLeaveStatus

        defaults = {
            "id": _uuid(),
            "start_date": date.today(),
            "end_date": date.today(),
            "duration_hours": 8,
            "status": SickLeaveStatus.APPROVED,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return SickLeave(**defaults)
