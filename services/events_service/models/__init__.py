"""Events Service models package."""

from services.events_service.models.core import (
    Event,
    EventTeamMember,
    ManagerTeamMember,
    Region,
    VendorInvitation,
    VenueReference,
)
from services.events_service.models.enums import (
    InvitationStatus,
    InvitationType,
    TeamMemberStatus,
)

__all__ = [
    "Event",
    "EventTeamMember",
    "InvitationStatus",
    "InvitationType",
    "ManagerTeamMember",
    "Region",
    "TeamMemberStatus",
    "VendorInvitation",
    "VenueReference",
]
