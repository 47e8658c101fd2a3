"""Events Service schemas package."""

from services.events_service.schemas.main import (  # noqa: F401
    BulkInviteRequest,
    EventCreate,
    EventResponse,
    EventUpdate,
    InvitationAvailabilitySubmit,
    RegionCreate,
    RegionResponse,
    TeamAddRequest,
    TeamConfirmationAction,
    TeamResendRequest,
    VenueResponse,
)

__all__ = [
    "BulkInviteRequest",
    "EventCreate",
    "EventResponse",
    "EventUpdate",
    "InvitationAvailabilitySubmit",
    "RegionCreate",
    "RegionResponse",
    "TeamAddRequest",
    "TeamConfirmationAction",
    "TeamResendRequest",
    "VenueResponse",
]
