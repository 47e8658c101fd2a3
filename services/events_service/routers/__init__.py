"""Events service routers."""

from services.events_service.routers.events import router as events_router
from services.events_service.routers.invitations import router as invitations_router
from services.events_service.routers.regions import router as regions_router
from services.events_service.routers.team_confirmation import (
    router as team_confirmation_router,
)

__all__ = [
    "events_router",
    "invitations_router",
    "regions_router",
    "team_confirmation_router",
]
