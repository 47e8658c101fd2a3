"""FastAPI application for the Events Service."""
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.events_service.routers import (
    events_router,
    invitations_router,
    regions_router,
    team_confirmation_router,
)


def create_app() -> FastAPI:
    """Create and configure the Events Service FastAPI app."""
    app = FastAPI(
        title="PDS Events Service",
        version="0.1.0",
        description="Event scheduling, staffing teams, regions and venues.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "events"}

    app.include_router(events_router)
    app.include_router(team_confirmation_router)
    app.include_router(invitations_router)
    app.include_router(regions_router)

    return app


app = create_app()
