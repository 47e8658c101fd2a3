"""FastAPI application for the Attendance Service."""
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.attendance_service.routers import (
    checkin_codes_router,
    geofence_router,
    time_entries_router,
)


def create_app() -> FastAPI:
    """Create and configure the Attendance Service FastAPI app."""
    app = FastAPI(
        title="PDS Attendance Service",
        version="0.1.0",
        description="Check-in codes, clock-in/clock-out and login geofencing.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "attendance"}

    app.include_router(checkin_codes_router)
    app.include_router(time_entries_router)
    app.include_router(geofence_router)

    return app


app = create_app()
