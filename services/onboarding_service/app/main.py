"""FastAPI application for the Onboarding Service."""
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.onboarding_service.routers import (
    background_checks_router,
    i9_router,
    profile_router,
)


def create_app() -> FastAPI:
    """Create and configure the Onboarding Service FastAPI app."""
    app = FastAPI(
        title="PDS Onboarding Service",
        version="0.1.0",
        description="Vendor onboarding: profile, I-9 documents and background checks.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "onboarding"}

    app.include_router(profile_router)
    app.include_router(i9_router)
    app.include_router(background_checks_router)

    return app


app = create_app()
