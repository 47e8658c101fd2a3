"""FastAPI application for the Identity Service."""
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.identity_service.routers import (
    audit_router,
    auth_router,
    mfa_router,
    users_router,
)


def create_app() -> FastAPI:
    """Create and configure the Identity Service FastAPI app."""
    app = FastAPI(
        title="PDS Identity Service",
        version="0.1.0",
        description="Accounts, login protection, MFA and admin user management.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "identity"}

    app.include_router(auth_router)
    app.include_router(mfa_router)
    app.include_router(users_router)
    app.include_router(audit_router)

    return app


app = create_app()
