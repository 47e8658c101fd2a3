"""FastAPI application for the Payroll Service."""
from fastapi import FastAPI
from dotenv import load_dotenv

load_dotenv()

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.payroll_service.routers import (
    event_payroll_router,
    my_paystubs_router,
    payments_router,
    paystubs_router,
    rates_router,
    sick_leaves_router,
)


def create_app() -> FastAPI:
    """Create and configure the Payroll Service FastAPI app."""
    app = FastAPI(
        title="PDS Payroll Service",
        version="0.1.0",
        description="Vendor pay, saved payroll, adjustments, rates, sick leave and paystubs.",
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "payroll"}

    app.include_router(payments_router)
    app.include_router(rates_router)
    app.include_router(sick_leaves_router)
    app.include_router(paystubs_router)
    app.include_router(my_paystubs_router)
    app.include_router(event_payroll_router)

    return app


app = create_app()
