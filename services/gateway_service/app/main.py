"""FastAPI application entrypoint for the PDS gateway service.

Every ``/api/<prefix>/...`` request is forwarded to the service that owns
``<prefix>``; the ``/api`` part is dropped on the way through.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import (
    auth_limit,
    limiter,
    login_check_limit,
    rate_limit_exceeded_handler,
)
from services.gateway_service.app import clients

logger = get_logger(__name__)

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

# First path segment after /api -> name of the client in ``clients``.
SERVICE_PREFIXES = {
    "auth": "identity_client",
    "users": "identity_client",
    "audit": "identity_client",
    "profile": "onboarding_client",
    "i9-documents": "onboarding_client",
    "background-checks": "onboarding_client",
    "events": "events_client",
    "team-confirmation": "events_client",
    "invitations": "events_client",
    "regions": "events_client",
    "venues": "events_client",
    "checkin-codes": "attendance_client",
    "time-entries": "attendance_client",
    "geofence": "attendance_client",
    "vendor-payments": "payroll_client",
    "payment-adjustments": "payroll_client",
    "payments": "payroll_client",
    "hr": "payroll_client",
    "sick-leaves": "payroll_client",
    "rates": "payroll_client",
    "paystubs": "payroll_client",
    "my-paystubs": "payroll_client",
    "payroll": "payroll_client",
}


def resolve_client(prefix: str) -> clients.ServiceClient:
    client_name = SERVICE_PREFIXES.get(prefix)
    if client_name is None:
        raise HTTPException(status_code=404, detail="Not found")
    return getattr(clients, client_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="PDS Gateway Service",
        version="0.1.0",
        description="API Gateway that fronts the PDS microservices.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok", "service": "gateway"}

    # ==================================================================
    # RATE LIMITED AUTH ENDPOINTS
    # ==================================================================
    @app.post("/api/auth/pre-login-check")
    @login_check_limit
    async def proxy_pre_login_check(request: Request):
        """Proxy the pre-login lockout check (10/minute per IP)."""
        return await proxy_request(clients.identity_client, "/auth/pre-login-check", request)

    @app.post("/api/auth/forgot-password")
    @auth_limit
    async def proxy_forgot_password(request: Request):
        """Proxy the password reset email request (5/minute per IP)."""
        return await proxy_request(clients.identity_client, "/auth/forgot-password", request)

    @app.post("/api/auth/mfa/send-login-code")
    @auth_limit
    async def proxy_send_login_code(request: Request):
        """Proxy the emailed MFA code send (5/minute per IP)."""
        return await proxy_request(
            clients.identity_client, "/auth/mfa/send-login-code", request
        )

    # ==================================================================
    # SERVICE PROXY
    # ==================================================================
    @app.api_route("/api/{prefix}", methods=PROXY_METHODS)
    async def proxy_root(prefix: str, request: Request):
        """Proxy collection roots such as /api/events."""
        return await proxy_request(resolve_client(prefix), f"/{prefix}", request)

    @app.api_route("/api/{prefix}/{path:path}", methods=PROXY_METHODS)
    async def proxy_path(prefix: str, path: str, request: Request):
        """Proxy /api/<prefix>/<path> to the service owning <prefix>."""
        return await proxy_request(resolve_client(prefix), f"/{prefix}/{path}", request)

    return app


def _filter_service_headers(headers: httpx.Headers) -> list[tuple[str, str]]:
    """Strip hop-by-hop headers that FastAPI/starlette manages."""
    hop_by_hop = {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "content-length",
        "content-encoding",
        "host",
        "content-type",
    }
    return [(k, v) for k, v in headers.items() if k.lower() not in hop_by_hop]


async def proxy_request(client: clients.ServiceClient, path: str, request: Request):
    """Generic proxy function to forward requests to microservices."""
    try:
        # Forward the body as raw bytes so multipart uploads arrive untouched.
        content_body = None
        if request.method in ["POST", "PATCH", "PUT"]:
            body_bytes = await request.body()
            if body_bytes:
                content_body = body_bytes

        headers = {
            k: v
            for k, v in request.headers.items()
            if k.lower() not in ["content-length", "host"]
        }

        query_params = request.url.query
        if query_params:
            path = f"{path}?{query_params}"

        if request.method == "GET":
            service_response = await client.get(path, headers=headers)
        elif request.method == "POST":
            service_response = await client.post(path, content=content_body, headers=headers)
        elif request.method == "PUT":
            service_response = await client.put(path, content=content_body, headers=headers)
        elif request.method == "PATCH":
            service_response = await client.patch(path, content=content_body, headers=headers)
        elif request.method == "DELETE":
            service_response = await client.delete(path, headers=headers)
        else:
            raise HTTPException(status_code=405, detail="Method not allowed")

    except httpx.RequestError as e:
        logger.warning("Downstream request to %s failed: %s", path, e)
        raise HTTPException(status_code=503, detail=f"Service unavailable: {str(e)}")

    forward_headers = dict(_filter_service_headers(service_response.headers))

    if service_response.status_code == 204:
        return Response(status_code=204, headers=forward_headers)

    content_type = service_response.headers.get("content-type", "")

    if "application/json" in content_type:
        try:
            payload = service_response.json()
            return JSONResponse(
                content=payload,
                status_code=service_response.status_code,
                headers=forward_headers,
            )
        except ValueError:
            # Fall back to raw bytes if the payload is not valid JSON.
            pass

    return Response(
        content=service_response.content,
        status_code=service_response.status_code,
        media_type=content_type or None,
        headers=forward_headers,
    )


app = create_app()
