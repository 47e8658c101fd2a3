"""HTTP clients for gateway to call microservices."""
from typing import Dict, Optional

import httpx
from libs.common.config import get_settings

settings = get_settings()


class ServiceClient:
    """Forwards requests to one microservice and hands back the raw response."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _send(
        self,
        method: str,
        path: str,
        content: Optional[bytes] = None,
        headers: Optional[Dict] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(
                method, f"{self.base_url}{path}", content=content, headers=headers or {}
            )

    async def get(self, path: str, headers: Optional[Dict] = None) -> httpx.Response:
        return await self._send("GET", path, headers=headers)

    async def post(
        self, path: str, content: Optional[bytes] = None, headers: Optional[Dict] = None
    ) -> httpx.Response:
        return await self._send("POST", path, content=content, headers=headers)

    async def put(
        self, path: str, content: Optional[bytes] = None, headers: Optional[Dict] = None
    ) -> httpx.Response:
        return await self._send("PUT", path, content=content, headers=headers)

    async def patch(
        self, path: str, content: Optional[bytes] = None, headers: Optional[Dict] = None
    ) -> httpx.Response:
        return await self._send("PATCH", path, content=content, headers=headers)

    async def delete(self, path: str, headers: Optional[Dict] = None) -> httpx.Response:
        return await self._send("DELETE", path, headers=headers)


# Service client instances
identity_client = ServiceClient(settings.IDENTITY_SERVICE_URL)
onboarding_client = ServiceClient(settings.ONBOARDING_SERVICE_URL)
events_client = ServiceClient(settings.EVENTS_SERVICE_URL)
attendance_client = ServiceClient(settings.ATTENDANCE_SERVICE_URL)
payroll_client = ServiceClient(settings.PAYROLL_SERVICE_URL)
