import httpx
import pytest
import pytest_asyncio
from services.gateway_service.app import clients
from services.gateway_service.app.main import app


class _FakeServiceClient:
    """Minimal stand-in for ServiceClient that records calls and returns a canned response."""

    def __init__(self, response: httpx.Response = None, error: Exception = None):
        self.response = response
        self.error = error
        self.calls = []

    async def _reply(self, method, path, **kwargs) -> httpx.Response:
        self.calls.append((method, path, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    async def get(self, path, **kwargs) -> httpx.Response:
        return await self._reply("GET", path, **kwargs)

    async def post(self, path, **kwargs) -> httpx.Response:
        return await self._reply("POST", path, **kwargs)

    async def put(self, path, **kwargs) -> httpx.Response:
        return await self._reply("PUT", path, **kwargs)

    async def patch(self, path, **kwargs) -> httpx.Response:
        return await self._reply("PATCH", path, **kwargs)

    async def delete(self, path, **kwargs) -> httpx.Response:
        return await self._reply("DELETE", path, **kwargs)


@pytest_asyncio.fixture
async def client():
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def fake_client(monkeypatch):
    def install(name, **kwargs):
        fake = _FakeServiceClient(**kwargs)
        monkeypatch.setattr(clients, name, fake)
        return fake

    return install


@pytest.mark.asyncio
async def test_gateway_proxies_status_code_and_json(client, fake_client):
    """Ensure gateway surfaces downstream status codes and JSON bodies."""
    fake = fake_client("events_client", response=httpx.Response(201, json={"event": {"id": "1"}}))

    response = await client.post("/api/events", json={"event_name": "Gala"})

    assert response.status_code == 201
    assert response.json() == {"event": {"id": "1"}}
    method, path, kwargs = fake.calls[0]
    assert (method, path) == ("POST", "/events")
    assert b"Gala" in kwargs["content"]


@pytest.mark.asyncio
async def test_gateway_forwards_query_string(client, fake_client):
    fake = fake_client("payroll_client", response=httpx.Response(200, json={"venues": []}))

    response = await client.get("/api/payments/by-venue?state=CA&start_date=2024-01-01")

    assert response.status_code == 200
    assert fake.calls[0][1] == "/payments/by-venue?state=CA&start_date=2024-01-01"


@pytest.mark.asyncio
async def test_gateway_proxies_non_json_payloads(client, fake_client):
    """Ensure gateway passes through non-JSON responses (e.g., paystub PDFs)."""
    pdf_body = b"%PDF-1.4 fake"
    fake_client(
        "payroll_client",
        response=httpx.Response(
            200,
            content=pdf_body,
            headers={
                "Content-Type": "application/pdf",
                "Content-Disposition": 'attachment; filename="paystub.pdf"',
            },
        ),
    )

    response = await client.get("/api/paystubs/abc/def")

    assert response.status_code == 200
    assert response.content == pdf_body
    assert response.headers["content-type"].startswith("application/pdf")
    assert "content-disposition" in response.headers


@pytest.mark.asyncio
async def test_gateway_passes_downstream_errors(client, fake_client):
    fake_client(
        "onboarding_client",
        response=httpx.Response(400, json={"error": "File too large. Maximum size is 5MB."}),
    )

    response = await client.post("/api/profile/upload-photo", content=b"x")

    assert response.status_code == 400
    assert response.json() == {"error": "File too large. Maximum size is 5MB."}


@pytest.mark.asyncio
async def test_gateway_returns_503_when_service_down(client, fake_client):
    fake_client("attendance_client", error=httpx.ConnectError("connection refused"))

    response = await client.get("/api/time-entries")

    assert response.status_code == 503
    assert response.json()["error"].startswith("Service unavailable")


@pytest.mark.asyncio
async def test_gateway_unknown_prefix(client):
    response = await client.get("/api/members/me")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


@pytest.mark.asyncio
async def test_gateway_rate_limited_login_check(client, fake_client):
    fake = fake_client("identity_client", response=httpx.Response(200, json={"canProceed": True}))

    response = await client.post("/api/auth/pre-login-check", json={"email": "a@b.com"})

    assert response.status_code == 200
    assert fake.calls[0][1] == "/auth/pre-login-check"


@pytest.mark.asyncio
async def test_gateway_forgot_password_goes_to_identity(client, fake_client):
    fake = fake_client("identity_client", response=httpx.Response(200, json={"success": True}))

    response = await client.post("/api/auth/forgot-password", json={"email": "a@b.com"})

    assert response.status_code == 200
    assert fake.calls[0][:2] == ("POST", "/auth/forgot-password")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("url", "client_name", "path"),
    [
        ("/api/invitations/abc123", "events_client", "/invitations/abc123"),
        ("/api/my-paystubs", "payroll_client", "/my-paystubs"),
        ("/api/payroll/events/1/save-payment", "payroll_client", "/payroll/events/1/save-payment"),
    ],
)
async def test_gateway_routes_payroll_and_invitation_prefixes(
    client, fake_client, url, client_name, path
):
    fake = fake_client(client_name, response=httpx.Response(200, json={}))

    response = await client.get(url)

    assert response.status_code == 200
    assert fake.calls[0][1] == path
