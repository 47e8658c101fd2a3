"""
Shared fixtures for service tests.

Each ``*_client`` fixture drives one service app in-process with the test
database session injected. Requests run as whoever ``override_auth`` names.
"""

from contextlib import contextmanager
from typing import AsyncGenerator, Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from libs.auth.dependencies import get_current_user, get_optional_user
from libs.auth.models import AuthUser
from libs.common.encryption import encrypt
from libs.db.session import get_async_db
from services.identity_service.models import Division, User, UserRole
from tests.factories import ProfileFactory, UserFactory

PROFILE_FIELDS = (
    "state",
    "city",
    "latitude",
    "longitude",
    "region_id",
    "mfa_enabled",
    "backup_codes",
)


async def make_user(
    db,
    role: UserRole = UserRole.VENDOR,
    *,
    first_name: str = "Test",
    last_name: str = "Vendor",
    division: Optional[Division] = Division.VENDOR,
    with_profile: bool = True,
    **overrides,
) -> User:
    """Insert a user (and profile) and return it."""
    profile_fields = {key: overrides.pop(key) for key in PROFILE_FIELDS if key in overrides}
    user = UserFactory.create(role=role, division=division, **overrides)
    if with_profile:
        user.profile = ProfileFactory.create(
            first_name=encrypt(first_name), last_name=encrypt(last_name), **profile_fields
        )
    db.add(user)
    await db.commit()
    return user


@contextmanager
def override_auth(app, user: User):
    """Authenticate requests to ``app`` as ``user`` for the duration of the block."""
    auth_user = AuthUser(sub=str(user.id), email=user.email)
    app.dependency_overrides[get_current_user] = lambda: auth_user
    app.dependency_overrides[get_optional_user] = lambda: auth_user
    try:
        yield auth_user
    finally:
        app.dependency_overrides.pop(get_current_user, None)
        app.dependency_overrides.pop(get_optional_user, None)


async def _client_for(app, db_session) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_async_db] = lambda: db_session
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Per-service clients
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def identity_client(db_session):
    from services.identity_service.app.main import app

    async for client in _client_for(app, db_session):
        yield client


@pytest_asyncio.fixture
async def onboarding_client(db_session):
    from services.onboarding_service.app.main import app

    async for client in _client_for(app, db_session):
        yield client


@pytest_asyncio.fixture
async def events_client(db_session):
    from services.events_service.app.main import app

    async for client in _client_for(app, db_session):
        yield client


@pytest_asyncio.fixture
async def attendance_client(db_session):
    from services.attendance_service.app.main import app

    async for client in _client_for(app, db_session):
        yield client


@pytest_asyncio.fixture
async def payroll_client(db_session):
    from services.payroll_service.app.main import app

    async for client in _client_for(app, db_session):
        yield client
