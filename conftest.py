import os
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Test settings must be in place before any libs module reads them.
os.environ.setdefault("ENVIRONMENT", "local")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./pds_test.db")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-key-with-32-plus-characters")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SMTP_USERNAME", "")
os.environ.setdefault("BREVO_KEY", "")
os.environ.setdefault("SMTP_PASSWORD", "")

from libs.common.config import get_settings
from libs.db.base import Base

# Import all models so metadata includes every table
from services.identity_service import models as _identity_models  # noqa: F401
from services.onboarding_service import models as _onboarding_models  # noqa: F401
from services.events_service import models as _events_models  # noqa: F401
from services.attendance_service import models as _attendance_models  # noqa: F401
from services.payroll_service import models as _payroll_models  # noqa: F401

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
settings = get_settings()


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create a throwaway SQLite database for one test.

    Each test gets its own file so commits made by request handlers never
    leak into other tests.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session bound to the per-test database."""
    session_factory = async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()
