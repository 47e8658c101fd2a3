"""
Alembic environment for the PDS staffing database.

All services share one database and one ``Base.metadata``; each service's
models package is imported so its tables are visible to autogenerate.
"""

import asyncio
import importlib
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.base import Base

SERVICE_MODEL_PACKAGES = (
    "services.identity_service.models",
    "services.onboarding_service.models",
    "services.events_service.models",
    "services.attendance_service.models",
    "services.payroll_service.models",
)

for package in SERVICE_MODEL_PACKAGES:
    importlib.import_module(package)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

logger = get_logger("alembic.env")
target_metadata = Base.metadata
database_url = get_settings().DATABASE_URL


def _configure_kwargs() -> dict:
    # SQLite cannot ALTER most constraints in place
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": database_url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Emit the migration SQL to the script output without a connection."""
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, **_configure_kwargs())

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(database_url, poolclass=pool.NullPool)
    logger.info(
        "Running migrations for %d service model packages", len(SERVICE_MODEL_PACKAGES)
    )

    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
