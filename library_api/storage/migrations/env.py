"""
Alembic environment for the catalog schema.

The database URL always comes from the application settings, so
``alembic upgrade head`` migrates whatever database the service would
connect to. SQLite runs in batch mode because it cannot ALTER constraints.
"""

import asyncio

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

import library_api.models  # noqa: F401
from library_api.logging import logger
from library_api.settings import app_settings

DATABASE_URL = app_settings.database_url
IS_SQLITE = DATABASE_URL.startswith("sqlite")


def _configure(**kwargs) -> None:  # type: ignore[no-untyped-def]
    context.configure(
        target_metadata=SQLModel.metadata,
        compare_type=True,
        render_as_batch=IS_SQLITE,
        **kwargs,
    )


def run_offline() -> None:
    """Write the migration SQL to stdout without connecting."""
    _configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    """Migrate over a throwaway async engine."""
    engine = create_async_engine(DATABASE_URL, poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()

    logger.info("Catalog schema migrated")


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
