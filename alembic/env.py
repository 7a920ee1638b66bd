"""Alembic environment for the wager ledger schema.

Migrations are hand-written SQL (op.execute), so there is no target metadata to
autogenerate against. The URL always comes from config.settings, never alembic.ini.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from config.settings import settings

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _configure_and_run(**kwargs: object) -> None:
    context.configure(target_metadata=None, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


def _run_on_connection(connection: Connection) -> None:
    _configure_and_run(connection=connection)


async def _run_online() -> None:
    engine = create_async_engine(settings.DATABASE_URL, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    # alembic upgrade --sql: render DDL without connecting
    _configure_and_run(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_run_online())
