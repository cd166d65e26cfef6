"""
Alembic environment for the Stockroom schema.

The database URL comes from the application settings (``DATABASE_URL``),
so migrations always target the same database the API uses. Both
PostgreSQL (asyncpg) and SQLite (aiosqlite) URLs are supported.
"""
import asyncio
from logging.config import fileConfig

from sqlalchemy.engine import Connection
from alembic import context

from stockroom.core.config import settings
from stockroom.core.database import Base, build_engine
# Registers every table on Base.metadata
import stockroom.models  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata
database_url = config.get_main_option("sqlalchemy.url") or settings.database_url


def _configure(**kwargs) -> None:
    # SQLite cannot ALTER most constraints in place
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=database_url.startswith("sqlite"),
        **kwargs
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout without connecting."""
    _configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    engine = build_engine(database_url)

    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
