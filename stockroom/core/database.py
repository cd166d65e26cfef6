"""
Async database setup with SQLAlchemy 2.0.
Provides connection pooling, session management, and base model.
"""
from typing import AsyncGenerator
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import MetaData, DateTime, Uuid, event, func, text
from sqlalchemy.pool import NullPool
import uuid
from datetime import datetime, timezone

from stockroom.core.config import settings
from stockroom.logging_config import get_logger

logger = get_logger("database")


# Naming convention for constraints
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""
    metadata = metadata

    # Common columns for all tables
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False
    )


class UpdatedAtMixin:
    """Adds ``updated_at`` to tables whose rows may change after insert."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False
    )


# Global engine and session factory
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _install_sqlite_locking(async_engine: AsyncEngine) -> None:
    """
    Make every SQLite transaction take the write lock up front.

    SQLite has no row locks, so ``SELECT ... FOR UPDATE`` compiles to a plain
    SELECT. Beginning with ``BEGIN IMMEDIATE`` serializes read-modify-write
    sequences the way a row lock does on PostgreSQL.
    """
    sync_engine = async_engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an engine for ``database_url`` with dialect-appropriate pooling."""
    if database_url.startswith("sqlite"):
        # SQLite doesn't support connection pooling
        async_engine = create_async_engine(
            database_url,
            echo=echo,
            poolclass=NullPool,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.db_busy_timeout
            }
        )
        _install_sqlite_locking(async_engine)
        return async_engine

    # PostgreSQL with connection pooling
    return create_async_engine(
        database_url,
        echo=echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,   # Recycle connections after 1 hour
    )


def build_session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


def get_engine() -> AsyncEngine:
    """Get or create the database engine."""
    global engine

    if engine is None:
        engine = build_engine(settings.database_url, echo=settings.db_echo)

    return engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global AsyncSessionLocal

    if AsyncSessionLocal is None:
        AsyncSessionLocal = build_session_factory(get_engine())

    return AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI endpoints.
    Provides a database session and ensures proper cleanup.

    Usage:
        @router.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            result = await db.execute(select(Item))
            return result.scalars().all()
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def get_db_context():
    """
    Context manager for database sessions outside of request handling.

    Usage:
        async with get_db_context() as db:
            ledger = StockLedger(db)
            await ledger.summarize(owner_id)
    """
    session_factory = get_session_factory()
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db(async_engine: AsyncEngine | None = None) -> None:
    """Initialize database tables. Use Alembic in production."""
    async_engine = async_engine or get_engine()
    async with async_engine.begin() as conn:
        # Import all models to ensure they're registered
        from stockroom import models  # noqa: F401

        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
        engine = None

    AsyncSessionLocal = None


async def check_db_connection() -> bool:
    """Health check for database connection."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as exc:
        logger.warning(f"Database health check failed: {exc}")
        return False
