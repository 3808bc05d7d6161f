"""
PasteShare — Database Session Management
========================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine (aiosqlite by default, asyncpg for PostgreSQL),
       provides a session dependency that auto-commits on success and
       auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system and
       by the application lifespan for schema creation and shutdown.
When:  Engine is created at module import; sessions are created per-request.

Connection Pooling:
    SQLite (default): the dialect picks its own pool; sizing is not applied.
    PostgreSQL:       pool_size / max_overflow / pool_pre_ping from settings,
                      connections recycled hourly.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from pasteshare.config import Settings, settings


def engine_options(config: Settings) -> Dict[str, Any]:
    """
    Build keyword arguments for create_async_engine from settings.

    SQLite pools reject pool_size/max_overflow, so those are only passed for
    server databases.
    """
    options: Dict[str, Any] = {
        # Echo SQL queries in DEBUG mode for development visibility
        "echo": config.log_level == "DEBUG",
    }
    if not config.is_sqlite:
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine: AsyncEngine = create_async_engine(settings.database_url, **engine_options(settings))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: the store commits inside insert() and callers keep
# reading the returned Paste afterwards
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by Alembic and by init_models().
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/pastes/{paste_id}")
        async def get_paste(paste_id: str, db: AsyncSession = Depends(get_db_session)):
            return await paste_service.get_paste_data(db, parse_paste_id(paste_id))

    Raises:
        Any database exceptions are propagated to the global error handler.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models(bind: AsyncEngine = engine) -> None:
    """
    Create all tables that do not exist yet (CREATE TABLE IF NOT EXISTS).

    When:  Called during application startup if settings.auto_create_schema.
    """
    # Imported for its side effect of registering the table on Base.metadata
    from pasteshare.models.paste import Paste  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
