"""
Database Connection Module
Handles the relational store connection using the SQLAlchemy async engine.
Supports PostgreSQL (postgresql+psycopg) and SQLite (sqlite+aiosqlite).
"""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.core.config import get_settings, get_logger

logger = get_logger(__name__)
settings = get_settings()


def _engine_options() -> dict:
    """Pool sizing only applies to server databases."""
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,  # Connection pool size
        "max_overflow": 10,  # Extra connections when pool is full
        "pool_pre_ping": True,
    }


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    **_engine_options(),
)

# Session factory - creates new database sessions
async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False  # Objects remain accessible after commit
)


# Base class for all our models
class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    """
    Dependency injection for FastAPI routes.
    Yields a database session and ensures cleanup.
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


def _ensure_sqlite_directory() -> None:
    database = make_url(settings.database_url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


async def init_db():
    """
    Create all tables in database.
    Called once at application startup.
    """
    # Register models on Base.metadata
    import app.models  # noqa: F401

    if settings.is_sqlite:
        _ensure_sqlite_directory()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created successfully")


async def dispose_db():
    """Release pooled connections at shutdown."""
    await engine.dispose()
