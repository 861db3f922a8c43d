"""
Database connection and session management for Drill AI.

State lives in a local SQLite file: tables are created at startup and every
store operation commits, so the file always mirrors the latest mutation.
"""

from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
import os

from drill_ai import models  # noqa: F401  registers the tables on SQLModel.metadata

# Get database URL from environment variable
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite+aiosqlite:///./drill_ai.db"
)

SQL_ECHO = os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes")

# Create async engine
engine = create_async_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    future=True,
    pool_pre_ping=True,  # Verify connections before using
)

# Create async session maker
async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def init_db(bind: Optional[AsyncEngine] = None):
    """
    Initialize database tables.
    Creates all tables defined in SQLModel models.

    Args:
        bind: Engine to initialize (defaults to the application engine)
    """
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db():
    """Dispose of pooled connections on shutdown"""
    await engine.dispose()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for FastAPI to get database sessions.

    Yields:
        AsyncSession: Database session
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
