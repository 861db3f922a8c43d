"""Pytest configuration for repository test runs."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
BACKEND_PATH = PROJECT_ROOT / "backend"


def pytest_sessionstart() -> None:
    """Add backend directory to sys.path and keep the default database out of the repo."""
    if str(BACKEND_PATH) not in sys.path:
        sys.path.insert(0, str(BACKEND_PATH))
    os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture
def db_engine(tmp_path):
    """Fresh SQLite file with all tables created."""
    from sqlalchemy.ext.asyncio import create_async_engine
    from sqlalchemy.pool import NullPool

    from drill_ai.database import init_db

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'drill_ai_test.db'}",
        poolclass=NullPool,
    )
    asyncio.run(init_db(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(db_engine):
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import sessionmaker

    return sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
def client(session_factory):
    """API client bound to the per-test database."""
    from fastapi.testclient import TestClient

    from drill_ai.database import get_session
    from drill_ai.main import app

    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_csv() -> bytes:
    return b"Depth,DT,GR\n1267,62.624,87.588\n1274.4,65.123,89.234\n"
