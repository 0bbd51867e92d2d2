"""Shared fixtures for API and service tests.

Every test gets its own SQLite file database built from the ORM metadata.
"""

from __future__ import annotations

import os

# Settings and the default engine are created at import time.
os.environ.setdefault("MILES_AUTH_TOKEN", "test-token")
os.environ.setdefault("MILES_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from miles_tracker_db.database import Database, build_engine, get_db
from miles_tracker_db.models import Base

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from sqlalchemy.ext.asyncio import AsyncEngine

AUTH_HEADERS = {"Authorization": "Bearer test-token"}


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine]:
    sqlite_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'miles.db'}")
    async with sqlite_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield sqlite_engine
    await sqlite_engine.dispose()


@pytest.fixture
def db(engine: AsyncEngine) -> Database:
    return Database(engine)


@pytest.fixture
async def program(db: Database) -> str:
    """Register the ``enrich`` program and return its id."""
    from miles_tracker_api.services.program_service import ProgramService

    item = await ProgramService(db).upsert_program(
        {
            "id": "enrich",
            "name": "Enrich",
            "airline": "Malaysia Airlines",
            "alliance": "oneworld",
        }
    )
    return item.id


@pytest.fixture
def make_record():
    """Factory fixture for raw upsert records."""

    def _make(**overrides: Any) -> dict[str, Any]:
        record: dict[str, Any] = {
            "program_id": "enrich",
            "origin": "KUL",
            "destination": "AKL",
            "flight_number": "MH145",
            "departure_date": "2026-06-01",
            "departure_time": "09:30",
            "arrival_time": "23:55",
            "arrival_day_offset": 0,
            "duration_minutes": 625,
            "route_type": "direct",
            "cabin": "economy",
            "tier": "saver",
            "points": 45000,
            "available": True,
            "seats_left": 4,
            "taxes": 120.5,
            "cash_equivalent": 2450.0,
        }
        record.update(overrides)
        return record

    return _make


@pytest.fixture
async def client(db: Database) -> AsyncGenerator[AsyncClient]:
    """HTTP client bound to the app, with storage pointed at the test database."""
    from miles_tracker_api.main import app

    async def _override_db() -> AsyncGenerator[Database]:
        yield db

    app.dependency_overrides[get_db] = _override_db
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=AUTH_HEADERS
    ) as http_client:
        yield http_client
    app.dependency_overrides.clear()
