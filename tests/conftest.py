"""
Pytest Configuration and Fixtures
=================================

Shared fixtures for API tests.

HTTP tests run against an in-memory FootballerModel swapped in through
FastAPI dependency overrides, so they need no database. Tests marked
`integration` use the real FootballerModel against DATABASE_URL and are
skipped when PostgreSQL is unreachable.
"""

import os

# Must be set before settings are first loaded
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import asyncio
from datetime import datetime, timezone
from typing import AsyncGenerator, Dict, List, Optional, Sequence, Tuple

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from footballer_api.config import settings
from footballer_api.database import Base
from footballer_api.dependencies import get_db, get_models
from footballer_api.errors import EditConflictError, RecordNotFoundError
from footballer_api.filters import Filters, Metadata, calculate_metadata
from footballer_api.main import app
from footballer_api.models import FOOTBALLER_FIELDS, Footballer
from footballer_api.services import FootballerModel


ADMIN_HEADERS = {"X-API-Key": settings.admin_api_key}

# SQL column name -> attribute key, e.g. "startedplayyear" -> "started_play_year"
COLUMN_TO_ATTRIBUTE = {
    attr.columns[0].name: attr.key for attr in inspect(Footballer).column_attrs
}


def make_footballer(**overrides) -> Footballer:
    """A Footballer that passes validation, with optional overrides."""
    data = {
        "name": "Lionel Messi",
        "titles": 44,
        "started_play_year": 2004,
        "year": 2024,
        "club": "Inter Miami",
        "played_clubs": 3,
        "position": ["RW", "CF"],
        "goals": 838,
    }
    data.update(overrides)
    return Footballer(**data)


def copy_footballer(footballer: Footballer) -> Footballer:
    values = {key: getattr(footballer, key) for key in FOOTBALLER_FIELDS}
    values["position"] = list(values["position"] or [])
    return Footballer(**values)


# =============================================================================
# IN-MEMORY MODEL
# =============================================================================

class InMemoryFootballerModel:
    """
    Dict-backed stand-in with the same contract as FootballerModel.

    Name search is a case-insensitive all-words match, which is close enough
    to plainto_tsquery('simple', ...) for HTTP-level tests.
    """

    def __init__(self):
        self.rows: Dict[int, Footballer] = {}
        self._next_id = 1
        self.error: Optional[Exception] = None

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    async def insert(self, footballer: Footballer) -> Footballer:
        self._maybe_fail()
        footballer.id = self._next_id
        footballer.created_at = datetime.now(timezone.utc)
        footballer.version = 1
        self._next_id += 1
        self.rows[footballer.id] = copy_footballer(footballer)
        return footballer

    async def get(self, footballer_id: int) -> Footballer:
        self._maybe_fail()
        if footballer_id < 1 or footballer_id not in self.rows:
            raise RecordNotFoundError()
        return copy_footballer(self.rows[footballer_id])

    async def update(self, footballer: Footballer) -> Footballer:
        self._maybe_fail()
        stored = self.rows.get(footballer.id)
        if stored is None or stored.version != footballer.version:
            raise EditConflictError()
        footballer.version = stored.version + 1
        self.rows[footballer.id] = copy_footballer(footballer)
        return footballer

    async def delete(self, footballer_id: int) -> None:
        self._maybe_fail()
        if footballer_id < 1 or self.rows.pop(footballer_id, None) is None:
            raise RecordNotFoundError()

    async def get_all(
        self,
        name: str,
        club: str,
        positions: Sequence[str],
        filters: Filters
    ) -> Tuple[List[Footballer], Metadata]:
        self._maybe_fail()
        words = name.lower().split()
        matched = [
            f for f in self.rows.values()
            if all(word in f.name.lower().split() for word in words)
            and (not club or f.club.lower() == club.lower())
            and set(positions) <= set(f.position)
        ]

        attribute = COLUMN_TO_ATTRIBUTE[filters.sort_column()]
        matched.sort(key=lambda f: f.id)
        matched.sort(key=lambda f: getattr(f, attribute), reverse=filters.sort_direction() == "DESC")

        page = matched[filters.offset():filters.offset() + filters.limit()]
        total_records = len(matched) if page else 0
        return [copy_footballer(f) for f in page], calculate_metadata(
            total_records, filters.page, filters.page_size
        )


class InMemoryModels:
    def __init__(self, footballers=None):
        self.footballers = footballers or InMemoryFootballerModel()


# =============================================================================
# HTTP FIXTURES
# =============================================================================

@pytest.fixture
def models() -> InMemoryModels:
    return InMemoryModels()


@pytest_asyncio.fixture(scope="function")
async def client(models: InMemoryModels) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the in-memory model."""
    app.dependency_overrides[get_models] = lambda: models
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def seeded_models(models: InMemoryModels) -> InMemoryModels:
    """
    Seed the in-memory model.

    Creates 5 footballers; two share 30 goals so goal ordering needs the id
    tie-break.
    """
    seeds = [
        make_footballer(name="Lionel Messi", club="Inter Miami", position=["RW", "CF", "CAM"], goals=838, titles=44),
        make_footballer(name="Cristiano Ronaldo", club="Al Nassr", position=["ST", "LW"], goals=895, titles=35),
        make_footballer(name="Erling Haaland", club="Manchester City", position=["ST"], goals=30, titles=9),
        make_footballer(name="Bukayo Saka", club="Arsenal", position=["RW", "LW"], goals=30, titles=2),
        make_footballer(name="Manuel Neuer", club="Bayern Munich", position=["GK"], goals=0, titles=33),
    ]
    for footballer in seeds:
        await models.footballers.insert(footballer)
    return models


# =============================================================================
# POSTGRES FIXTURES
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def pg_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Session on DATABASE_URL with an empty footballers table.

    Skips the test when the database cannot be reached.
    """
    engine = create_async_engine(settings.async_database_url)
    try:
        async with engine.begin() as conn:
            await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=3)
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text("TRUNCATE TABLE footballers RESTART IDENTITY"))
    except Exception as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL not available: {e}")

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.execute(text("TRUNCATE TABLE footballers RESTART IDENTITY"))
    await engine.dispose()


@pytest.fixture
def pg_model(pg_session: AsyncSession) -> FootballerModel:
    return FootballerModel(pg_session)


@pytest.fixture
def override_db():
    """Install a session for routes that depend on get_db directly (health)."""
    def install(session):
        async def _get_db():
            yield session
        app.dependency_overrides[get_db] = _get_db
    yield install
    app.dependency_overrides.pop(get_db, None)
