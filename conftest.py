"""
Shared fixtures: a throwaway SQLite database per test and an HTTP client
bound to the API application.
"""
import os

# Settings are read at import time, so the environment is fixed before perks is imported
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./perks_test.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from perks.core.database import get_async_session
from perks.main import app
from perks.models import Deal, User
from perks.models.base import utcnow


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'perks.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_async_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def create_deal(session_maker):
    """Insert a deal straight into the database; keyword arguments override the defaults."""
    counter = {"n": 0}

    async def _create(**fields) -> Deal:
        counter["n"] += 1
        values = {
            "title": f"Test Deal {counter['n']:02d}",
            "description": "A generous discount on a tool every startup needs.",
            "category": "productivity",
            "partner_name": "Acme",
            "partner_website": "https://acme.example.com",
            "discount_type": "percentage",
            "discount_value": "50%",
            "features": ["Feature one", "Feature two"],
            # Spread creation times so newest-first ordering is deterministic
            "created_at": utcnow() - timedelta(minutes=100 - counter["n"]),
        }
        values.update(fields)
        async with session_maker() as session:
            deal = Deal(**values)
            session.add(deal)
            await session.commit()
            await session.refresh(deal)
            return deal

    return _create


@pytest.fixture
def register(client):
    """Register a user through the API and return the response data."""
    counter = {"n": 0}

    async def _register(**fields) -> dict:
        counter["n"] += 1
        payload = {
            "name": "Test User",
            "email": f"user{counter['n']}@example.com",
            "password": "password123",
        }
        payload.update(fields)
        response = await client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


@pytest.fixture
def verify_user(session_maker):
    async def _verify(user_id: str) -> None:
        async with session_maker() as session:
            user = await session.get(User, user_id)
            user.is_verified = True
            session.add(user)
            await session.commit()

    return _verify
