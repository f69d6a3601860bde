"""Shared fixtures for catalog integration tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import redis.asyncio as aioredis
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from hatchery.catalog.app import app
from hatchery.catalog.cache import WorkerModelCache
from hatchery.catalog.db.tables import Group
from hatchery.catalog.deps import get_db
from tests.catalog.helpers import CACHE_NAMESPACE, SERVICE_TOKEN, Seeder


@pytest.fixture
def seed(db_session: AsyncSession) -> Seeder:
    return Seeder(db_session)


@pytest.fixture
async def shared_infra(seed: Seeder) -> Group:
    return await seed.group("shared.infra")


@pytest.fixture
async def client(db_session: AsyncSession, redis_client: aioredis.Redis) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with a test DB session.

    Overrides ``get_db`` so every request uses the savepoint-isolated
    ``db_session`` fixture from the root conftest.  The app lifespan does
    NOT run under ``ASGITransport``, so state fields are pre-set here.
    """

    async def _override_get_db() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    # Pre-set state fields (lifespan does not run under ASGITransport).
    app.state.db_engine = None
    app.state.db_session_factory = None
    app.state.redis = redis_client
    app.state.auth_token = SERVICE_TOKEN
    app.state.model_cache = WorkerModelCache(redis_client, namespace=CACHE_NAMESPACE)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
