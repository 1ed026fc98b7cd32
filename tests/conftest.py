"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from country_explorer.config import Settings
from country_explorer.countries.cache import MemoryResultCache
from country_explorer.main import create_app
from tests.fakes import FakeClock, FakeUpstream

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
TEST_PASSWORD = "Str0ng!Pass"


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    """Settings pointing at a throwaway SQLite database, with generous rate limits."""
    values: dict[str, object] = {
        "environment": "test",
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "redis_url": "",
        "log_format": "console",
        "log_level": "WARNING",
        "jwt_secret_key": TEST_SECRET,
        "rate_limit_requests": 10_000,
        "rate_limit_auth": 10_000,
        "upstream_base_url": "https://countries.test/v3.1",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


async def build_app(settings: Settings, **collaborators: object) -> FastAPI:
    app = create_app(settings, **collaborators)
    await app.state.database.create_all()
    return app


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def result_cache(clock: FakeClock) -> MemoryResultCache:
    return MemoryResultCache(ttl_seconds=3600, clock=clock)


@pytest_asyncio.fixture
async def app(
    settings: Settings, upstream: FakeUpstream, result_cache: MemoryResultCache
) -> AsyncGenerator[FastAPI, None]:
    """App wired to a fake upstream, an in-memory cache and a temporary database."""
    application = await build_app(settings, upstream=upstream, result_cache=result_cache)
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register_user(
    client: AsyncClient,
    email: str = "ada@example.com",
    password: str = TEST_PASSWORD,
    first_name: str = "Ada",
    last_name: str = "Lovelace",
) -> dict:
    """Register via the API. Returns credentials plus the issued tokens."""
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "firstName": first_name, "lastName": last_name},
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return {
        "email": email,
        "password": password,
        "user": data["user"],
        "access_token": data["tokens"]["accessToken"],
        "refresh_token": data["tokens"]["refreshToken"],
    }


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    return await register_user(client)


@pytest_asyncio.fixture
async def authed_client(client: AsyncClient, registered_user: dict) -> AsyncClient:
    """Client carrying the registered user's access token."""
    client.headers["Authorization"] = f"Bearer {registered_user['access_token']}"
    return client
