"""Shared test fixtures for the DevPath backend."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import fakeredis.aioredis
import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from app.config import Environment, Settings
from app.dependencies import get_redis
from app.main import create_app
from services.models import ProfileFact, RepositoryFact

# Fixed reference time so recency rules are reproducible
NOW = datetime(2026, 1, 20, 12, 0, tzinfo=UTC)


def make_repo(
    repo_id: int = 1,
    name: str = "zzz",
    description: str | None = None,
    language: str | None = None,
    stars: int = 0,
    languages: dict[str, int] | None = None,
    days_ago: float = 400,
    fork: bool = False,
) -> RepositoryFact:
    """Build a repository fact pushed `days_ago` days before NOW."""
    return RepositoryFact(
        id=repo_id,
        name=name,
        description=description,
        language=language,
        stars=stars,
        url=f"https://github.com/testuser/{name}",
        pushed_at=NOW - timedelta(days=days_ago),
        languages=languages or {},
        fork=fork,
    )


def make_profile(**overrides) -> ProfileFact:
    data = {
        "login": "testuser",
        "name": "Test User",
        "bio": "Developer",
        "followers": 0,
        "following": 0,
        "public_repos": 0,
        "avatar_url": "https://example.com/avatar.png",
        "html_url": "https://github.com/testuser",
    }
    data.update(overrides)
    return ProfileFact(**data)


@pytest.fixture
def test_settings() -> Settings:
    """Provide test settings with safe defaults."""
    return Settings(
        environment=Environment.TESTING,
        debug=True,
        redis_url="redis://localhost:6379/15",
        github_token=SecretStr("ghp_test_token_fake_value"),
        cors_origins=["http://localhost:3000"],
    )


@pytest.fixture
def fake_server() -> fakeredis.FakeServer:
    """Shared in-memory server, for opening a second client on the same data."""
    return fakeredis.FakeServer()


@pytest.fixture
async def fake_redis(fake_server) -> AsyncGenerator:
    """Provide a fake Redis instance for testing."""
    server = fake_server
    redis = fakeredis.aioredis.FakeRedis(server=server)
    yield redis
    await redis.aclose()


@pytest.fixture
async def api_client() -> AsyncGenerator:
    """Async HTTP client with a fake Redis dependency override."""
    app = create_app()
    server = fakeredis.FakeServer()
    redis = fakeredis.aioredis.FakeRedis(server=server, decode_responses=True)

    async def override_get_redis():
        yield redis

    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await redis.aclose()
    app.dependency_overrides.clear()
