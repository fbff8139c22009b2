"""Tests for the GitHub service."""

from datetime import UTC, datetime, timedelta
from email.utils import format_datetime
from unittest.mock import patch

import fakeredis.aioredis
import pytest
import respx
from httpx import Response

from app.exceptions import GitHubAPIError, GitHubRateLimitError, GitHubUserNotFoundError
from services.github_service import GitHubService

API = "https://api.github.com"

USER_PAYLOAD = {
    "login": "testuser",
    "name": "Test User",
    "avatar_url": "https://example.com/avatar.png",
    "html_url": "https://github.com/testuser",
    "public_repos": 3,
    "followers": 100,
    "following": 50,
    "bio": "Developer",
}

REPOS_PAYLOAD = [
    {
        "id": 1,
        "name": "repo-1",
        "description": "A React dashboard",
        "language": "TypeScript",
        "stargazers_count": 10,
        "html_url": "https://github.com/testuser/repo-1",
        "fork": False,
        "pushed_at": "2026-01-15T12:00:00Z",
    },
    {
        "id": 2,
        "name": "forked-lib",
        "description": "Someone else's code",
        "language": "Go",
        "stargazers_count": 0,
        "html_url": "https://github.com/testuser/forked-lib",
        "fork": True,
        "pushed_at": "2026-01-10T12:00:00Z",
    },
    {
        "id": 3,
        "name": "repo-3",
        "description": None,
        "language": None,
        "stargazers_count": 0,
        "html_url": "https://github.com/testuser/repo-3",
        "fork": False,
        "pushed_at": None,
        "updated_at": "2025-06-01T00:00:00Z",
    },
]


@pytest.fixture
def github_service(fake_redis):
    """Provide GitHub service with fake Redis."""
    return GitHubService(redis=fake_redis)


def _mock_happy_path(username: str = "testuser"):
    respx.get(f"{API}/users/{username}").mock(return_value=Response(200, json=USER_PAYLOAD))
    repos = respx.get(f"{API}/users/{username}/repos").mock(
        return_value=Response(200, json=REPOS_PAYLOAD)
    )
    respx.get(f"{API}/repos/{username}/repo-1/languages").mock(
        return_value=Response(200, json={"TypeScript": 9000, "CSS": 700})
    )
    respx.get(f"{API}/repos/{username}/repo-3/languages").mock(
        return_value=Response(500, json={"message": "boom"})
    )
    return repos


class TestGitHubService:
    """Test suite for GitHubService."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_fetches_profile_and_owned_repos(self, github_service):
        _mock_happy_path()

        data = await github_service.get_github_data("testuser")

        assert data.profile.login == "testuser"
        assert data.profile.followers == 100
        assert [r.name for r in data.repos] == ["repo-1", "repo-3"]
        assert all(not r.fork for r in data.repos)
        assert data.repos[0].languages == {"TypeScript": 9000, "CSS": 700}
        assert data.repos[0].stars == 10
        assert data.repos[0].pushed_at == datetime(2026, 1, 15, 12, 0, tzinfo=UTC)

    @respx.mock
    @pytest.mark.asyncio
    async def test_failed_language_lookup_degrades_to_empty(self, github_service):
        _mock_happy_path()
        data = await github_service.get_github_data("testuser")
        assert data.repos[1].languages == {}

    @respx.mock
    @pytest.mark.asyncio
    async def test_missing_pushed_at_falls_back_to_updated_at(self, github_service):
        _mock_happy_path()
        data = await github_service.get_github_data("testuser")
        assert data.repos[1].pushed_at == datetime(2025, 6, 1, tzinfo=UTC)

    @respx.mock
    @pytest.mark.asyncio
    async def test_repo_listing_query(self, github_service):
        repos_route = _mock_happy_path()
        await github_service.get_github_data("testuser")

        params = repos_route.calls.last.request.url.params
        assert params["type"] == "owner"
        assert params["sort"] == "pushed"
        assert params["per_page"] == "100"

    @respx.mock
    @pytest.mark.asyncio
    async def test_second_fetch_hits_cache(self, github_service):
        repos_route = _mock_happy_path()

        first = await github_service.get_github_data("testuser")
        second = await github_service.get_github_data("testuser")

        assert first == second
        assert repos_route.call_count == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_invalidate_cache_forces_refetch(self, github_service):
        repos_route = _mock_happy_path()

        await github_service.get_github_data("testuser")
        deleted = await github_service.invalidate_cache("testuser")
        await github_service.get_github_data("testuser")

        assert deleted == 1
        assert repos_route.call_count == 2

    @respx.mock
    @pytest.mark.asyncio
    async def test_user_not_found(self, github_service):
        respx.get(f"{API}/users/nonexistent").mock(
            return_value=Response(404, json={"message": "Not Found"})
        )
        respx.get(f"{API}/users/nonexistent/repos").mock(
            return_value=Response(404, json={"message": "Not Found"})
        )
        with pytest.raises(GitHubUserNotFoundError) as exc_info:
            await github_service.get_github_data("nonexistent")
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "GitHub user not found."

    @respx.mock
    @pytest.mark.asyncio
    async def test_other_client_error_carries_upstream_message(self, github_service):
        respx.get(f"{API}/users/weird").mock(
            return_value=Response(422, json={"message": "Validation Failed"})
        )
        respx.get(f"{API}/users/weird/repos").mock(return_value=Response(200, json=[]))
        with pytest.raises(GitHubAPIError) as exc_info:
            await github_service.get_github_data("weird")
        assert exc_info.value.message == "GitHub API Error: Validation Failed"

    @respx.mock
    @pytest.mark.asyncio
    async def test_client_error_without_message(self, github_service):
        respx.get(f"{API}/users/weird").mock(return_value=Response(400, text="nope"))
        respx.get(f"{API}/users/weird/repos").mock(return_value=Response(200, json=[]))
        with pytest.raises(GitHubAPIError) as exc_info:
            await github_service.get_github_data("weird")
        assert exc_info.value.message == "GitHub API Error: Failed to fetch data"

    @respx.mock
    @pytest.mark.asyncio
    async def test_rate_limit_after_retries(self, github_service):
        route = respx.get(f"{API}/users/limited").mock(
            return_value=Response(429, json={"message": "API rate limit exceeded"})
        )
        respx.get(f"{API}/users/limited/repos").mock(return_value=Response(200, json=[]))

        with patch.object(GitHubService, "_backoff_delay", return_value=0.0):
            with pytest.raises(GitHubRateLimitError):
                await github_service.get_github_data("limited")

        assert route.call_count == github_service.settings.github_max_retries + 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self, github_service):
        respx.get(f"{API}/users/flaky").mock(
            side_effect=[Response(503), Response(200, json={**USER_PAYLOAD, "login": "flaky"})]
        )
        respx.get(f"{API}/users/flaky/repos").mock(return_value=Response(200, json=[]))

        with patch.object(GitHubService, "_backoff_delay", return_value=0.0):
            data = await github_service.get_github_data("flaky")

        assert data.profile.login == "flaky"
        assert data.repos == []

    @respx.mock
    @pytest.mark.asyncio
    async def test_token_sent_as_bearer(self, fake_redis, test_settings):
        route = respx.get(f"{API}/users/testuser").mock(
            return_value=Response(200, json=USER_PAYLOAD)
        )
        respx.get(f"{API}/users/testuser/repos").mock(return_value=Response(200, json=[]))

        with patch("services.github_service.get_settings", return_value=test_settings):
            service = GitHubService(redis=fake_redis)
        await service.get_github_data("testuser")

        headers = route.calls.last.request.headers
        assert headers["Authorization"] == "Bearer ghp_test_token_fake_value"
        assert headers["Accept"] == "application/vnd.github+json"

    def test_backoff_delay_is_capped(self):
        assert GitHubService._backoff_delay(10) == 30.0
        assert 1.0 <= GitHubService._backoff_delay(0) <= 1.1

    @respx.mock
    @pytest.mark.asyncio
    async def test_large_payload_cached_with_decoding_client(self):
        """Compressed entries read back through a client that decodes to str."""
        redis = fakeredis.aioredis.FakeRedis(decode_responses=True)
        service = GitHubService(redis=redis)
        repos = [
            {
                "id": i,
                "name": f"project-{i}",
                "description": (
                    f"Service number {i} built with FastAPI, Redis, Docker "
                    "and a PostgreSQL backed task queue"
                ),
                "language": "Python",
                "stargazers_count": i,
                "html_url": f"https://github.com/testuser/project-{i}",
                "fork": False,
                "pushed_at": "2026-01-15T12:00:00Z",
            }
            for i in range(20)
        ]
        respx.get(f"{API}/users/testuser").mock(return_value=Response(200, json=USER_PAYLOAD))
        repos_route = respx.get(f"{API}/users/testuser/repos").mock(
            return_value=Response(200, json=repos)
        )
        respx.get(url__regex=rf"{API}/repos/testuser/project-\d+/languages").mock(
            return_value=Response(200, json={"Python": 15000, "Dockerfile": 300})
        )

        first = await service.get_github_data("testuser")
        stored = await redis.get("github:data:testuser")
        second = await service.get_github_data("testuser")
        await redis.aclose()

        assert stored.startswith("z:")
        assert len(first.repos) == 20
        assert second == first
        assert repos_route.call_count == 1

    def test_retry_after_seconds(self):
        assert GitHubService._retry_after_seconds("120") == 120
        assert GitHubService._retry_after_seconds(None) is None
        assert GitHubService._retry_after_seconds("soon-ish") is None

    def test_retry_after_http_date(self):
        now = datetime(2026, 1, 20, 12, 0, tzinfo=UTC)
        header = format_datetime(now + timedelta(seconds=30), usegmt=True)
        assert GitHubService._retry_after_seconds(header, now=now) == 30
        past = format_datetime(now - timedelta(minutes=5), usegmt=True)
        assert GitHubService._retry_after_seconds(past, now=now) == 0

    @respx.mock
    @pytest.mark.asyncio
    async def test_rate_limit_with_http_date_retry_after(self, github_service):
        retry_at = format_datetime(datetime(2020, 1, 1, tzinfo=UTC), usegmt=True)
        respx.get(f"{API}/users/dated").mock(
            side_effect=[
                Response(429, headers={"Retry-After": retry_at}),
                Response(200, json={**USER_PAYLOAD, "login": "dated"}),
            ]
        )
        respx.get(f"{API}/users/dated/repos").mock(return_value=Response(200, json=[]))

        data = await github_service.get_github_data("dated")

        assert data.profile.login == "dated"

    @respx.mock
    @pytest.mark.asyncio
    async def test_rate_limit_error_carries_retry_after(self, github_service):
        respx.get(f"{API}/users/limited").mock(
            return_value=Response(429, headers={"Retry-After": "0"})
        )
        respx.get(f"{API}/users/limited/repos").mock(return_value=Response(200, json=[]))

        with pytest.raises(GitHubRateLimitError) as exc_info:
            await github_service.get_github_data("limited")

        assert exc_info.value.status_code == 429
