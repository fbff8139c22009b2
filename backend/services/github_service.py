"""GitHub Data Service.

Fetches a user's public profile and owned, non-fork repositories from the
GitHub REST API, then looks up each repository's language byte map
concurrently. Results are cached in Redis with a configurable TTL.

The inference engine only ever sees the completed GitHubData; retries,
rate limiting and timeouts are handled here.
"""

from __future__ import annotations

import asyncio
import base64
import json
import random
import zlib
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx
import redis.asyncio as aioredis

from app.config import get_settings
from app.exceptions import (
    GitHubAPIError,
    GitHubRateLimitError,
    GitHubUserNotFoundError,
)
from app.logging_config import get_logger
from app.metrics import (
    GITHUB_API_CALLS,
    GITHUB_API_DURATION,
    GITHUB_CACHE_HITS,
    GITHUB_CACHE_MISSES,
)
from services.models import GitHubData, ProfileFact, RepositoryFact

logger = get_logger(__name__)

CACHE_COMPRESS_THRESHOLD = 4096  # Compress payloads > 4KB
COMPRESSED_PREFIX = "z:"  # base64 zlib follows; JSON never starts with it
REPOS_PER_PAGE = 100


class GitHubService:
    """Service for fetching and caching GitHub profile data.

    Cache strategy:
    - Profile + repos + languages: github:data:{username}
    """

    def __init__(self, redis: aioredis.Redis) -> None:
        self.redis = redis
        self.settings = get_settings()
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.settings.github_token:
            self._headers["Authorization"] = (
                f"Bearer {self.settings.github_token.get_secret_value()}"
            )

    # --- Cache Helpers ---

    async def _cache_get(self, key: str) -> Any | None:
        """Get value from Redis cache, inflating compressed payloads.

        Stored values are always text, so this works the same whether or
        not the client decodes responses.
        """
        raw = await self.redis.get(key)
        if raw is None:
            GITHUB_CACHE_MISSES.inc()
            return None

        GITHUB_CACHE_HITS.inc()
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")

        if raw.startswith(COMPRESSED_PREFIX):
            compressed = base64.b64decode(raw[len(COMPRESSED_PREFIX):])
            raw = zlib.decompress(compressed).decode("utf-8")

        return json.loads(raw)

    async def _cache_set(self, key: str, value: Any, ttl: int) -> None:
        """Set value in Redis cache, compressing large payloads."""
        serialized = json.dumps(value, separators=(",", ":"))

        if len(serialized) > CACHE_COMPRESS_THRESHOLD:
            compressed = zlib.compress(serialized.encode("utf-8"), level=6)
            serialized = COMPRESSED_PREFIX + base64.b64encode(compressed).decode("ascii")

        await self.redis.setex(key, ttl, serialized)

    async def invalidate_cache(self, username: str) -> int:
        """Invalidate all cached data for a username.

        Returns number of keys deleted.
        """
        pattern = f"github:*:{username}"
        keys = []
        async for key in self.redis.scan_iter(match=pattern, count=100):
            keys.append(key)
        if keys:
            return await self.redis.delete(*keys)
        return 0

    # --- Public API ---

    async def get_github_data(self, username: str) -> GitHubData:
        """Fetch the profile and non-fork repositories with language maps.

        Raises:
            GitHubUserNotFoundError: the handle does not resolve
            GitHubAPIError / GitHubRateLimitError: any other upstream failure
        """
        cache_key = f"github:data:{username}"
        cached = await self._cache_get(cache_key)
        if cached:
            logger.debug("github_cache_hit", cache_key_len=len(cache_key))
            return GitHubData.model_validate(cached)

        user_data, repos_data = await asyncio.gather(
            self._fetch_user(username),
            self._fetch_repos(username),
        )
        if not isinstance(repos_data, list):
            repos_data = []

        owned = [r for r in repos_data if not r.get("fork", False)]
        languages = await asyncio.gather(
            *(self._fetch_languages(username, r.get("name", "")) for r in owned)
        )

        data = GitHubData(
            profile=ProfileFact.from_github(user_data),
            repos=[
                RepositoryFact.from_github(raw, langs)
                for raw, langs in zip(owned, languages)
            ],
        )
        logger.info(
            "github_data_fetched",
            repo_count=len(data.repos),
            forks_skipped=len(repos_data) - len(owned),
        )

        await self._cache_set(
            cache_key, data.model_dump(mode="json"), self.settings.github_cache_ttl
        )
        return data

    async def _fetch_user(self, username: str) -> dict[str, Any]:
        """Fetch user profile from GitHub REST API."""
        url = f"{self.settings.github_api_base}/users/{username}"
        return await self._api_request(url, endpoint="user")

    async def _fetch_repos(self, username: str) -> list[dict[str, Any]]:
        """Fetch owned public repositories, most recently pushed first."""
        url = f"{self.settings.github_api_base}/users/{username}/repos"
        params = {
            "type": "owner",
            "sort": "pushed",
            "per_page": REPOS_PER_PAGE,
        }
        return await self._api_request(url, endpoint="repos", params=params)

    async def _fetch_languages(self, owner: str, repo_name: str) -> dict[str, int]:
        """Fetch a repository's language byte map.

        A failed lookup degrades to an empty map rather than failing the sync.
        """
        url = f"{self.settings.github_api_base}/repos/{owner}/{repo_name}/languages"
        try:
            languages = await self._api_request(url, endpoint="languages")
        except (GitHubAPIError, GitHubRateLimitError, GitHubUserNotFoundError):
            logger.warning("repo_languages_fetch_failed", repo=repo_name)
            return {}
        if not isinstance(languages, dict):
            return {}
        return {str(k): int(v) for k, v in languages.items()}

    async def _api_request(
        self,
        url: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        max_retries: int | None = None,
    ) -> Any:
        """Make a request to the GitHub API with retry logic.

        Implements exponential backoff for:
        - 429 Too Many Requests
        - 403 Forbidden (rate limit)
        - 502/503/504 Server errors

        Non-retryable errors (404, 401, other 4xx) are raised immediately.
        `endpoint` names the call for metrics and logs; it never carries
        the username.
        """
        if max_retries is None:
            max_retries = self.settings.github_max_retries
        last_exception: Exception | None = None

        for attempt in range(max_retries + 1):
            async with httpx.AsyncClient(timeout=self.settings.github_timeout_seconds) as client:
                with GITHUB_API_DURATION.labels(endpoint=endpoint).time():
                    try:
                        response = await client.get(
                            url, headers=self._headers, params=params
                        )
                    except httpx.RequestError as exc:
                        GITHUB_API_CALLS.labels(endpoint=endpoint, status="error").inc()
                        last_exception = exc
                        if attempt < max_retries:
                            wait = self._backoff_delay(attempt)
                            logger.warning(
                                "github_api_connection_retry",
                                attempt=attempt + 1,
                                wait_seconds=wait,
                                endpoint=endpoint,
                            )
                            await asyncio.sleep(wait)
                            continue
                        raise GitHubAPIError(
                            "GitHub API Error: connection failed after retries"
                        ) from exc

                status = response.status_code
                GITHUB_API_CALLS.labels(endpoint=endpoint, status=str(status)).inc()

                if status == 404:
                    raise GitHubUserNotFoundError()
                if status == 401:
                    raise GitHubAPIError(
                        "GitHub API Error: token invalid or expired", status_code=401
                    )

                if status in (403, 429):
                    retry_after = self._retry_after_seconds(response.headers.get("Retry-After"))
                    rate_remaining = response.headers.get("X-RateLimit-Remaining")

                    if attempt < max_retries:
                        if retry_after is not None:
                            wait = min(retry_after, 60)
                        elif rate_remaining == "0":
                            wait = self._backoff_delay(attempt, base=5.0)
                        else:
                            wait = self._backoff_delay(attempt)

                        logger.warning(
                            "github_rate_limit_retry",
                            attempt=attempt + 1,
                            wait_seconds=wait,
                            status=status,
                            endpoint=endpoint,
                        )
                        await asyncio.sleep(wait)
                        continue

                    raise GitHubRateLimitError(retry_after=retry_after)

                if status in (502, 503, 504):
                    if attempt < max_retries:
                        wait = self._backoff_delay(attempt)
                        logger.warning(
                            "github_server_error_retry",
                            attempt=attempt + 1,
                            wait_seconds=wait,
                            status=status,
                            endpoint=endpoint,
                        )
                        await asyncio.sleep(wait)
                        continue

                    raise GitHubAPIError(
                        f"GitHub API Error: server error {status} after retries",
                        status_code=502,
                    )

                if status >= 400:
                    raise GitHubAPIError(
                        f"GitHub API Error: {self._upstream_message(response)}",
                        status_code=502,
                    )

                return response.json()

        raise GitHubAPIError("GitHub API Error: request failed") from last_exception

    @staticmethod
    def _upstream_message(response: httpx.Response) -> str:
        """Extract GitHub's error message, if the body carries one."""
        try:
            body = response.json()
        except ValueError:
            return "Failed to fetch data"
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return "Failed to fetch data"

    @staticmethod
    def _retry_after_seconds(value: str | None, now: datetime | None = None) -> int | None:
        """Parse a Retry-After header given as seconds or as an HTTP-date."""
        if not value:
            return None
        value = value.strip()
        if value.isdigit():
            return int(value)
        try:
            retry_at = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            logger.warning("github_retry_after_unparseable")
            return None
        if retry_at.tzinfo is None:
            retry_at = retry_at.replace(tzinfo=UTC)
        now = now or datetime.now(UTC)
        return max(0, int((retry_at - now).total_seconds()))

    @staticmethod
    def _backoff_delay(attempt: int, base: float = 1.0, max_delay: float = 30.0) -> float:
        """Calculate exponential backoff delay with jitter.

        Formula: min(base * 2^attempt + jitter, max_delay)
        """
        delay = base * (2 ** attempt)
        jitter = random.uniform(0, delay * 0.1)
        return min(delay + jitter, max_delay)
