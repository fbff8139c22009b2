"""GitHub analysis endpoints.

POST /api/v1/public/analyze           - Analyze a GitHub profile
POST /api/v1/users/{user_id}/github/sync - Analyze and persist for a user
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.deps import get_profile_store, rate_limit_analyze
from app.dependencies import get_redis
from app.logging_config import get_logger
from services.analysis_pipeline import GitHubAnalysisService
from services.github_service import GitHubService
from services.models import GitHubAnalysisResult
from services.profile_store import ProfileStore

logger = get_logger(__name__)
router = APIRouter()

GITHUB_USERNAME_PATTERN = r"^[a-zA-Z0-9]([a-zA-Z0-9-]*[a-zA-Z0-9])?$"


class AnalyzeRequest(BaseModel):
    """GitHub analysis request."""

    github_username: str = Field(
        ..., min_length=1, max_length=39, pattern=GITHUB_USERNAME_PATTERN
    )
    refresh: bool = False  # drop cached GitHub data before fetching


@router.post("/public/analyze", response_model=GitHubAnalysisResult)
async def analyze_profile(
    request: AnalyzeRequest,
    redis: aioredis.Redis = Depends(get_redis),
    _rate_limit: None = Depends(rate_limit_analyze),
) -> GitHubAnalysisResult:
    """Analyze a GitHub profile without storing anything.

    Classifies every owned, non-fork repository, ranks the skill
    inventory and computes career insights.
    """
    service = GitHubAnalysisService(GitHubService(redis))
    return await service.sync_and_analyze(
        request.github_username, refresh=request.refresh
    )


@router.post("/users/{user_id}/github/sync", response_model=GitHubAnalysisResult)
async def sync_github(
    user_id: str,
    request: AnalyzeRequest,
    redis: aioredis.Redis = Depends(get_redis),
    store: ProfileStore = Depends(get_profile_store),
    _rate_limit: None = Depends(rate_limit_analyze),
) -> GitHubAnalysisResult:
    """Analyze a GitHub profile and save it to the user's profile.

    The user document and all project documents are written atomically.
    """
    service = GitHubAnalysisService(GitHubService(redis))
    result = await service.sync_and_analyze(
        request.github_username, refresh=request.refresh
    )
    await store.save_analysis(user_id, result)
    return result
