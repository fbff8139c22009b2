"""Shared API dependencies.

Provides rate limiting and service construction as injectable
FastAPI dependencies.
"""

from __future__ import annotations

import hashlib

import redis.asyncio as aioredis
from fastapi import Depends, Request

from app.dependencies import analyze_rate_limiter, api_rate_limiter, get_redis
from services.profile_store import ProfileStore
from services.roadmap_generator import RoadmapGenerator


def _client_hash(request: Request) -> str:
    # Anonymize IP for rate limiting
    client_ip = request.client.host if request.client else "unknown"
    return hashlib.sha256(client_ip.encode()).hexdigest()[:16]


async def rate_limit_by_ip(
    request: Request,
    redis: aioredis.Redis = Depends(get_redis),
) -> None:
    """Apply per-IP rate limiting for API calls."""
    await api_rate_limiter.check(_client_hash(request), redis)


async def rate_limit_analyze(
    request: Request,
    redis: aioredis.Redis = Depends(get_redis),
) -> None:
    """Apply per-IP rate limiting for GitHub analysis."""
    await analyze_rate_limiter.check(_client_hash(request), redis)


async def get_profile_store(
    redis: aioredis.Redis = Depends(get_redis),
) -> ProfileStore:
    return ProfileStore(redis)


def get_roadmap_generator() -> RoadmapGenerator:
    return RoadmapGenerator()
