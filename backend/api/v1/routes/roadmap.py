"""Skill-gap roadmap endpoints.

POST /api/v1/public/roadmap          - Roadmap for a role and skill list
POST /api/v1/users/{user_id}/roadmap - Roadmap from the stored profile
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.deps import get_profile_store, get_roadmap_generator, rate_limit_by_ip
from services.models import SkillAnalysisOutput
from services.profile_store import ProfileStore
from services.roadmap_generator import RoadmapGenerator

router = APIRouter()


class RoadmapRequest(BaseModel):
    target_role: str = Field(..., min_length=1, max_length=200)
    current_skills: list[str] = Field(default_factory=list, max_length=200)


@router.get("/public/roadmap/roles", response_model=list[str])
async def list_roles(
    generator: RoadmapGenerator = Depends(get_roadmap_generator),
) -> list[str]:
    """Roles that have a roadmap template."""
    return generator.supported_roles


@router.post("/public/roadmap", response_model=SkillAnalysisOutput)
async def generate_roadmap(
    request: RoadmapRequest,
    generator: RoadmapGenerator = Depends(get_roadmap_generator),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> SkillAnalysisOutput:
    return generator.generate(request.target_role, request.current_skills)


@router.post("/users/{user_id}/roadmap", response_model=SkillAnalysisOutput)
async def generate_user_roadmap(
    user_id: str,
    store: ProfileStore = Depends(get_profile_store),
    generator: RoadmapGenerator = Depends(get_roadmap_generator),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> SkillAnalysisOutput:
    """Generate a roadmap from the user's stored skills and target role."""
    return await store.generate_roadmap_for(user_id, generator)
