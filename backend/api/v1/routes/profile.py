"""Stored profile endpoints.

GET    /api/v1/users/{user_id}/profile                 - Stored profile
PUT    /api/v1/users/{user_id}/profile                 - Set profile fields, skills and target role
POST   /api/v1/users/{user_id}/skills                  - Add one declared skill
DELETE /api/v1/users/{user_id}/skills/{skill}          - Remove one declared skill
GET    /api/v1/users/{user_id}/projects                - Synced and manual projects
GET    /api/v1/users/{user_id}/projects/stats          - Project counts
POST   /api/v1/users/{user_id}/projects                - Track a manual project
PUT    /api/v1/users/{user_id}/projects/{project_id}   - Edit a project
DELETE /api/v1/users/{user_id}/projects/{project_id}   - Delete a project
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from api.deps import get_profile_store, rate_limit_by_ip
from services.models import ProjectDraft, ProjectRecord, ProjectStats, StoredProfile
from services.profile_store import ProfileStore

router = APIRouter()


class ProfileSettingsRequest(BaseModel):
    """Onboarding data: name, declared skills and career goal."""

    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    skills: list[str] | None = Field(None, max_length=200)
    target_role: str | None = Field(None, max_length=200)
    target_sector: str | None = Field(None, max_length=200)


class AddSkillRequest(BaseModel):
    skill: str = Field(..., min_length=1, max_length=100)


@router.get("/users/{user_id}/profile", response_model=StoredProfile)
async def get_profile(
    user_id: str,
    store: ProfileStore = Depends(get_profile_store),
) -> StoredProfile:
    return await store.get(user_id)


@router.put("/users/{user_id}/profile", response_model=StoredProfile)
async def update_profile(
    user_id: str,
    request: ProfileSettingsRequest,
    store: ProfileStore = Depends(get_profile_store),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> StoredProfile:
    skills = None
    if request.skills is not None:
        # Keep first spelling, drop blanks and exact repeats
        skills = list(dict.fromkeys(s.strip() for s in request.skills if s.strip()))
    return await store.upsert_settings(
        user_id,
        skills=skills,
        target_role=request.target_role,
        target_sector=request.target_sector,
        first_name=request.first_name,
        last_name=request.last_name,
    )


@router.post("/users/{user_id}/skills", response_model=StoredProfile)
async def add_skill(
    user_id: str,
    request: AddSkillRequest,
    store: ProfileStore = Depends(get_profile_store),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> StoredProfile:
    return await store.add_skill(user_id, request.skill)


@router.delete("/users/{user_id}/skills/{skill:path}", response_model=StoredProfile)
async def remove_skill(
    user_id: str,
    skill: str,
    store: ProfileStore = Depends(get_profile_store),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> StoredProfile:
    return await store.remove_skill(user_id, skill)


@router.get("/users/{user_id}/projects", response_model=list[ProjectRecord])
async def list_projects(
    user_id: str,
    store: ProfileStore = Depends(get_profile_store),
) -> list[ProjectRecord]:
    return await store.list_projects(user_id)


@router.get("/users/{user_id}/projects/stats", response_model=ProjectStats)
async def project_stats(
    user_id: str,
    store: ProfileStore = Depends(get_profile_store),
) -> ProjectStats:
    return await store.project_stats(user_id)


@router.post("/users/{user_id}/projects", response_model=ProjectRecord, status_code=201)
async def create_project(
    user_id: str,
    draft: ProjectDraft,
    store: ProfileStore = Depends(get_profile_store),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> ProjectRecord:
    return await store.create_project(user_id, draft)


@router.put("/users/{user_id}/projects/{project_id}", response_model=ProjectRecord)
async def update_project(
    user_id: str,
    project_id: str,
    draft: ProjectDraft,
    store: ProfileStore = Depends(get_profile_store),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> ProjectRecord:
    return await store.update_project(user_id, project_id, draft)


@router.delete("/users/{user_id}/projects/{project_id}", status_code=204)
async def delete_project(
    user_id: str,
    project_id: str,
    store: ProfileStore = Depends(get_profile_store),
    _rate_limit: None = Depends(rate_limit_by_ip),
) -> Response:
    await store.delete_project(user_id, project_id)
    return Response(status_code=204)
