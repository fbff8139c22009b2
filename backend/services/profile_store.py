"""Redis-backed user profile store.

Keys:
- profile:{user_id}                  -> StoredProfile JSON
- projects:{user_id}                 -> set of project ids
- project:{user_id}:{project_id}     -> ProjectRecord JSON

Every read-modify-write of a document WATCHes its key and commits in a
MULTI/EXEC transaction. A concurrent write to the same document aborts the
commit and the change is replayed on the fresh document, so a settings
update landing mid-sync is never overwritten by the sync.

A GitHub sync writes the user document and every project document in the
same transaction: either all of them land or none do.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Callable, TypeVar

import redis.asyncio as aioredis
from pydantic import BaseModel
from redis.exceptions import WatchError

from app.exceptions import (
    ConcurrentUpdateError,
    MissingTargetRoleError,
    ProfileNotFoundError,
    ProjectNotFoundError,
    ValidationError,
)
from app.logging_config import get_logger
from services.models import (
    GitHubAnalysisResult,
    GitHubSummary,
    ProjectDraft,
    ProjectRecord,
    ProjectSource,
    ProjectStats,
    ProjectStatus,
    SkillAnalysisOutput,
    StoredProfile,
)
from services.roadmap_generator import RoadmapGenerator

logger = get_logger(__name__)

ROADMAP_IN_PROGRESS = "In Progress"
MAX_WRITE_ATTEMPTS = 5

DocT = TypeVar("DocT", bound=BaseModel)
QueueWrites = Callable[[aioredis.client.Pipeline], None]


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


def _blank_to_none(value: str) -> str | None:
    return value.strip() or None


class ProfileStore:
    """Persists user documents and their projects."""

    PROFILE_PREFIX = "profile:"
    PROJECT_INDEX_PREFIX = "projects:"
    PROJECT_PREFIX = "project:"

    def __init__(self, redis: aioredis.Redis) -> None:
        self.redis = redis

    def _profile_key(self, user_id: str) -> str:
        return f"{self.PROFILE_PREFIX}{user_id}"

    def _index_key(self, user_id: str) -> str:
        return f"{self.PROJECT_INDEX_PREFIX}{user_id}"

    def _project_key(self, user_id: str, project_id: str) -> str:
        return f"{self.PROJECT_PREFIX}{user_id}:{project_id}"

    async def _update(
        self,
        key: str,
        model: type[DocT],
        mutate: Callable[[DocT | None], DocT],
        queue_writes: QueueWrites | None = None,
    ) -> DocT:
        """Optimistically update one JSON document.

        `mutate` receives the current document (None when absent) and
        returns the document to store; it may run more than once and must
        not keep state between calls. `queue_writes` adds further commands
        to the same transaction.

        Raises:
            ConcurrentUpdateError: the key kept changing for every attempt
        """
        async with self.redis.pipeline(transaction=True) as pipe:
            for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
                try:
                    await pipe.watch(key)
                    raw = await pipe.get(key)
                    current = model.model_validate_json(raw) if raw is not None else None
                    document = mutate(current)

                    pipe.multi()
                    pipe.set(key, document.model_dump_json())
                    if queue_writes is not None:
                        queue_writes(pipe)
                    await pipe.execute()
                    return document
                except WatchError:
                    logger.info(
                        "document_write_conflict",
                        key_prefix=key.split(":", 1)[0],
                        attempt=attempt,
                    )
        raise ConcurrentUpdateError()

    # --- Profile ---

    async def find(self, user_id: str) -> StoredProfile | None:
        raw = await self.redis.get(self._profile_key(user_id))
        if raw is None:
            return None
        return StoredProfile.model_validate_json(raw)

    async def get(self, user_id: str) -> StoredProfile:
        """Load a profile. Raises ProfileNotFoundError if it does not exist."""
        profile = await self.find(user_id)
        if profile is None:
            raise ProfileNotFoundError()
        return profile

    @staticmethod
    def _merge_settings(
        profile: StoredProfile,
        skills: list[str] | None,
        target_role: str | None,
        target_sector: str | None,
        first_name: str | None,
        last_name: str | None,
    ) -> StoredProfile:
        # None leaves a field alone; blank text clears it
        updates: dict = {}
        if skills is not None:
            updates["skills"] = list(skills)
        if target_role is not None:
            updates["target_role"] = _blank_to_none(target_role)
        if target_sector is not None:
            updates["target_sector"] = _blank_to_none(target_sector)
        if first_name is not None:
            updates["first_name"] = _blank_to_none(first_name)
        if last_name is not None:
            updates["last_name"] = _blank_to_none(last_name)
        return profile.model_copy(update=updates)

    async def upsert_settings(
        self,
        user_id: str,
        skills: list[str] | None = None,
        target_role: str | None = None,
        target_sector: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> StoredProfile:
        """Create or update onboarding and profile fields.

        Only the fields passed are touched.
        """

        def mutate(current: StoredProfile | None) -> StoredProfile:
            return self._merge_settings(
                current or StoredProfile(user_id=user_id),
                skills,
                target_role,
                target_sector,
                first_name,
                last_name,
            )

        profile = await self._update(self._profile_key(user_id), StoredProfile, mutate)
        logger.info("profile_settings_saved", user_id=user_id, skill_count=len(profile.skills))
        return profile

    async def add_skill(self, user_id: str, skill: str) -> StoredProfile:
        """Append one declared skill.

        Raises:
            ValidationError: blank, or already declared in any letter case
            ProfileNotFoundError: no stored profile
        """
        new_skill = skill.strip()
        if not new_skill:
            raise ValidationError("Skill must not be blank.")

        def mutate(current: StoredProfile | None) -> StoredProfile:
            if current is None:
                raise ProfileNotFoundError()
            if any(s.lower() == new_skill.lower() for s in current.skills):
                raise ValidationError(
                    f'"{new_skill}" is already in your skills.', details={"skill": new_skill}
                )
            return current.model_copy(update={"skills": [*current.skills, new_skill]})

        return await self._update(self._profile_key(user_id), StoredProfile, mutate)

    async def remove_skill(self, user_id: str, skill: str) -> StoredProfile:
        """Remove a declared skill by exact value; unknown skills are a no-op."""

        def mutate(current: StoredProfile | None) -> StoredProfile:
            if current is None:
                raise ProfileNotFoundError()
            return current.model_copy(
                update={"skills": [s for s in current.skills if s != skill]}
            )

        return await self._update(self._profile_key(user_id), StoredProfile, mutate)

    # --- GitHub sync ---

    @staticmethod
    def _merge_analysis(
        profile: StoredProfile, result: GitHubAnalysisResult, synced_at: datetime
    ) -> StoredProfile:
        gh = result.profile
        return profile.model_copy(
            update={
                "github": GitHubSummary(
                    username=gh.login,
                    avatar_url=gh.avatar_url,
                    profile_url=gh.html_url,
                    public_repo_count=gh.public_repos,
                    followers=gh.followers,
                    following=gh.following,
                    name=gh.name,
                    bio=gh.bio,
                    last_synced_at=synced_at,
                    career_insights=result.career_insights,
                ),
                "skills": [s.name for s in result.aggregated_skills],
            }
        )

    async def save_analysis(
        self,
        user_id: str,
        result: GitHubAnalysisResult,
        synced_at: datetime | None = None,
    ) -> StoredProfile:
        """Atomically persist a sync result.

        The user's skills are replaced by the aggregated skill names and
        each analyzed repository is upserted as project github-{id}. Other
        profile fields keep whatever value is current at commit time.
        """
        synced_at = synced_at or datetime.now(UTC)
        projects = [
            ProjectRecord(
                id=f"github-{repo.id}",
                name=repo.name,
                description=repo.description,
                url=repo.url,
                skills=[*repo.analysis.primary_skills, *repo.analysis.supporting_skills],
                stars=repo.stars,
                pushed_at=repo.pushed_at,
                analysis=repo.analysis,
                source=ProjectSource.GITHUB,
                status=ProjectStatus.COMPLETED,
            )
            for repo in result.analyzed_repos
        ]

        def mutate(current: StoredProfile | None) -> StoredProfile:
            return self._merge_analysis(
                current or StoredProfile(user_id=user_id), result, synced_at
            )

        def queue_projects(pipe: aioredis.client.Pipeline) -> None:
            for project in projects:
                pipe.set(self._project_key(user_id, project.id), project.model_dump_json())
                pipe.sadd(self._index_key(user_id), project.id)

        profile = await self._update(
            self._profile_key(user_id), StoredProfile, mutate, queue_projects
        )
        logger.info("github_sync_saved", user_id=user_id, project_count=len(projects))
        return profile

    # --- Projects ---

    async def list_projects(self, user_id: str) -> list[ProjectRecord]:
        """Return stored projects: manual ones first, then most starred."""
        members = await self.redis.smembers(self._index_key(user_id))
        project_ids = sorted(_decode(m) for m in members)
        if not project_ids:
            return []

        raws = await self.redis.mget([self._project_key(user_id, pid) for pid in project_ids])
        projects = [ProjectRecord.model_validate_json(raw) for raw in raws if raw is not None]
        return sorted(
            projects,
            key=lambda p: (p.source != ProjectSource.MANUAL, -p.stars),
        )

    async def project_stats(self, user_id: str) -> ProjectStats:
        projects = await self.list_projects(user_id)
        return ProjectStats(
            total_projects=len(projects),
            completed_projects=sum(1 for p in projects if p.status == ProjectStatus.COMPLETED),
        )

    async def create_project(self, user_id: str, draft: ProjectDraft) -> ProjectRecord:
        """Add a manually tracked project. The user profile must exist."""
        await self.get(user_id)
        project = ProjectRecord(
            id=f"manual-{uuid.uuid4().hex[:12]}",
            name=draft.name,
            description=draft.description,
            skills=list(draft.skills),
            status=draft.status,
            source=ProjectSource.MANUAL,
            created_at=datetime.now(UTC),
        )
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(self._project_key(user_id, project.id), project.model_dump_json())
            pipe.sadd(self._index_key(user_id), project.id)
            await pipe.execute()

        logger.info("project_created", user_id=user_id, status=project.status.value)
        return project

    async def update_project(
        self, user_id: str, project_id: str, draft: ProjectDraft
    ) -> ProjectRecord:
        """Replace the editable fields of a stored project.

        Source and repository fields are kept.
        """

        def mutate(current: ProjectRecord | None) -> ProjectRecord:
            if current is None:
                raise ProjectNotFoundError(project_id)
            return current.model_copy(update=draft.model_dump())

        return await self._update(
            self._project_key(user_id, project_id), ProjectRecord, mutate
        )

    async def delete_project(self, user_id: str, project_id: str) -> None:
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(self._project_key(user_id, project_id))
            pipe.srem(self._index_key(user_id), project_id)
            deleted, _ = await pipe.execute()
        if not deleted:
            raise ProjectNotFoundError(project_id)
        logger.info("project_deleted", user_id=user_id)

    # --- Roadmap ---

    async def save_roadmap(self, user_id: str, output: SkillAnalysisOutput) -> StoredProfile:
        def mutate(current: StoredProfile | None) -> StoredProfile:
            if current is None:
                raise ProfileNotFoundError()
            return current.model_copy(
                update={
                    "categorized_skills": output.categorized_skills,
                    "skill_gaps": output.skill_gaps,
                    "roadmap": output.roadmap,
                    "roadmap_progress": ROADMAP_IN_PROGRESS,
                }
            )

        return await self._update(self._profile_key(user_id), StoredProfile, mutate)

    async def generate_roadmap_for(
        self, user_id: str, generator: RoadmapGenerator
    ) -> SkillAnalysisOutput:
        """Generate and store a roadmap from the stored skills and target role.

        Raises:
            ProfileNotFoundError: no stored profile
            MissingTargetRoleError: profile has no target role yet
            RoleNotSupportedError: the target role has no roadmap template
        """
        profile = await self.get(user_id)
        if not profile.target_role:
            raise MissingTargetRoleError()

        output = generator.generate(profile.target_role, profile.skills)
        await self.save_roadmap(user_id, output)
        return output
