"""Domain models for profile analysis and roadmap generation.

Input facts (RepositoryFact, ProfileFact) are frozen and normalized at
construction so the scoring code never has to guess about missing fields.
Derived records are plain pydantic models built once per request.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExperienceLevel(str, Enum):
    """Ordinal tier used for repositories, skills and whole profiles."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class StepStatus(str, Enum):
    RECOMMENDED = "Recommended"
    COMPLETED = "Completed"


class PhaseStatus(str, Enum):
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


# --- Input facts ---


class RepositoryFact(BaseModel):
    """A public repository as reported by GitHub, with its language byte map."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str | None = None
    language: str | None = None
    stars: int = Field(0, ge=0)
    url: str = ""
    pushed_at: datetime
    languages: dict[str, int] = Field(default_factory=dict)
    fork: bool = False

    @field_validator("pushed_at")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @property
    def description_text(self) -> str:
        """Description with a missing value treated as empty."""
        return self.description or ""

    @classmethod
    def from_github(
        cls, raw: dict[str, Any], languages: dict[str, int] | None = None
    ) -> RepositoryFact:
        """Build from a GitHub REST repository payload."""
        return cls(
            id=raw["id"],
            name=raw.get("name", ""),
            description=raw.get("description"),
            language=raw.get("language"),
            stars=raw.get("stargazers_count", 0),
            url=raw.get("html_url", ""),
            pushed_at=raw.get("pushed_at") or raw.get("updated_at") or raw.get("created_at"),
            languages=languages or {},
            fork=raw.get("fork", False),
        )


class ProfileFact(BaseModel):
    """Public GitHub user profile."""

    model_config = ConfigDict(frozen=True)

    login: str = ""
    name: str | None = None
    bio: str | None = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    avatar_url: str = ""
    html_url: str = ""

    @classmethod
    def from_github(cls, raw: dict[str, Any]) -> ProfileFact:
        """Build from a GitHub REST user payload."""
        return cls(
            login=raw.get("login", ""),
            name=raw.get("name"),
            bio=raw.get("bio"),
            followers=raw.get("followers") or 0,
            following=raw.get("following") or 0,
            public_repos=raw.get("public_repos") or 0,
            avatar_url=raw.get("avatar_url") or "",
            html_url=raw.get("html_url") or "",
        )


class GitHubData(BaseModel):
    """Completed fetch result handed to the inference engine."""

    profile: ProfileFact
    repos: list[RepositoryFact] = Field(default_factory=list)


# --- Derived analysis records ---


class RepositoryAnalysis(BaseModel):
    project_type: str
    primary_skills: list[str]
    supporting_skills: list[str]
    experience_level: ExperienceLevel
    strengths: list[str]
    improvement_suggestions: list[str]


class AnalyzedRepository(BaseModel):
    """Repository fields carried alongside their analysis."""

    id: int
    name: str
    description: str | None
    language: str | None
    stars: int
    url: str
    pushed_at: datetime
    languages: dict[str, int]
    analysis: RepositoryAnalysis


class AggregatedSkill(BaseModel):
    name: str
    level: ExperienceLevel
    repo_count: int
    frequency: int
    recency: float


class CareerInsights(BaseModel):
    experience_level: ExperienceLevel
    primary_role: str
    strengths: list[str]
    gaps: list[str]
    next_actions: list[str]
    career_readiness_score: int = Field(ge=0, le=100)


class GitHubAnalysisResult(BaseModel):
    profile: ProfileFact
    analyzed_repos: list[AnalyzedRepository]
    aggregated_skills: list[AggregatedSkill]
    career_insights: CareerInsights


# --- Roadmap records ---


class RoadmapStep(BaseModel):
    title: str
    description: str
    priority: str
    status: StepStatus


class RoadmapPhase(BaseModel):
    phase: str
    title: str
    status: PhaseStatus
    steps: list[RoadmapStep]


class CategorizedSkills(BaseModel):
    frontend: list[str] = Field(default_factory=list)
    backend: list[str] = Field(default_factory=list)
    cs_fundamentals: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    other: list[str] = Field(default_factory=list)


class SkillGaps(BaseModel):
    strong: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)


class SkillAnalysisOutput(BaseModel):
    categorized_skills: CategorizedSkills
    skill_gaps: SkillGaps
    roadmap: list[RoadmapPhase]


# --- Persisted documents ---


class GitHubSummary(BaseModel):
    """GitHub section of a stored user document."""

    username: str
    avatar_url: str = ""
    profile_url: str = ""
    public_repo_count: int = 0
    followers: int = 0
    following: int = 0
    name: str | None = None
    bio: str | None = None
    last_synced_at: datetime | None = None
    career_insights: CareerInsights | None = None


class StoredProfile(BaseModel):
    """User document: identity, declared skills, career goal, sync and roadmap state."""

    user_id: str
    first_name: str | None = None
    last_name: str | None = None
    skills: list[str] = Field(default_factory=list)
    target_role: str | None = None
    target_sector: str | None = None
    github: GitHubSummary | None = None
    categorized_skills: CategorizedSkills | None = None
    skill_gaps: SkillGaps | None = None
    roadmap: list[RoadmapPhase] | None = None
    roadmap_progress: str | None = None


class ProjectStatus(str, Enum):
    PLANNED = "Planned"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class ProjectSource(str, Enum):
    GITHUB = "github"
    MANUAL = "manual"


class ProjectDraft(BaseModel):
    """User-editable project fields."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    status: ProjectStatus = ProjectStatus.PLANNED
    skills: list[str] = Field(default_factory=list, max_length=100)


class ProjectRecord(BaseModel):
    """Project document.

    GitHub syncs write one per analyzed repository (id github-{repo id});
    manual projects carry no repository fields.
    """

    id: str
    name: str
    description: str | None = None
    url: str | None = None
    skills: list[str] = Field(default_factory=list)
    stars: int = 0
    pushed_at: datetime | None = None
    analysis: RepositoryAnalysis | None = None
    source: ProjectSource = ProjectSource.GITHUB
    status: ProjectStatus = ProjectStatus.COMPLETED
    created_at: datetime | None = None


class ProjectStats(BaseModel):
    total_projects: int
    completed_projects: int
