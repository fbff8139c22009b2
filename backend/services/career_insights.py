"""Career Insight Synthesizer.

Rolls per-repository analyses, the aggregated skill inventory and public
profile stats into an overall experience tier, a primary role label, a
0-100 career readiness score and fixed-template strengths, gaps and next
actions.

Each signal contributes points and either a strength or a gap with its
matching next action, never both.
"""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime, timedelta
from typing import Sequence

from app.logging_config import get_logger
from services.models import (
    AggregatedSkill,
    AnalyzedRepository,
    CareerInsights,
    ExperienceLevel,
    ProfileFact,
)
from services.taxonomy import BACKEND, FRONTEND, FULL_STACK, GENERAL_PROJECT_TYPE, TEST_KEYWORDS

logger = get_logger(__name__)

GENERALIST = "Generalist"
RECENT_ACTIVITY_WINDOW = timedelta(days=90)

# Points per signal
ADVANCED_POINTS = 40
INTERMEDIATE_POINTS = 20
BEGINNER_POINTS = 5
COMMUNITY_POINTS = 15
DESCRIPTION_POINTS = 15
ADVANCED_SKILLS_POINTS = 15
ACTIVITY_POINTS = 10
TESTING_POINTS = 5

# Signal thresholds
MIN_AVG_STARS = 10
MIN_FOLLOWERS = 50
GOOD_DESCRIPTION_LENGTH = 50
GOOD_DESCRIPTION_RATIO = 0.7
RECENT_ACTIVITY_RATIO = 0.5
TESTING_RATIO = 0.2

NO_REPOS_GAP = "No public repositories found to analyze."
NO_REPOS_ACTION = "Create a public repository on GitHub to showcase your skills."

COMMUNITY_STRENGTH = "Building a community presence with starred projects and followers."
DESCRIPTION_STRENGTH = "Writes clear and effective project descriptions."
DESCRIPTION_GAP = "Many projects lack a detailed README or description."
DESCRIPTION_ACTION = "Improve project descriptions and add detailed README.md files."
ACTIVITY_STRENGTH = "Maintains consistent and recent activity on projects."
ACTIVITY_GAP = "Project activity has been low in the last 3 months."
ACTIVITY_ACTION = "Contribute to a project or start a new one to show recent activity."
TESTING_STRENGTH = "Includes testing in some projects, showing a commitment to code quality."
TESTING_GAP = "Lacks demonstrated testing practices in projects."
TESTING_ACTION = "Incorporate a testing framework (like Jest or Pytest) into a key project."
FILLER_GAP = "Profile is strong, consider contributing to open source to further stand out."
FILLER_ACTION = "Find an open-source project aligned with your skills and make a contribution."


def _empty_profile_insights() -> CareerInsights:
    return CareerInsights(
        experience_level=ExperienceLevel.BEGINNER,
        primary_role=GENERALIST,
        strengths=[],
        gaps=[NO_REPOS_GAP],
        next_actions=[NO_REPOS_ACTION],
        career_readiness_score=0,
    )


class CareerInsightSynthesizer:
    """Computes overall career insights for one sync."""

    def synthesize(
        self,
        profile: ProfileFact,
        analyzed_repos: Sequence[AnalyzedRepository],
        aggregated_skills: Sequence[AggregatedSkill],
        now: datetime | None = None,
    ) -> CareerInsights:
        if not analyzed_repos:
            return _empty_profile_insights()

        now = now or datetime.now(UTC)
        total = len(analyzed_repos)
        score = 0.0
        strengths: list[str] = []
        gaps: list[str] = []
        next_actions: list[str] = []

        experience_level, points = self.overall_experience(analyzed_repos)
        score += points

        avg_stars = sum(r.stars for r in analyzed_repos) / total
        if avg_stars > MIN_AVG_STARS or profile.followers > MIN_FOLLOWERS:
            score += COMMUNITY_POINTS
            strengths.append(COMMUNITY_STRENGTH)

        described = sum(
            1 for r in analyzed_repos if len(r.description or "") >= GOOD_DESCRIPTION_LENGTH
        )
        if described / total > GOOD_DESCRIPTION_RATIO:
            score += DESCRIPTION_POINTS
            strengths.append(DESCRIPTION_STRENGTH)
        else:
            gaps.append(DESCRIPTION_GAP)
            next_actions.append(DESCRIPTION_ACTION)

        advanced_skills = [s.name for s in aggregated_skills if s.level == ExperienceLevel.ADVANCED]
        if len(advanced_skills) > 1:
            score += ADVANCED_SKILLS_POINTS
            strengths.append(
                "Demonstrates deep expertise in key technologies like "
                f"{' and '.join(advanced_skills[:2])}."
            )

        cutoff = now - RECENT_ACTIVITY_WINDOW
        recent = sum(1 for r in analyzed_repos if r.pushed_at > cutoff)
        if recent / total > RECENT_ACTIVITY_RATIO:
            score += ACTIVITY_POINTS
            strengths.append(ACTIVITY_STRENGTH)
        else:
            gaps.append(ACTIVITY_GAP)
            next_actions.append(ACTIVITY_ACTION)

        # Descriptions only; repository contents are never inspected
        tested = sum(
            1
            for r in analyzed_repos
            if any(kw in (r.description or "").lower() for kw in TEST_KEYWORDS)
        )
        if tested / total < TESTING_RATIO:
            gaps.append(TESTING_GAP)
            next_actions.append(TESTING_ACTION)
        else:
            score += TESTING_POINTS
            strengths.append(TESTING_STRENGTH)

        if not gaps:
            gaps.append(FILLER_GAP)
            next_actions.append(FILLER_ACTION)

        readiness = min(100, max(0, int(round(score))))
        insights = CareerInsights(
            experience_level=experience_level,
            primary_role=self.primary_role(analyzed_repos),
            strengths=strengths,
            gaps=gaps,
            next_actions=next_actions,
            career_readiness_score=readiness,
        )
        logger.info(
            "career_insights_synthesized",
            repo_count=total,
            experience_level=experience_level.value,
            primary_role=insights.primary_role,
            readiness_score=readiness,
        )
        return insights

    @staticmethod
    def overall_experience(
        analyzed_repos: Sequence[AnalyzedRepository],
    ) -> tuple[ExperienceLevel, int]:
        """Overall tier from per-repository tiers, with its score contribution."""
        levels = Counter(r.analysis.experience_level for r in analyzed_repos)
        advanced = levels[ExperienceLevel.ADVANCED]
        intermediate = levels[ExperienceLevel.INTERMEDIATE]

        if advanced >= 2 or (advanced >= 1 and intermediate >= 2):
            return ExperienceLevel.ADVANCED, ADVANCED_POINTS
        if intermediate >= 2 or advanced >= 1 or len(analyzed_repos) >= 5:
            return ExperienceLevel.INTERMEDIATE, INTERMEDIATE_POINTS
        return ExperienceLevel.BEGINNER, BEGINNER_POINTS

    @staticmethod
    def primary_role(analyzed_repos: Sequence[AnalyzedRepository]) -> str:
        """Most frequent non-General project type; first seen wins ties.

        Any mix of Frontend and Backend projects reads as Full Stack.
        """
        role_counts: dict[str, int] = {}
        for repo in analyzed_repos:
            project_type = repo.analysis.project_type
            if project_type != GENERAL_PROJECT_TYPE:
                role_counts[project_type] = role_counts.get(project_type, 0) + 1

        if role_counts.get(FRONTEND, 0) > 0 and role_counts.get(BACKEND, 0) > 0:
            return FULL_STACK
        if not role_counts:
            return GENERALIST
        return max(role_counts, key=lambda t: role_counts[t])
