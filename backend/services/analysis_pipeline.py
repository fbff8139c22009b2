"""GitHub sync and analysis pipeline.

fetch -> analyze each repository -> aggregate skills -> synthesize
career insights -> combined result.

Everything after the fetch is pure: given the same facts and the same
reference time the result is identical.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Sequence

from app.logging_config import get_logger
from app.metrics import ANALYSIS_DURATION
from services.career_insights import CareerInsightSynthesizer
from services.github_service import GitHubService
from services.models import GitHubAnalysisResult, ProfileFact, RepositoryFact
from services.repo_analyzer import RepositoryAnalyzer
from services.skill_aggregator import SkillAggregator

logger = get_logger(__name__)


class ProfileAnalysisEngine:
    """Runs the rule-based engine over completed GitHub facts."""

    def __init__(
        self,
        analyzer: RepositoryAnalyzer | None = None,
        aggregator: SkillAggregator | None = None,
        synthesizer: CareerInsightSynthesizer | None = None,
    ) -> None:
        self.analyzer = analyzer or RepositoryAnalyzer()
        self.aggregator = aggregator or SkillAggregator()
        self.synthesizer = synthesizer or CareerInsightSynthesizer()

    @ANALYSIS_DURATION.time()
    def build_analysis_result(
        self,
        profile: ProfileFact,
        repos: Sequence[RepositoryFact],
        now: datetime | None = None,
    ) -> GitHubAnalysisResult:
        now = now or datetime.now(UTC)
        owned = [r for r in repos if not r.fork]

        analyzed = [self.analyzer.analyze_repository(r) for r in owned]
        skills = self.aggregator.aggregate(owned, now=now)
        insights = self.synthesizer.synthesize(profile, analyzed, skills, now=now)

        return GitHubAnalysisResult(
            profile=profile,
            analyzed_repos=analyzed,
            aggregated_skills=skills,
            career_insights=insights,
        )


class GitHubAnalysisService:
    """Fetches a GitHub user's data and analyzes it."""

    def __init__(
        self,
        github_service: GitHubService,
        engine: ProfileAnalysisEngine | None = None,
    ) -> None:
        self.github_service = github_service
        self.engine = engine or ProfileAnalysisEngine()

    async def sync_and_analyze(
        self, username: str, now: datetime | None = None, refresh: bool = False
    ) -> GitHubAnalysisResult:
        """Fetch and analyze. Upstream errors propagate unchanged.

        With refresh, cached GitHub data for the user is dropped first.
        """
        if refresh:
            await self.github_service.invalidate_cache(username)
        data = await self.github_service.get_github_data(username)
        result = self.engine.build_analysis_result(data.profile, data.repos, now=now)
        logger.info(
            "github_profile_analyzed",
            username=username,
            repo_count=len(result.analyzed_repos),
            skill_count=len(result.aggregated_skills),
            readiness_score=result.career_insights.career_readiness_score,
        )
        return result
