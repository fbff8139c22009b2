"""Tests for the sync and analysis pipeline."""

from unittest.mock import AsyncMock

import pytest

from app.exceptions import GitHubAPIError, GitHubUserNotFoundError
from conftest import NOW, make_profile, make_repo
from services.analysis_pipeline import GitHubAnalysisService, ProfileAnalysisEngine
from services.models import ExperienceLevel, GitHubData


def _repos():
    return [
        make_repo(
            1,
            name="storefront",
            description="React storefront with a Jest test suite and Docker deploy setup",
            language="TypeScript",
            stars=40,
            languages={"TypeScript": 12000, "CSS": 800},
            days_ago=3,
        ),
        make_repo(
            2,
            name="orders-api",
            description="Express REST backend",
            language="JavaScript",
            stars=2,
            languages={"JavaScript": 5000},
            days_ago=30,
        ),
        make_repo(3, name="someone-elses", language="Rust", languages={"Rust": 99999}, fork=True),
    ]


class TestProfileAnalysisEngine:
    """Test suite for ProfileAnalysisEngine."""

    def setup_method(self):
        self.engine = ProfileAnalysisEngine()

    def test_forks_excluded_everywhere(self):
        result = self.engine.build_analysis_result(make_profile(), _repos(), now=NOW)
        assert [r.name for r in result.analyzed_repos] == ["storefront", "orders-api"]
        assert "Rust" not in [s.name for s in result.aggregated_skills]

    def test_result_is_deterministic(self):
        first = self.engine.build_analysis_result(make_profile(), _repos(), now=NOW)
        second = self.engine.build_analysis_result(make_profile(), _repos(), now=NOW)
        assert first.model_dump() == second.model_dump()

    def test_result_combines_all_stages(self):
        result = self.engine.build_analysis_result(make_profile(), _repos(), now=NOW)

        assert result.profile.login == "testuser"
        assert [s.name for s in result.aggregated_skills] == ["TypeScript", "JavaScript", "CSS"]
        assert result.analyzed_repos[0].analysis.project_type == "Frontend"
        insights = result.career_insights
        assert insights.primary_role == "Full Stack"
        assert 0 <= insights.career_readiness_score <= 100

    def test_no_repositories(self):
        result = self.engine.build_analysis_result(make_profile(), [], now=NOW)
        assert result.analyzed_repos == []
        assert result.aggregated_skills == []
        assert result.career_insights.experience_level == ExperienceLevel.BEGINNER
        assert result.career_insights.career_readiness_score == 0


class TestGitHubAnalysisService:
    """Test suite for GitHubAnalysisService."""

    @pytest.mark.asyncio
    async def test_sync_and_analyze(self):
        github = AsyncMock()
        github.get_github_data.return_value = GitHubData(profile=make_profile(), repos=_repos())

        service = GitHubAnalysisService(github)
        result = await service.sync_and_analyze("testuser", now=NOW)

        github.get_github_data.assert_awaited_once_with("testuser")
        assert len(result.analyzed_repos) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [GitHubUserNotFoundError(), GitHubAPIError("GitHub API Error: Validation Failed")],
    )
    async def test_upstream_errors_propagate(self, error):
        github = AsyncMock()
        github.get_github_data.side_effect = error

        with pytest.raises(type(error)) as exc_info:
            await GitHubAnalysisService(github).sync_and_analyze("ghost", now=NOW)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_refresh_drops_cache_before_fetch(self):
        github = AsyncMock()
        github.get_github_data.return_value = GitHubData(profile=make_profile(), repos=[])

        await GitHubAnalysisService(github).sync_and_analyze("testuser", now=NOW, refresh=True)

        github.invalidate_cache.assert_awaited_once_with("testuser")
        github.get_github_data.assert_awaited_once_with("testuser")

    @pytest.mark.asyncio
    async def test_cache_kept_without_refresh(self):
        github = AsyncMock()
        github.get_github_data.return_value = GitHubData(profile=make_profile(), repos=[])

        await GitHubAnalysisService(github).sync_and_analyze("testuser", now=NOW)

        github.invalidate_cache.assert_not_awaited()
