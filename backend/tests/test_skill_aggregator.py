"""Tests for cross-repository skill aggregation."""

import pytest

from conftest import NOW, make_repo
from services.models import ExperienceLevel
from services.skill_aggregator import SkillAggregator


class TestSkillAggregator:
    """Test suite for SkillAggregator."""

    def setup_method(self):
        self.aggregator = SkillAggregator()

    def _by_name(self, skills):
        return {s.name: s for s in skills}

    def test_sorted_by_frequency_descending(self):
        repos = [
            make_repo(1, language="Python", languages={"Python": 500, "Shell": 20}),
            make_repo(2, language="TypeScript", languages={"TypeScript": 9000, "CSS": 700}),
        ]
        skills = self.aggregator.aggregate(repos, now=NOW)
        assert [s.name for s in skills] == ["TypeScript", "CSS", "Python", "Shell"]
        frequencies = [s.frequency for s in skills]
        assert frequencies == sorted(frequencies, reverse=True)

    def test_equal_frequency_keeps_first_seen_order(self):
        repos = [
            make_repo(1, languages={"Go": 100}),
            make_repo(2, languages={"Rust": 100}),
        ]
        assert [s.name for s in self.aggregator.aggregate(repos, now=NOW)] == ["Go", "Rust"]

    def test_counts_and_frequency_summed(self):
        repos = [
            make_repo(1, language="Python", languages={"Python": 1000}),
            make_repo(2, language="Python", languages={"Python": 2500, "HTML": 40}),
        ]
        python = self._by_name(self.aggregator.aggregate(repos, now=NOW))["Python"]
        assert python.repo_count == 2
        assert python.frequency == 3500

    def test_declared_language_missing_from_map(self):
        repo = make_repo(1, language="Jupyter Notebook", languages={})
        skill = self.aggregator.aggregate([repo], now=NOW)[0]
        assert skill.name == "Jupyter Notebook"
        assert skill.frequency == 0
        assert skill.repo_count == 1

    def test_recency_is_average_days(self):
        repos = [
            make_repo(1, languages={"Go": 10}, days_ago=10),
            make_repo(2, languages={"Go": 10}, days_ago=30),
        ]
        go = self.aggregator.aggregate(repos, now=NOW)[0]
        assert go.recency == pytest.approx(20.0)

    def test_single_recent_repo_is_advanced(self):
        """Recency alone qualifies a skill as Advanced."""
        repo = make_repo(1, languages={"Elm": 100}, days_ago=10)
        assert self.aggregator.aggregate([repo], now=NOW)[0].level == ExperienceLevel.ADVANCED

    def test_old_single_small_repo_is_beginner(self):
        repo = make_repo(1, languages={"Elm": 100}, days_ago=400)
        assert self.aggregator.aggregate([repo], now=NOW)[0].level == ExperienceLevel.BEGINNER

    def test_two_old_repos_are_intermediate(self):
        repos = [make_repo(i, languages={"Elm": 100}, days_ago=400) for i in (1, 2)]
        assert self.aggregator.aggregate(repos, now=NOW)[0].level == ExperienceLevel.INTERMEDIATE

    def test_large_old_repo_is_intermediate(self):
        repo = make_repo(1, languages={"C": 10001}, days_ago=400)
        assert self.aggregator.aggregate([repo], now=NOW)[0].level == ExperienceLevel.INTERMEDIATE

    def test_three_old_heavy_repos_are_advanced(self):
        repos = [make_repo(i, languages={"Java": 20000}, days_ago=400) for i in (1, 2, 3)]
        java = self.aggregator.aggregate(repos, now=NOW)[0]
        assert java.frequency == 60000
        assert java.level == ExperienceLevel.ADVANCED

    def test_forks_skipped(self):
        repos = [
            make_repo(1, languages={"Go": 10}),
            make_repo(2, languages={"Haskell": 99999}, fork=True),
        ]
        assert [s.name for s in self.aggregator.aggregate(repos, now=NOW)] == ["Go"]

    def test_empty_input(self):
        assert self.aggregator.aggregate([], now=NOW) == []

    def test_deterministic(self):
        repos = [
            make_repo(1, language="Python", languages={"Python": 500}, days_ago=5),
            make_repo(2, language="Go", languages={"Go": 500, "Python": 10}, days_ago=200),
        ]
        first = self.aggregator.aggregate(repos, now=NOW)
        second = self.aggregator.aggregate(repos, now=NOW)
        assert [s.model_dump() for s in first] == [s.model_dump() for s in second]
