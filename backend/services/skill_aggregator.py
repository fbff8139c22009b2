"""Skill aggregation across a user's repositories.

Folds each repository's declared language and language byte map into a
single inventory ranked by byte frequency, leveled by repo count,
frequency and recency.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Iterable

from services.models import AggregatedSkill, ExperienceLevel, RepositoryFact

SECONDS_PER_DAY = 86400

ADVANCED_MIN_REPOS = 3
ADVANCED_MIN_FREQUENCY = 50000
RECENT_DAYS = 90
INTERMEDIATE_MIN_REPOS = 2
INTERMEDIATE_MIN_FREQUENCY = 10000


@dataclass
class _SkillStats:
    repo_count: int = 0
    frequency: int = 0
    recency: list[float] = field(default_factory=list)


def days_since(moment: datetime, now: datetime) -> float:
    """Fractional days elapsed between moment and now."""
    return (now - moment).total_seconds() / SECONDS_PER_DAY


class SkillAggregator:
    """Builds the ranked skill inventory."""

    def aggregate(
        self, repos: Iterable[RepositoryFact], now: datetime | None = None
    ) -> list[AggregatedSkill]:
        """Aggregate skills, most frequent first.

        Args:
            repos: Non-fork repository facts with language maps populated
            now: Reference time for recency (defaults to current UTC time)
        """
        now = now or datetime.now(UTC)
        stats: dict[str, _SkillStats] = {}

        for repo in repos:
            if repo.fork:
                continue
            days_since_push = days_since(repo.pushed_at, now)

            skills_in_repo: list[str] = []
            if repo.language:
                skills_in_repo.append(repo.language)
            skills_in_repo.extend(repo.languages.keys())

            for skill in dict.fromkeys(skills_in_repo):
                entry = stats.setdefault(skill, _SkillStats())
                entry.repo_count += 1
                entry.frequency += repo.languages.get(skill, 0)
                entry.recency.append(days_since_push)

        ranked: list[AggregatedSkill] = []
        for name, entry in stats.items():
            avg_recency = sum(entry.recency) / len(entry.recency)
            ranked.append(
                AggregatedSkill(
                    name=name,
                    level=self.skill_level(entry.repo_count, entry.frequency, avg_recency),
                    repo_count=entry.repo_count,
                    frequency=entry.frequency,
                    recency=avg_recency,
                )
            )
        # sorted() is stable: equal frequencies keep first-seen order
        return sorted(ranked, key=lambda s: s.frequency, reverse=True)

    @staticmethod
    def skill_level(repo_count: int, frequency: int, avg_recency: float) -> ExperienceLevel:
        # Recency alone is enough for Advanced
        if (
            repo_count >= ADVANCED_MIN_REPOS and frequency > ADVANCED_MIN_FREQUENCY
        ) or avg_recency < RECENT_DAYS:
            return ExperienceLevel.ADVANCED
        if repo_count >= INTERMEDIATE_MIN_REPOS or frequency > INTERMEDIATE_MIN_FREQUENCY:
            return ExperienceLevel.INTERMEDIATE
        return ExperienceLevel.BEGINNER
