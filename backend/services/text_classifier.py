"""Keyword-based text classifier.

Detects technology mentions in free text and infers a repository's
project type from its name, description and primary language.
"""

from __future__ import annotations

from services.models import RepositoryFact
from services.taxonomy import (
    GENERAL_PROJECT_TYPE,
    KEYWORD_MATCH_POINTS,
    LANGUAGE_BONUSES,
    PROJECT_TYPE_KEYWORDS,
    SKILL_KEYWORDS,
)

KeywordTable = tuple[tuple[str, tuple[str, ...]], ...]
BonusTable = tuple[tuple[str, tuple[str, ...], int], ...]


class TextClassifier:
    """Substring classifier over injected keyword tables."""

    def __init__(
        self,
        skill_keywords: KeywordTable = SKILL_KEYWORDS,
        project_type_keywords: KeywordTable = PROJECT_TYPE_KEYWORDS,
        language_bonuses: BonusTable = LANGUAGE_BONUSES,
    ) -> None:
        self.skill_keywords = skill_keywords
        self.project_type_keywords = project_type_keywords
        self.language_bonuses = language_bonuses

    def detect_skills(self, text: str | None) -> list[str]:
        """Return canonical skills mentioned in text, in table order."""
        if not text:
            return []
        lower_text = text.lower()
        return [
            skill
            for skill, keywords in self.skill_keywords
            if any(kw in lower_text for kw in keywords)
        ]

    def classify_project_type(self, repo: RepositoryFact) -> str:
        """Pick the best scoring project type, or "General" if nothing matched.

        Equal scores resolve to the type listed first in the keyword table.
        """
        search_text = f"{repo.name.lower()} {repo.description_text.lower()}"
        language = (repo.language or "").lower()

        scores: dict[str, int] = {}
        for project_type, keywords in self.project_type_keywords:
            scores[project_type] = 0
            if any(kw in search_text for kw in keywords):
                scores[project_type] += KEYWORD_MATCH_POINTS

        if language:
            for project_type, needles, points in self.language_bonuses:
                if any(needle in language for needle in needles):
                    scores[project_type] = scores.get(project_type, 0) + points

        highest = max(scores.values(), default=0)
        if highest <= 0:
            return GENERAL_PROJECT_TYPE
        return next(t for t, s in scores.items() if s == highest)
