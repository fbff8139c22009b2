"""Per-repository rule-based analysis.

Combines text classification with numeric heuristics (stars, description
length, skill breadth) to classify a single repository: project type,
skills, experience tier, strengths and improvement suggestions.
"""

from __future__ import annotations

from app.logging_config import get_logger
from app.metrics import PROJECT_TYPES_ASSIGNED
from services.models import (
    AnalyzedRepository,
    ExperienceLevel,
    RepositoryAnalysis,
    RepositoryFact,
)
from services.text_classifier import TextClassifier

logger = get_logger(__name__)

MAX_STRENGTHS = 3

DESCRIPTION_SUGGESTION = (
    "Consider adding a more detailed description or a README to explain the "
    "project's purpose, setup, and usage."
)
DEMO_SUGGESTION = "Add a link to a live demo (if applicable) to showcase the project in action."
TESTING_SUGGESTION = (
    "Incorporate unit or integration tests to ensure code quality and long-term maintainability."
)


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


class RepositoryAnalyzer:
    """Classifies a single repository. Pure and side-effect free."""

    def __init__(self, classifier: TextClassifier | None = None) -> None:
        self.classifier = classifier or TextClassifier()

    def analyze(self, repo: RepositoryFact) -> RepositoryAnalysis:
        """Analyze one repository fact."""
        all_skills: list[str] = []
        if repo.language:
            all_skills.append(repo.language)
        all_skills.extend(repo.languages.keys())
        all_skills.extend(self.classifier.detect_skills(f"{repo.name} {repo.description_text}"))
        all_skills = _dedupe(all_skills)

        primary = _dedupe(
            ([repo.language] if repo.language else [])
            + self.classifier.detect_skills(repo.description)
        )
        supporting = [s for s in all_skills if s not in primary]

        return RepositoryAnalysis(
            project_type=self.classifier.classify_project_type(repo),
            primary_skills=primary,
            supporting_skills=supporting,
            experience_level=self.experience_level(repo, len(all_skills)),
            strengths=self.strengths(repo, primary),
            improvement_suggestions=self.suggestions(repo),
        )

    def analyze_repository(self, repo: RepositoryFact) -> AnalyzedRepository:
        """Analyze a repository and carry its identifying fields along."""
        if repo.fork:
            raise ValueError("Fork repositories must be excluded before analysis")

        analysis = self.analyze(repo)
        PROJECT_TYPES_ASSIGNED.labels(project_type=analysis.project_type).inc()
        logger.debug(
            "repository_analyzed",
            repo_id=repo.id,
            project_type=analysis.project_type,
            experience_level=analysis.experience_level.value,
        )
        return AnalyzedRepository(
            id=repo.id,
            name=repo.name,
            description=repo.description,
            language=repo.language,
            stars=repo.stars,
            url=repo.url,
            pushed_at=repo.pushed_at,
            languages=dict(repo.languages),
            analysis=analysis,
        )

    @staticmethod
    def experience_level(repo: RepositoryFact, skill_count: int) -> ExperienceLevel:
        """Additive tier score: stars, skill breadth, description quality."""
        score = 0
        if repo.stars > 50:
            score += 2
        elif repo.stars > 10:
            score += 1

        if skill_count > 3:
            score += 2
        elif skill_count > 1:
            score += 1

        description_length = len(repo.description_text)
        if description_length > 100:
            score += 1
        if description_length < 20:
            score -= 1

        if score >= 4:
            return ExperienceLevel.ADVANCED
        if score >= 2:
            return ExperienceLevel.INTERMEDIATE
        return ExperienceLevel.BEGINNER

    @staticmethod
    def strengths(repo: RepositoryFact, primary_skills: list[str]) -> list[str]:
        strengths: list[str] = []
        if repo.language:
            strengths.append(f"Demonstrates proficiency in {repo.language}.")

        major_skills = [s for s in primary_skills if s != repo.language]
        if major_skills:
            strengths.append(f"Applies key technologies like {', '.join(major_skills)}.")

        if repo.stars > 20:
            strengths.append(
                f"Project has gained some community traction with {repo.stars} stars."
            )
        if len(repo.description_text) > 50:
            strengths.append("Includes a clear project description.")
        return strengths[:MAX_STRENGTHS]

    @staticmethod
    def suggestions(repo: RepositoryFact) -> list[str]:
        suggestions: list[str] = []
        if len(repo.description_text) < 50:
            suggestions.append(DESCRIPTION_SUGGESTION)
        suggestions.append(DEMO_SUGGESTION)
        suggestions.append(TESTING_SUGGESTION)
        return suggestions
