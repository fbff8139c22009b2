"""Templated skill-gap roadmap generator.

Independent of repository analysis: takes a target role and the user's
declared skills, marks template steps as completed, categorizes the
skills and reports which role requirements are met or missing.

Step completion uses exact, case-insensitive title matches, stricter
than the substring matching of the text classifier.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from app.exceptions import RoleNotSupportedError
from app.logging_config import get_logger
from app.metrics import ROADMAPS_GENERATED
from services.models import (
    CategorizedSkills,
    PhaseStatus,
    RoadmapPhase,
    RoadmapStep,
    SkillAnalysisOutput,
    SkillGaps,
    StepStatus,
)
from services.taxonomy import (
    CATEGORY_OTHER,
    ROADMAP_TEMPLATES,
    ROLE_REQUIREMENTS,
    SKILL_TAXONOMY,
    PhaseTemplate,
    RoleRequirements,
)

logger = get_logger(__name__)


class RoadmapGenerator:
    """Builds a SkillAnalysisOutput from immutable role tables."""

    def __init__(
        self,
        templates: Mapping[str, Sequence[PhaseTemplate]] = ROADMAP_TEMPLATES,
        requirements: Mapping[str, RoleRequirements] = ROLE_REQUIREMENTS,
        taxonomy: Mapping[str, str] = SKILL_TAXONOMY,
    ) -> None:
        self.templates = templates
        self.requirements = requirements
        self.taxonomy = taxonomy

    @property
    def supported_roles(self) -> list[str]:
        return [role for role in self.templates if role in self.requirements]

    def generate(self, target_role: str, current_skills: Sequence[str]) -> SkillAnalysisOutput:
        """Generate the roadmap and skill-gap report for a role.

        Raises:
            RoleNotSupportedError: no template or requirement set for the role
        """
        role_key = target_role.lower()
        template = self.templates.get(role_key)
        requirements = self.requirements.get(role_key)
        if template is None or requirements is None:
            ROADMAPS_GENERATED.labels(role="unsupported", status="not_found").inc()
            raise RoleNotSupportedError(target_role)

        owned = {skill.lower() for skill in current_skills}

        output = SkillAnalysisOutput(
            categorized_skills=self.categorize(current_skills),
            skill_gaps=self.skill_gaps(requirements, owned),
            roadmap=[self._build_phase(phase, owned) for phase in template],
        )

        ROADMAPS_GENERATED.labels(role=role_key, status="success").inc()
        logger.info(
            "roadmap_generated",
            role=role_key,
            skill_count=len(current_skills),
            missing=len(output.skill_gaps.missing),
        )
        return output

    @staticmethod
    def _build_phase(template: PhaseTemplate, owned: set[str]) -> RoadmapPhase:
        # Fresh models per call; the frozen template is never touched
        steps = [
            RoadmapStep(
                title=step.title,
                description=step.description,
                priority=step.priority,
                status=(
                    StepStatus.COMPLETED
                    if step.title.lower() in owned
                    else StepStatus.RECOMMENDED
                ),
            )
            for step in template.steps
        ]
        completed = all(step.status == StepStatus.COMPLETED for step in steps)
        return RoadmapPhase(
            phase=template.phase,
            title=template.title,
            status=PhaseStatus.COMPLETED if completed else PhaseStatus.IN_PROGRESS,
            steps=steps,
        )

    def categorize(self, current_skills: Sequence[str]) -> CategorizedSkills:
        """Place each declared skill in exactly one category.

        Skills differing only in case count once; the first spelling is kept.
        """
        categorized = CategorizedSkills()
        seen: set[str] = set()
        for skill in current_skills:
            lower_skill = skill.lower()
            if lower_skill in seen:
                continue
            category = self.taxonomy.get(lower_skill, CATEGORY_OTHER)
            getattr(categorized, category).append(skill)
            seen.add(lower_skill)
        return categorized

    @staticmethod
    def skill_gaps(requirements: RoleRequirements, owned: set[str]) -> SkillGaps:
        gaps = SkillGaps()
        for req in requirements.strong:
            if req in owned:
                gaps.strong.append(req)
            else:
                gaps.missing.append(req)
        gaps.optional.extend(req for req in requirements.optional if req in owned)
        return gaps
