"""Keyword and taxonomy tables for the rule-based inference engine.

Every table is immutable and ordered. Iteration order is part of the
contract: project-type ties are broken by the first type listed, and
skill-gap lists follow the order of the role requirement tables.

Matching against these keywords is plain substring matching on
lower-cased text, so short keywords over-match ("java" inside
"javascript", "ai" inside "email"). Score thresholds downstream were
tuned with that behaviour in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

GENERAL_PROJECT_TYPE = "General"
FRONTEND = "Frontend"
BACKEND = "Backend"
FULL_STACK = "Full Stack"
DATA_ML = "Data/ML"

# (project type, keywords) - first entry wins on equal scores
PROJECT_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        FRONTEND,
        (
            "frontend",
            "ui",
            "user interface",
            "website",
            "design system",
            "css",
            "html",
            "react",
            "vue",
            "angular",
            "svelte",
            "next.js",
            "gatsby",
        ),
    ),
    (
        BACKEND,
        (
            "backend",
            "api",
            "server",
            "database",
            "microservice",
            "django",
            "flask",
            "express",
            "spring",
            "ruby on rails",
        ),
    ),
    (FULL_STACK, ("full stack", "full-stack")),
    (
        "Mobile",
        (
            "mobile",
            "android",
            "ios",
            "swift",
            "kotlin",
            "react native",
            "flutter",
            "xamarin",
        ),
    ),
    (
        "Game Dev",
        ("game", "gamedev", "unity", "unreal", "game engine", "bevy", "godot"),
    ),
    (
        DATA_ML,
        (
            "data science",
            "machine learning",
            "ai",
            "neural network",
            "analysis",
            "visualization",
            "ml",
            "deep learning",
            "pandas",
            "numpy",
            "scikit-learn",
            "tensorflow",
            "pytorch",
        ),
    ),
    (
        "Systems",
        ("os", "kernel", "compiler", "embedded", "systems", "network", "blockchain"),
    ),
    ("Tooling", ("cli", "tool", "library", "framework", "plugin", "devtool")),
)

KEYWORD_MATCH_POINTS = 2

# (project type, language substrings, points) applied to the primary language tag
LANGUAGE_BONUSES: tuple[tuple[str, tuple[str, ...], int], ...] = (
    (FRONTEND, ("javascript", "typescript", "html", "css"), 1),
    (BACKEND, ("python", "java", "go", "ruby", "php", "c#"), 1),
    (DATA_ML, ("jupyter",), 2),
)

# (canonical skill, keywords)
SKILL_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("React", ("react", "reactjs")),
    ("Next.js", ("nextjs", "next.js")),
    ("Vue.js", ("vue", "vuejs")),
    ("Angular", ("angular",)),
    ("Svelte", ("svelte",)),
    ("Node.js", ("node.js", "nodejs")),
    ("Express", ("express", "express.js")),
    ("Django", ("django",)),
    ("Flask", ("flask",)),
    ("Spring Boot", ("spring boot",)),
    ("Docker", ("docker",)),
    ("Kubernetes", ("kubernetes", "k8s")),
    ("AWS", ("aws", "amazon web services")),
    ("Azure", ("azure",)),
    ("Google Cloud", ("gcp", "google cloud")),
    ("SQL", ("sql",)),
    ("NoSQL", ("nosql", "mongodb", "firestore", "dynamodb")),
    ("GraphQL", ("graphql",)),
    ("Jest", ("jest",)),
    ("Testing Library", ("testing library", "rtl")),
    ("Webpack", ("webpack",)),
    ("Vite", ("vite",)),
)

# Searched in repository descriptions only
TEST_KEYWORDS: tuple[str, ...] = ("test", "spec", "jest", "mocha", "chai", "pytest", "junit")

# Roadmap skill categories
CATEGORY_FRONTEND = "frontend"
CATEGORY_BACKEND = "backend"
CATEGORY_CS_FUNDAMENTALS = "cs_fundamentals"
CATEGORY_TOOLS = "tools"
CATEGORY_OTHER = "other"

SKILL_TAXONOMY: Mapping[str, str] = MappingProxyType(
    {
        "html": CATEGORY_FRONTEND,
        "css": CATEGORY_FRONTEND,
        "javascript": CATEGORY_FRONTEND,
        "react": CATEGORY_FRONTEND,
        "next.js": CATEGORY_FRONTEND,
        "vue": CATEGORY_FRONTEND,
        "angular": CATEGORY_FRONTEND,
        "node.js": CATEGORY_BACKEND,
        "express": CATEGORY_BACKEND,
        "python": CATEGORY_BACKEND,
        "django": CATEGORY_BACKEND,
        "java": CATEGORY_BACKEND,
        "sql": CATEGORY_BACKEND,
        "mongodb": CATEGORY_BACKEND,
        "data structures": CATEGORY_CS_FUNDAMENTALS,
        "algorithms": CATEGORY_CS_FUNDAMENTALS,
        "git": CATEGORY_TOOLS,
        "docker": CATEGORY_TOOLS,
        "npm": CATEGORY_TOOLS,
        "yarn": CATEGORY_TOOLS,
        "jest": CATEGORY_TOOLS,
        "rtl": CATEGORY_TOOLS,
    }
)


@dataclass(frozen=True)
class RoleRequirements:
    """Lower-cased skills a role requires (strong) or values (optional)."""

    strong: tuple[str, ...]
    optional: tuple[str, ...]


@dataclass(frozen=True)
class StepTemplate:
    title: str
    description: str
    priority: str


@dataclass(frozen=True)
class PhaseTemplate:
    phase: str
    title: str
    steps: tuple[StepTemplate, ...]


ROLE_REQUIREMENTS: Mapping[str, RoleRequirements] = MappingProxyType(
    {
        "frontend developer": RoleRequirements(
            strong=("html", "css", "javascript", "react", "git"),
            optional=("typescript", "next.js", "jest", "rtl", "npm", "yarn"),
        ),
    }
)

ROADMAP_TEMPLATES: Mapping[str, tuple[PhaseTemplate, ...]] = MappingProxyType(
    {
        "frontend developer": (
            PhaseTemplate(
                phase="Phase 1",
                title="Mastering the Fundamentals",
                steps=(
                    StepTemplate("HTML", "The backbone of all web pages.", "High"),
                    StepTemplate("CSS", "Essential for styling and visual presentation.", "High"),
                    StepTemplate("JavaScript", "The core language for web interactivity.", "High"),
                ),
            ),
            PhaseTemplate(
                phase="Phase 2",
                title="Core Role Competencies",
                steps=(
                    StepTemplate(
                        "React", "A powerful library for building user interfaces.", "High"
                    ),
                    StepTemplate("Git", "Version control is crucial for collaboration.", "High"),
                    StepTemplate(
                        "Package Managers (npm/yarn)",
                        "Manage project dependencies effectively.",
                        "Medium",
                    ),
                ),
            ),
            PhaseTemplate(
                phase="Phase 3",
                title="Advanced & Specialization",
                steps=(
                    StepTemplate(
                        "TypeScript",
                        "Adds static typing to JavaScript for larger projects.",
                        "Medium",
                    ),
                    StepTemplate("Next.js", "A popular React framework for production apps.", "Low"),
                    StepTemplate(
                        "Testing (Jest/RTL)", "Ensure your code is reliable and bug-free.", "Low"
                    ),
                ),
            ),
        ),
    }
)
