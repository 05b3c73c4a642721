"""Keyword-scoring category classifier."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

# Category slug → keywords that signal it. Order matters: ties go to the first.
DEFAULT_CATEGORY_KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "claude-code-plugins": (
        "claude code plugin", "claude plugin", "claude-code plugin", "slash-commands",
        "claude code skills", "claude code hooks",
    ),
    "code-review": (
        "code review", "lint", "linting", "eslint", "prettier", "code quality",
        "static analysis", "code style",
    ),
    "documentation": ("documentation", "docs", "readme", "jsdoc", "typedoc", "api docs", "docstring"),
    "testing": (
        "testing", "test", "jest", "mocha", "pytest", "unit test", "e2e", "qa",
        "quality assurance", "playwright", "cypress", "vitest",
    ),
    "security": (
        "security", "vulnerability", "cve", "owasp", "pentest", "penetration test",
        "encryption", "exploit", "malware", "firewall",
    ),
    "api-development": ("api", "rest", "graphql", "openapi", "swagger", "endpoint", "webhook", "grpc"),
    "data-analysis": (
        "data analysis", "data science", "analytics", "visualization", "pandas",
        "jupyter", "notebook", "csv", "dataset",
    ),
    "productivity": (
        "productivity", "automation", "workflow", "task", "todo", "scheduling",
        "time tracking", "cli tool", "memory", "note",
    ),
    "creative": ("creative", "writing", "content", "copywriting", "blog", "storytelling", "image", "art"),
    "design-systems": (
        "design system", "ui", "component", "tailwind", "css", "react component",
        "figma", "storybook", "frontend",
    ),
    "information-architecture": (
        "information architecture", "navigation", "sitemap", "taxonomy", "content structure",
    ),
    "resume-writing": ("resume", "cv", "cover letter", "career", "job", "hiring", "interview"),
    "devops-ci-cd": (
        "devops", "ci/cd", "docker", "kubernetes", "terraform", "github actions",
        "deployment", "infrastructure", "pipeline", "aws", "gcp", "azure",
    ),
    "database-design": (
        "database", "sql", "postgres", "mysql", "mongodb", "schema", "migration",
        "orm", "prisma", "supabase",
    ),
    "content-creation": (
        "content creation", "blog post", "marketing", "seo", "social media",
        "newsletter", "copywriting",
    ),
    "research-analysis": (
        "research", "analysis", "literature review", "synthesis", "survey", "paper", "academic",
    ),
    "code-generation": (
        "code generation", "scaffolding", "boilerplate", "generator", "template",
        "starter", "cli", "scaffold",
    ),
})

TAG_MATCH_SCORE = 3
TEXT_MATCH_SCORE = 1


class CategoryClassifier:
    """Maps free text to the best-fitting category slug.

    Every keyword found in the haystack scores ``TEXT_MATCH_SCORE``, or
    ``TAG_MATCH_SCORE`` when one of the tags contains it. The highest scoring
    category wins (first one on ties) provided it reaches ``min_score``;
    otherwise nothing is returned, since a single weak hit is not enough.
    """

    def __init__(
        self,
        keywords: Mapping[str, Sequence[str]] = DEFAULT_CATEGORY_KEYWORDS,
        *,
        min_score: int = 2,
        readme_chars: int = 800,
    ) -> None:
        self._keywords: tuple[tuple[str, tuple[str, ...]], ...] = tuple(
            (slug, tuple(kw.lower() for kw in kws)) for slug, kws in keywords.items()
        )
        self.min_score = min_score
        self.readme_chars = readme_chars

    @property
    def categories(self) -> list[str]:
        return [slug for slug, _ in self._keywords]

    def haystack(
        self,
        name: str | None,
        description: str | None,
        tags: Iterable[str] | None,
        readme: str | None,
    ) -> str:
        parts = [
            re.sub(r"[-_]", " ", name or ""),
            description or "",
            *(tags or ()),
            (readme or "")[: self.readme_chars],
        ]
        return " ".join(parts).lower()

    def score(self, keywords: Sequence[str], text: str, tags: Sequence[str]) -> int:
        total = 0
        for kw in keywords:
            if kw not in text:
                continue
            total += TAG_MATCH_SCORE if any(kw in tag for tag in tags) else TEXT_MATCH_SCORE
        return total

    def scores(
        self,
        name: str | None,
        description: str | None,
        tags: Iterable[str] | None = None,
        readme: str | None = None,
    ) -> dict[str, int]:
        tag_list = [t.lower() for t in (tags or ()) if t]
        text = self.haystack(name, description, tag_list, readme)
        return {slug: self.score(kws, text, tag_list) for slug, kws in self._keywords}

    def classify(
        self,
        name: str | None,
        description: str | None,
        tags: Iterable[str] | None = None,
        readme: str | None = None,
    ) -> str | None:
        best: str | None = None
        best_score = 0
        for slug, value in self.scores(name, description, tags, readme).items():
            if value > best_score:
                best, best_score = slug, value
        return best if best_score >= self.min_score else None


default_classifier = CategoryClassifier()


def classify(
    name: str | None,
    description: str | None,
    tags: Iterable[str] | None = None,
    readme: str | None = None,
) -> str | None:
    """Classify with the default keyword table."""
    return default_classifier.classify(name, description, tags, readme)
