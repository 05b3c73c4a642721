"""Reference data — categories and clients, upserted idempotently at startup."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Category, Client

logger = logging.getLogger(__name__)

# (slug, name, description)
DEFAULT_CATEGORIES: list[tuple[str, str, str]] = [
    ("claude-code-plugins", "Claude Code Plugins", "Plugins, hooks and slash commands for Claude Code"),
    ("code-review", "Code Review", "Linting, static analysis and review checklists"),
    ("documentation", "Documentation", "Docs, READMEs and API reference generation"),
    ("testing", "Testing", "Unit, integration and end-to-end testing"),
    ("security", "Security", "Vulnerability review, hardening and audits"),
    ("api-development", "API Development", "REST, GraphQL and RPC service design"),
    ("data-analysis", "Data Analysis", "Analytics, notebooks and visualization"),
    ("productivity", "Productivity", "Automation, workflows and task management"),
    ("creative", "Creative", "Writing, storytelling and visual art"),
    ("design-systems", "Design Systems", "UI components, styling and design tokens"),
    ("information-architecture", "Information Architecture", "Navigation, taxonomy and content structure"),
    ("resume-writing", "Resume Writing", "Resumes, cover letters and interviews"),
    ("devops-ci-cd", "DevOps & CI/CD", "Containers, infrastructure and deployment pipelines"),
    ("database-design", "Database Design", "Schemas, migrations and query tuning"),
    ("content-creation", "Content Creation", "Marketing copy, SEO and social media"),
    ("research-analysis", "Research & Analysis", "Literature review, synthesis and surveys"),
    ("code-generation", "Code Generation", "Scaffolding, boilerplate and generators"),
]

# (slug, name, website)
DEFAULT_CLIENTS: list[tuple[str, str, str]] = [
    ("claude-code", "Claude Code", "https://claude.com/product/claude-code"),
    ("claude-desktop", "Claude Desktop", "https://claude.ai/download"),
    ("cursor", "Cursor", "https://cursor.com"),
    ("vscode-copilot", "VS Code Copilot", "https://code.visualstudio.com"),
    ("windsurf", "Windsurf", "https://windsurf.com"),
    ("continue-dev", "Continue", "https://continue.dev"),
    ("codex", "Codex", "https://openai.com/codex"),
    ("gemini-cli", "Gemini CLI", "https://github.com/google-gemini/gemini-cli"),
    ("gemini", "Gemini", "https://gemini.google.com"),
    ("github", "GitHub", "https://github.com"),
    ("amp", "Amp", "https://ampcode.com"),
    ("roo-code", "Roo Code", "https://roocode.com"),
    ("goose", "Goose", "https://block.github.io/goose"),
    ("opencode", "OpenCode", "https://opencode.ai"),
    ("trae", "Trae", "https://trae.ai"),
    ("qodo", "Qodo", "https://qodo.ai"),
    ("command-code", "Command Code", "https://commandcode.ai"),
]


async def seed_reference_data(db: AsyncSession) -> dict[str, list[str]]:
    """Insert missing categories and clients; existing slugs keep their ids.

    Returns dict with 'categories' and 'clients' lists of newly created slugs.
    """
    created_categories: list[str] = []
    created_clients: list[str] = []

    existing = set((await db.execute(select(Category.slug))).scalars().all())
    for order, (slug, name, description) in enumerate(DEFAULT_CATEGORIES):
        if slug in existing:
            continue
        db.add(Category(slug=slug, name=name, description=description, sort_order=order))
        created_categories.append(slug)

    existing = set((await db.execute(select(Client.slug))).scalars().all())
    for order, (slug, name, website) in enumerate(DEFAULT_CLIENTS):
        if slug in existing:
            continue
        db.add(Client(slug=slug, name=name, website_url=website, sort_order=order))
        created_clients.append(slug)

    if created_categories or created_clients:
        await db.commit()
        logger.info(
            "Seeded %d categories, %d clients", len(created_categories), len(created_clients)
        )
    return {"categories": created_categories, "clients": created_clients}
