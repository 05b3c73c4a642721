"""GitHub import tests — single URL through the admin API, and awesome-list batches."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from app.models import Client, ListingClient, Skill
from app.schemas.admin import ImportRequest
from app.services.import_service import (
    SkillImporter,
    batch_import,
    detect_artifact_type,
    detect_permissions,
    detect_platforms,
    generate_slug,
    parse_list_entries,
)

SKILL_MD = """---
name: pytest-kit
description: Pytest helpers for unit test suites
tags: [python, pytest]
---

Read the test file and run the suite.
"""


def add_pytest_kit(fake_github):
    fake_github.add_repo(
        "acme", "pytest-kit", description="Testing toolkit", stars=120, forks=7,
        topics=["testing", "pytest"], license="MIT",
    )
    fake_github.add_file("acme", "pytest-kit", "SKILL.md", SKILL_MD)
    fake_github.add_file("acme", "pytest-kit", "README.md", "# Pytest Kit\n\nHelpers.\n")


async def count(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


# ── Derivation helpers ──────────────────────────────────────────────


def test_generate_slug():
    assert generate_slug("pdf-tools", "SKILL.md") == "pdf-tools"
    assert generate_slug("toolbox", "skills/PDF Merge/SKILL.md") == "pdf-merge"
    assert generate_slug("toolbox", ".claude/skills/SKILL.md") == "toolbox"
    assert generate_slug("My_Repo", "README.md") == "my-repo"


def test_detect_artifact_type():
    assert detect_artifact_type({"type": "MCP server"}, "anything") == "mcp_server"
    assert detect_artifact_type({}, "weather-mcp") == "mcp_server"
    assert detect_artifact_type({}, "awesome-cursorrules") == "ruleset"
    assert detect_artifact_type({}, "nextjs-starter") == "template_bundle"
    assert detect_artifact_type({}, "pdf-tools") == "skill_pack"


def test_detect_permissions():
    perms = detect_permissions("Run `git commit` then curl the API")
    assert perms["perm_git_write"] is True
    assert perms["perm_network_access"] is True
    assert detect_permissions("")["perm_shell_exec"] is False


def test_detect_platforms():
    assert detect_platforms(["Claude Code", "Cursor"], "", None, "skill_pack", "skill_md") == [
        "claude-code", "cursor",
    ]
    mcp = detect_platforms([], "works with chatgpt", None, "mcp_server", None)
    assert "chatgpt" not in mcp
    markdown = detect_platforms([], "works with ChatGPT", None, "skill_pack", "skill_md")
    assert markdown[-1] == "chatgpt"
    assert detect_platforms([], "chatgpt", None, "ruleset", "cursorrules") == ["cursor"]


# ── Single import via API ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_import_creates_skill_with_links(client: AsyncClient, session_factory, fake_github, admin_headers):
    add_pytest_kit(fake_github)

    resp = await client.post(
        "/api/admin/import", json={"url": "https://github.com/acme/pytest-kit"}, headers=admin_headers
    )
    assert resp.status_code == 200
    result = resp.json()
    assert result["success"] is True
    assert result["status"] == "created"
    assert result["slug"] == "pytest-kit"
    assert result["name"] == "Pytest Kit"
    assert result["derived"]["category"] == "testing"
    assert result["derived"]["dedup_key"] == "acme/pytest-kit"

    detail = (await client.get("/api/skills/pytest-kit")).json()
    assert detail["description"] == "Pytest helpers for unit test suites"
    assert detail["github_stars"] == 120
    assert detail["license"] == "MIT"
    assert detail["category"]["slug"] == "testing"
    assert detail["tags"][:2] == ["python", "pytest"]
    assert detail["permissions"]["filesystem_read"] is True
    primaries = [c["client_slug"] for c in detail["clients"] if c["is_primary"]]
    assert primaries == ["claude-code"]
    assert detail["clients"][0]["install_instructions"] == "npx mdskills install acme/pytest-kit"

    async with session_factory() as session:
        links = (await session.execute(select(func.count()).select_from(ListingClient))).scalar_one()
    assert links == 15


@pytest.mark.asyncio
async def test_reimport_is_duplicate_and_writes_nothing(client: AsyncClient, session_factory, fake_github, admin_headers):
    add_pytest_kit(fake_github)
    url = "https://github.com/acme/pytest-kit"
    first = await client.post("/api/admin/import", json={"url": url}, headers=admin_headers)
    assert first.json()["status"] == "created"
    skills, links = await count(session_factory, Skill), await count(session_factory, ListingClient)

    for again in (url, "https://github.com/Acme/Pytest-Kit/blob/main/SKILL.md", "acme/pytest-kit"):
        resp = await client.post("/api/admin/import", json={"url": again}, headers=admin_headers)
        assert resp.json()["status"] == "duplicate"
        assert resp.json()["slug"] == "pytest-kit"

    assert await count(session_factory, Skill) == skills == 1
    assert await count(session_factory, ListingClient) == links


@pytest.mark.asyncio
async def test_dry_run_writes_nothing(client: AsyncClient, session_factory, fake_github, admin_headers):
    add_pytest_kit(fake_github)
    resp = await client.post(
        "/api/admin/import",
        json={"url": "acme/pytest-kit", "dry_run": True, "slug": "kit", "platforms": "cursor, codex"},
        headers=admin_headers,
    )
    result = resp.json()
    assert result["status"] == "dry_run"
    assert result["derived"]["slug"] == "kit"
    assert result["derived"]["platforms"] == ["cursor", "codex"]
    assert any("Dry run" in line for line in result["logs"])
    assert await count(session_factory, Skill) == 0


@pytest.mark.asyncio
async def test_readme_fallback_for_mcp_server(client: AsyncClient, fake_github, admin_headers):
    fake_github.add_repo("acme", "weather-mcp", description="Weather data over MCP", stars=3)
    fake_github.add_file("acme", "weather-mcp", "README.md", "# Weather MCP\n\nForecasts for agents.\n")

    result = (await client.post("/api/admin/import", json={"url": "acme/weather-mcp"}, headers=admin_headers)).json()
    assert result["status"] == "created"
    assert result["slug"] == "weather-mcp"
    assert result["derived"]["artifact_type"] == "mcp_server"
    assert result["derived"]["format_standard"] == "generic"

    detail = (await client.get("/api/skills/weather-mcp")).json()
    assert detail["description"] == "Forecasts for agents."
    by_client = {c["client_slug"]: c for c in detail["clients"]}
    assert "codex" not in by_client
    assert by_client["claude-code"]["install_instructions"] == "claude mcp add weather-mcp -- npx -y weather-mcp"
    assert by_client["claude-code"]["is_primary"] is True
    assert by_client["windsurf"]["install_instructions"] == "npx -y weather-mcp"


@pytest.mark.asyncio
async def test_unreachable_or_invalid_source_fails_cleanly(client: AsyncClient, session_factory, admin_headers):
    resp = await client.post("/api/admin/import", json={"url": "acme/missing"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is False
    assert "metadata" in resp.json()["error"]

    resp = await client.post("/api/admin/import", json={"url": "not a github url"}, headers=admin_headers)
    assert resp.json()["status"] == "failed"
    assert await count(session_factory, Skill) == 0


@pytest.mark.asyncio
async def test_repo_without_readme_or_skill_fails(client: AsyncClient, fake_github, admin_headers):
    fake_github.add_repo("acme", "empty")
    resp = await client.post("/api/admin/import", json={"url": "acme/empty"}, headers=admin_headers)
    assert resp.json()["success"] is False
    assert "README" in resp.json()["error"]


@pytest.mark.asyncio
async def test_slug_taken_by_other_source_gets_owner_suffix(client: AsyncClient, session_factory, make_skill, fake_github, admin_headers):
    await make_skill("pytest-kit", owner="someone", repo="pytest-kit")
    add_pytest_kit(fake_github)

    resp = await client.post("/api/admin/import", json={"url": "acme/pytest-kit"}, headers=admin_headers)
    assert resp.json()["status"] == "created"
    assert resp.json()["slug"] == "pytest-kit-acme"
    assert any("is taken" in line for line in resp.json()["logs"])
    assert await count(session_factory, Skill) == 2

    resp = await client.post("/api/admin/import", json={"url": "acme/pytest-kit"}, headers=admin_headers)
    assert resp.json()["status"] == "duplicate"
    assert resp.json()["slug"] == "pytest-kit-acme"


@pytest.mark.asyncio
async def test_same_folder_name_under_different_owners(db_session, session_factory, fake_github):
    body = "---\nname: pdf\ndescription: Merge and split PDF files\n---\n\nUse the tools.\n"
    for owner in ("acme", "other"):
        fake_github.add_repo(owner, "kit")
        fake_github.add_file(owner, "kit", "skills/pdf/SKILL.md", body)

    async with fake_github.client() as github:
        importer = SkillImporter(github)
        first = await importer.import_skill(db_session, ImportRequest(url="https://github.com/acme/kit/tree/main/skills/pdf"))
        second = await importer.import_skill(db_session, ImportRequest(url="https://github.com/other/kit/tree/main/skills/pdf"))

    assert (first.status, first.slug) == ("created", "pdf")
    assert (second.status, second.slug) == ("created", "pdf-other")
    assert second.derived["dedup_key"] == "other/kit/skills/pdf"
    assert await count(session_factory, Skill) == 2


@pytest.mark.asyncio
async def test_explicit_slug_collision_fails(client: AsyncClient, session_factory, make_skill, fake_github, admin_headers):
    await make_skill("taken", owner="someone")
    add_pytest_kit(fake_github)
    resp = await client.post(
        "/api/admin/import", json={"url": "acme/pytest-kit", "slug": "taken"}, headers=admin_headers
    )
    assert resp.json()["status"] == "failed"
    assert "already used" in resp.json()["error"]
    assert await count(session_factory, Skill) == 1


# ── Awesome-list batch ──────────────────────────────────────────────

AWESOME = """# Awesome Skills

## Testing

- **[pytest-kit](https://github.com/acme/pytest-kit)** - Pytest helpers
- [weather-mcp](https://github.com/acme/weather-mcp) 🐍 ☁️ - Weather data
- [broken](https://github.com/acme) - Not a repo link

## Other

- [elsewhere](https://gitlab.com/acme/x) - Not GitHub
- **[pytest-kit again](https://github.com/acme/pytest-kit)** - Listed twice
"""


def test_parse_list_entries():
    entries = parse_list_entries(AWESOME)
    assert [e.name for e in entries] == ["pytest-kit", "weather-mcp", "broken", "pytest-kit again"]
    assert entries[0].section == "Testing"
    assert entries[1].description == "Weather data"
    assert entries[3].section == "Other"


@pytest.mark.asyncio
async def test_batch_import(db_session, session_factory, fake_github):
    add_pytest_kit(fake_github)
    fake_github.add_repo("acme", "weather-mcp")
    fake_github.add_file("acme", "weather-mcp", "README.md", "# Weather\n\nForecasts.\n")
    entries = parse_list_entries(AWESOME)

    async with fake_github.client() as github:
        importer = SkillImporter(github)

        dry = await batch_import(db_session, importer, entries, apply=False, delay=0)
        assert (dry.parsed, dry.existing, dry.missing, dry.imported) == (4, 0, 2, 2)
        assert dry.skipped == ["broken (unparseable URL)", "pytest-kit again (duplicate entry)"]
        assert await count(session_factory, Skill) == 0

        summary = await batch_import(db_session, importer, entries, apply=True, limit=1, delay=0)
        assert (summary.imported, summary.failed) == (1, 0)
        assert await count(session_factory, Skill) == 1

        summary = await batch_import(db_session, importer, entries, apply=True, delay=0)
        assert (summary.existing, summary.missing, summary.imported) == (1, 1, 1)
        assert await count(session_factory, Skill) == 2


@pytest.mark.asyncio
async def test_batch_import_counts_failures(db_session, fake_github):
    entries = parse_list_entries("- [gone](https://github.com/acme/gone) - Deleted repo\n")
    async with fake_github.client() as github:
        summary = await batch_import(db_session, SkillImporter(github), entries, apply=True, delay=0)
    assert (summary.imported, summary.failed) == (0, 1)


@pytest.mark.asyncio
async def test_importer_override_category_and_missing_clients(db_session, fake_github):
    add_pytest_kit(fake_github)
    async with fake_github.client() as github:
        result = await SkillImporter(github).import_skill(
            db_session,
            ImportRequest(url="acme/pytest-kit", category="security", platforms=["cursor", "unknown-editor"]),
        )
    assert result.status == "created"
    assert result.derived["category"] == "security"
    assert any("Client not found: unknown-editor" in line for line in result.logs)

    rows = (await db_session.execute(
        select(Client.slug, ListingClient.is_primary)
        .select_from(ListingClient)
        .join(Client, Client.id == ListingClient.client_id)
    )).all()
    assert sorted(rows) == [("claude-code", True), ("cursor", False)]
