"""Import service — turn a GitHub URL into a published listing.

Shared by the admin API route and the ``mdskills import`` commands. Bad input
and unreachable sources come back as a failed :class:`ImportResult` with the
reason and the step-by-step log; nothing here raises past the caller.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models import Skill
from app.schemas.admin import BatchImportSummary, ImportRequest, ImportResult
from app.schemas.skill import ArtifactType
from app.services import catalog_service
from app.services.classifier import CategoryClassifier, default_classifier
from app.services.clients import MCP_ARTIFACT, ClientResolver, default_resolver
from app.services.github_service import GitHubClient
from app.utils.github import GitHubRef, dedup_key, parse_github_source, parse_github_url
from app.utils.markdown import (
    description_from_readme,
    frontmatter_list,
    infer_display_name,
    parse_skill_frontmatter,
    slugify,
)
from app.utils.tags import MAX_TAGS

logger = logging.getLogger(__name__)

PLUGIN_CATEGORY = "claude-code-plugins"
GENERIC_DIR_NAMES = {"skills", ".claude", "src", "lib", "root"}

# Extra clients added when the content mentions them by name
CONTENT_CLIENT_MENTIONS: list[tuple[str, str]] = [
    (r"chatgpt", "chatgpt"),
    (r"grok", "grok"),
    (r"replit", "replit"),
    (r"firebender", "firebender"),
    (r"spring.ai", "spring-ai"),
    (r"databricks", "databricks"),
    (r"letta", "letta"),
    (r"factory", "factory"),
]

PERMISSION_PATTERNS: dict[str, str] = {
    "perm_filesystem_read": r"read|file|fs|path|directory|folder",
    "perm_filesystem_write": r"write|create|save|output|generate.*file",
    "perm_shell_exec": r"exec|command|shell|bash|terminal|npm|npx|pip",
    "perm_network_access": r"fetch|http|api|url|request|download|curl",
    "perm_git_write": r"git push|git commit|git add",
}


# ── Derivation helpers ──────────────────────────────────────────────


def detect_permissions(content: str) -> dict[str, bool]:
    lower = content.lower()
    return {name: bool(re.search(pattern, lower)) for name, pattern in PERMISSION_PATTERNS.items()}


def detect_artifact_type(meta: dict[str, Any], repo_name: str) -> str:
    fm_type = str(meta.get("type") or meta.get("artifact_type") or "").lower()
    if "mcp" in fm_type:
        return "mcp_server"
    if "rule" in fm_type:
        return "ruleset"
    if "workflow" in fm_type:
        return "workflow_pack"
    if "template" in fm_type or "starter" in fm_type:
        return "template_bundle"

    lower = repo_name.lower()
    if "mcp" in lower:
        return "mcp_server"
    if "cursorrules" in lower:
        return "ruleset"
    if re.search(r"template|starter|scaffold", lower):
        return "template_bundle"
    return "skill_pack"


def detect_skill_type(skill_path: str, topics: list[str], readme: str | None) -> tuple[str, bool]:
    """Return (skill_type, has_plugin)."""
    if ".claude/" in skill_path or "plugin" in skill_path:
        return "hybrid", True
    topic_str = " ".join(topics).lower()
    if re.search(r"\bplugins?\b", topic_str) and re.search(r"\bclaude\b", topic_str):
        return "hybrid", True
    if readme:
        head = readme[:2000].lower()
        if re.search(r"claude\s*code\s*plugin", head) or re.search(r"\.claude/.*plugin", head):
            return "hybrid", True
    return "skill", False


def detect_platforms(
    compatibility: list[str],
    content: str,
    readme: str | None,
    artifact_type: str,
    format_standard: str | None,
    resolver: ClientResolver = default_resolver,
) -> list[str]:
    # Explicit frontmatter compatibility wins
    if compatibility:
        return list(dict.fromkeys(re.sub(r"\s+", "-", c.lower()) for c in compatibility))

    platforms = resolver.resolve(artifact_type, format_standard)
    if artifact_type == MCP_ARTIFACT or (format_standard and format_standard in resolver.format_clients):
        return platforms

    haystack = f"{content}\n{readme or ''}"
    for pattern, client in CONTENT_CLIENT_MENTIONS:
        if client not in platforms and re.search(pattern, haystack, re.IGNORECASE):
            platforms.append(client)
    return platforms


def generate_slug(repo: str, skill_path: str) -> str:
    if skill_path in ("README.md", "AGENTS.md"):
        return slugify(repo)
    path = re.sub(r"/?(SKILL|skill)\.md$", "", skill_path)
    dir_name = path.rsplit("/", 1)[-1] if path else ""
    base = repo if not dir_name or dir_name.lower() in GENERIC_DIR_NAMES else dir_name
    return slugify(base)


async def find_existing(db: AsyncSession, key: str) -> Skill | None:
    result = await db.execute(select(Skill).where(Skill.dedup_key == key).limit(1))
    return result.scalar_one_or_none()


async def slug_taken(db: AsyncSession, slug: str) -> bool:
    result = await db.execute(select(Skill.id).where(Skill.slug == slug).limit(1))
    return result.first() is not None


async def unique_slug(db: AsyncSession, slug: str, owner: str) -> str:
    """First free slug among ``slug``, ``slug-owner``, ``slug-owner-2``, ..."""
    if not await slug_taken(db, slug):
        return slug
    base = f"{slug}-{slugify(owner)}"
    candidate, n = base, 2
    while await slug_taken(db, candidate):
        candidate = f"{base}-{n}"
        n += 1
    return candidate


async def existing_keys(db: AsyncSession) -> tuple[set[str], set[str]]:
    """All dedup keys and lowercased GitHub URLs already in the store."""
    result = await db.execute(select(Skill.owner, Skill.repo, Skill.skill_path, Skill.github_url))
    keys: set[str] = set()
    urls: set[str] = set()
    for owner, repo, path, url in result.all():
        keys.add(dedup_key(owner, repo, path))
        if url:
            urls.add(url.lower())
    return keys, urls


# ── Importer ─────────────────────────────────────────────────────────


@dataclass
class _Log:
    lines: list[str] = field(default_factory=list)

    def __call__(self, msg: str) -> None:
        self.lines.append(msg)
        logger.debug(msg)


class SkillImporter:
    def __init__(
        self,
        github: GitHubClient,
        classifier: CategoryClassifier = default_classifier,
        resolver: ClientResolver = default_resolver,
    ) -> None:
        self.github = github
        self.classifier = classifier
        self.resolver = resolver

    def _fail(self, error: str, log: _Log) -> ImportResult:
        logger.info("Import failed: %s", error)
        return ImportResult(success=False, status="failed", error=error, logs=log.lines)

    def _duplicate(self, existing: Skill, log: _Log) -> ImportResult:
        log(f"Already imported as {existing.slug}, skipping")
        return ImportResult(
            success=True, status="duplicate", slug=existing.slug, name=existing.name,
            id=existing.id, logs=log.lines,
        )

    async def import_skill(self, db: AsyncSession, opts: ImportRequest) -> ImportResult:
        log = _Log()

        ref = parse_github_source(opts.url)
        if ref is None:
            return self._fail(f"Invalid GitHub URL: {opts.url}", log)
        log(f"Importing from: {ref}")

        existing = await find_existing(db, ref.key)
        if existing:
            return self._duplicate(existing, log)

        # 1. Repo metadata
        log("Fetching repo metadata...")
        meta = await self.github.fetch_repo_metadata(ref.owner, ref.repo)
        if meta is None:
            return self._fail("Could not fetch repo metadata. Is the repo public?", log)
        log(f"{meta.stars} stars, {meta.forks} forks, license: {meta.license or 'none'}")

        # 2. SKILL.md, or README fallback
        log("Searching for SKILL.md...")
        skill_file = await self.github.discover_skill_md(ref.owner, ref.repo, ref.subpath)
        readme_fallback = False
        if skill_file:
            log(f"Found: {skill_file.path} ({len(skill_file.content)} bytes)")
            skill_dir = skill_file.directory
            fm_meta, _ = parse_skill_frontmatter(skill_file.content)
            readme = await self.github.fetch_readme(ref.owner, ref.repo, skill_dir)
            log(f"README: {len(readme)} bytes" if readme else "No README found")
        else:
            log("No SKILL.md found - falling back to README-based import")
            skill_dir = ref.subpath
            agents_md = await self.github.fetch_raw(ref.owner, ref.repo, "AGENTS.md")
            if agents_md:
                log("Found AGENTS.md - using as skill content")
            readme = await self.github.fetch_readme(ref.owner, ref.repo, ref.subpath)
            if not readme:
                return self._fail("No SKILL.md or README.md found. Cannot import.", log)
            log(f"README: {len(readme)} bytes")
            fm_meta, _ = parse_skill_frontmatter(agents_md or readme)
            readme_fallback = True

        # 3. Derived fields
        skill_path = skill_file.path if skill_file else "README.md"
        content = skill_file.content if skill_file else (readme or "")
        fm_name = str(fm_meta.get("name") or "")
        fm_description = str(fm_meta.get("description") or "")

        key = dedup_key(ref.owner, ref.repo, skill_dir or "")
        slug = opts.slug or generate_slug(ref.repo, skill_path)
        name = opts.name or infer_display_name(ref.repo, fm_name, readme, skill_dir)
        description = (
            fm_description or description_from_readme(readme) or meta.description
            or f"{name} - AI agent skill"
        )[:500]
        artifact_type = (opts.artifact_type.value if opts.artifact_type else None) or detect_artifact_type(fm_meta, ref.repo)
        format_standard = opts.format_standard or ("generic" if readme_fallback else "skill_md")
        platforms = opts.platforms or detect_platforms(
            frontmatter_list(fm_meta, "compatibility"), content, readme,
            artifact_type, format_standard, self.resolver,
        )
        skill_type, has_plugin = detect_skill_type(skill_path, meta.topics, readme)
        tags = list(dict.fromkeys([*frontmatter_list(fm_meta, "tags"), *meta.topics[:10]]))[:MAX_TAGS]

        category_slug = opts.category
        if not category_slug:
            if has_plugin:
                category_slug = PLUGIN_CATEGORY
                log(f"Auto-detected category: {category_slug} (plugin detected)")
            else:
                category_slug = self.classifier.classify(ref.repo, meta.description, meta.topics, readme)
                if category_slug:
                    log(f"Auto-detected category: {category_slug}")

        existing = await find_existing(db, key)
        if existing:
            return self._duplicate(existing, log)
        if opts.slug:
            if await slug_taken(db, slug):
                return self._fail(f'Slug "{slug}" is already used by another skill', log)
        else:
            free = await unique_slug(db, slug, ref.owner)
            if free != slug:
                log(f'Slug "{slug}" is taken by another skill, using "{free}"')
                slug = free

        category_id = None
        if category_slug:
            category = await catalog_service.get_category_by_slug(db, category_slug)
            category_id = category.id if category else None
            if not category_id:
                log(f'Warning: Category "{category_slug}" not found')

        github_url = (
            f"https://github.com/{ref.owner}/{ref.repo}/tree/{meta.default_branch}/{ref.subpath}"
            if ref.subpath else f"https://github.com/{ref.owner}/{ref.repo}"
        )
        permissions = detect_permissions(content)
        derived = {
            "slug": slug,
            "name": name,
            "description": description,
            "dedup_key": key,
            "artifact_type": artifact_type,
            "format_standard": format_standard,
            "platforms": platforms,
            "tags": tags,
            "category": category_slug if category_id else None,
            "skill_type": skill_type,
            "has_plugin": has_plugin,
            **permissions,
        }

        log(f"Slug: {slug}")
        log(f"Name: {name}")
        log(f"Type: {artifact_type}")
        log(f"Platforms: {', '.join(platforms)}")
        log(f"Stars: {meta.stars}")

        if opts.dry_run:
            log("Dry run - nothing written to database")
            return ImportResult(
                success=True, status="dry_run", slug=slug, name=name, derived=derived, logs=log.lines
            )

        # 4. Write
        log("Writing to database...")
        skill = Skill(
            slug=slug,
            name=name,
            description=description,
            owner=ref.owner,
            repo=ref.repo,
            skill_path=skill_dir or "",
            dedup_key=key,
            github_url=github_url,
            content=content,
            readme=readme,
            status="published",
            skill_type=skill_type,
            has_plugin=has_plugin,
            category_id=category_id,
            github_stars=meta.stars,
            github_forks=meta.forks,
            license=meta.license or (str(fm_meta["license"]) if fm_meta.get("license") else None),
            weekly_installs=0,
            platforms=platforms,
            artifact_type=artifact_type,
            format_standard=format_standard,
            **permissions,
        )
        skill.set_tags(tags)
        try:
            db.add(skill)
            await db.flush()
            log(f"Saved: {skill.name} (id: {skill.id})")

            # 5. Client links
            log("Linking to clients...")
            client_slugs = list(platforms)
            if self.resolver.primary_client not in client_slugs:
                client_slugs.insert(0, self.resolver.primary_client)
            links = self.resolver.plan_links(
                client_slugs, artifact_type=artifact_type, owner=ref.owner, repo=ref.repo, slug=slug
            )
            linked, missing = await catalog_service.upsert_skill_clients(db, skill.id, links)
            for c in linked:
                log(f"Linked: {c}")
            for c in missing:
                log(f"Client not found: {c}")
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.exception("Database error importing %s", ref)
            return self._fail(f"Database error: {exc}", log)

        log(f"Done! View at: /skills/{slug}")
        logger.info("Imported %s as %s", ref, slug)
        return ImportResult(
            success=True, status="created", slug=slug, name=name, id=skill.id,
            derived=derived, logs=log.lines,
        )


# ── Awesome-list batch import ───────────────────────────────────────


@dataclass(frozen=True)
class ListEntry:
    name: str
    url: str
    description: str
    section: str = ""


_BOLD_ENTRY_RE = re.compile(r"^-\s+\*\*\[([^\]]+)\]\((https://github\.com/[^)]+)\)\*\*\s*-\s*(.+)")
_PLAIN_ENTRY_RE = re.compile(r"^-\s+\[([^\]]+)\]\((https://github\.com/[^)]+)\)\s*(?:[^\-]*?)\s*-\s+(.+)")
_SECTION_RE = re.compile(r"^#{2,3}\s+(.+)")


def parse_list_entries(readme: str) -> list[ListEntry]:
    """Parse ``- [name](github-url) - description`` bullets (bold or plain)."""
    entries: list[ListEntry] = []
    section = ""
    for line in readme.splitlines():
        header = _SECTION_RE.match(line)
        if header:
            section = re.sub(r"[^\w\s&/-]", "", header.group(1)).strip()
            continue
        match = _BOLD_ENTRY_RE.match(line) or _PLAIN_ENTRY_RE.match(line)
        if match:
            entries.append(ListEntry(
                name=match.group(1), url=match.group(2),
                description=match.group(3).strip(), section=section,
            ))
    return entries


async def batch_import(
    db: AsyncSession,
    importer: SkillImporter,
    entries: list[ListEntry],
    *,
    apply: bool = False,
    limit: int | None = None,
    delay: float | None = None,
    artifact_type: ArtifactType | None = None,
) -> BatchImportSummary:
    """Import the entries not already present, one at a time with a fixed delay."""
    summary = BatchImportSummary(applied=apply, parsed=len(entries))
    keys, urls = await existing_keys(db)

    missing: list[ListEntry] = []
    seen: set[str] = set()
    for entry in entries:
        ref: GitHubRef | None = parse_github_url(entry.url)
        if ref is None:
            summary.skipped.append(f"{entry.name} (unparseable URL)")
            continue
        if ref.key in seen:
            summary.skipped.append(f"{entry.name} (duplicate entry)")
            continue
        seen.add(ref.key)
        if ref.key in keys or entry.url.lower() in urls:
            summary.existing += 1
            continue
        missing.append(entry)
    summary.missing = len(missing)

    to_import = missing[:limit] if limit else missing
    pause = settings.import_delay_seconds if delay is None else delay
    for i, entry in enumerate(to_import):
        prefix = f"[{i + 1}/{len(to_import)}]"
        if not apply:
            logger.info("%s would import %s → %s", prefix, entry.name, entry.url)
            summary.imported += 1
            continue

        result = await importer.import_skill(db, ImportRequest(url=entry.url, artifact_type=artifact_type))
        if result.status == "created":
            logger.info("%s ✓ %s → %s", prefix, entry.name, result.slug)
            summary.imported += 1
        elif result.status == "duplicate":
            logger.info("%s = %s already imported as %s", prefix, entry.name, result.slug)
            summary.existing += 1
        else:
            logger.warning("%s ✗ %s: %s", prefix, entry.name, result.error)
            summary.failed += 1

        if pause and i < len(to_import) - 1:
            await asyncio.sleep(pause)
    return summary
