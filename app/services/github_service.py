"""GitHub access for the importer — raw files, repo metadata, SKILL.md discovery."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


@dataclass
class RepoMetadata:
    description: str = ""
    stars: int = 0
    forks: int = 0
    topics: list[str] = field(default_factory=list)
    license: str | None = None
    updated_at: str | None = None
    default_branch: str = "main"


@dataclass
class SkillFile:
    path: str
    content: str

    @property
    def directory(self) -> str | None:
        if "/" not in self.path:
            return None
        return self.path.rsplit("/", 1)[0]


class GitHubClient:
    """Thin async wrapper over the GitHub REST API and raw content host.

    Every fetch returns None on HTTP or network failure so callers can fall
    back instead of aborting an import.
    """

    def __init__(self, http: httpx.AsyncClient | None = None) -> None:
        self._http = http or httpx.AsyncClient(timeout=30.0, follow_redirects=True)
        self._owns_http = http is None

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def fetch_raw(self, owner: str, repo: str, path: str) -> str | None:
        url = f"{settings.github_raw_url}/{owner}/{repo}/HEAD/{path}"
        try:
            resp = await self._http.get(url, headers={"User-Agent": "mdskills-importer"})
        except httpx.HTTPError as exc:
            logger.debug("Raw fetch failed for %s: %s", url, exc)
            return None
        if resp.status_code != 200:
            return None
        return resp.text

    async def fetch_text(self, url: str) -> str | None:
        try:
            resp = await self._http.get(url, headers={"User-Agent": "mdskills-importer"})
        except httpx.HTTPError as exc:
            logger.warning("Fetch failed for %s: %s", url, exc)
            return None
        if resp.status_code != 200:
            logger.warning("Fetch %s returned HTTP %d", url, resp.status_code)
            return None
        return resp.text

    async def fetch_repo_metadata(self, owner: str, repo: str) -> RepoMetadata | None:
        url = f"{settings.github_api_url}/repos/{owner}/{repo}"
        try:
            resp = await self._http.get(url, headers=settings.github_headers)
        except httpx.HTTPError as exc:
            logger.warning("GitHub metadata fetch failed for %s/%s: %s", owner, repo, exc)
            return None
        if resp.status_code != 200:
            logger.warning("GitHub API %d for %s/%s", resp.status_code, owner, repo)
            return None
        data = resp.json()
        return RepoMetadata(
            description=data.get("description") or "",
            stars=data.get("stargazers_count") or 0,
            forks=data.get("forks_count") or 0,
            topics=list(data.get("topics") or []),
            license=(data.get("license") or {}).get("spdx_id"),
            updated_at=data.get("updated_at"),
            default_branch=data.get("default_branch") or "main",
        )

    async def list_directory(self, owner: str, repo: str, path: str) -> list[dict]:
        url = f"{settings.github_api_url}/repos/{owner}/{repo}/contents/{path}"
        try:
            resp = await self._http.get(url, headers=settings.github_headers)
        except httpx.HTTPError:
            return []
        if resp.status_code != 200:
            return []
        items = resp.json()
        return items if isinstance(items, list) else []

    async def discover_skill_md(self, owner: str, repo: str, subpath: str | None = None) -> SkillFile | None:
        """Look for SKILL.md under the subpath, the usual root spots, then skill folders."""
        candidates: list[str] = []
        if subpath:
            candidates += [f"{subpath}/SKILL.md", f"{subpath}/skill.md"]
        candidates += ["SKILL.md", "skill.md", ".claude/skills/SKILL.md", "skills/SKILL.md"]

        for path in candidates:
            content = await self.fetch_raw(owner, repo, path)
            if content:
                return SkillFile(path=path, content=content)

        for directory in (".claude/skills", "skills"):
            for item in await self.list_directory(owner, repo, directory):
                if item.get("type") != "dir":
                    continue
                path = f"{directory}/{item['name']}/SKILL.md"
                content = await self.fetch_raw(owner, repo, path)
                if content:
                    return SkillFile(path=path, content=content)
        return None

    async def fetch_readme(self, owner: str, repo: str, directory: str | None = None) -> str | None:
        if directory:
            readme = await self.fetch_raw(owner, repo, f"{directory}/README.md")
            if readme:
                return readme
        return await self.fetch_raw(owner, repo, "README.md")
