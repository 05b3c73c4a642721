"""GitHub source references: URL parsing and dedup keys."""

from __future__ import annotations

import re
from dataclasses import dataclass

_GITHUB_URL_RE = re.compile(r"github\.com/([^/]+)/([^/]+?)(?:/tree/[^/]+(?:/(.+))?)?$")
_SHORTHAND_RE = re.compile(r"^([A-Za-z0-9-]+)/([A-Za-z0-9._-]+)$")
_SKILL_FILE_RE = re.compile(r"(?:^|/)(?:SKILL|README)\.md$", re.IGNORECASE)


@dataclass(frozen=True)
class GitHubRef:
    owner: str
    repo: str
    subpath: str | None = None

    @property
    def key(self) -> str:
        return dedup_key(self.owner, self.repo, self.subpath)

    def __str__(self) -> str:
        base = f"{self.owner}/{self.repo}"
        return f"{base}/{self.subpath}" if self.subpath else base


def _strip_skill_file(path: str) -> str:
    return _SKILL_FILE_RE.sub("", path.strip().strip("/")).strip("/")


def dedup_key(owner: str, repo: str, path: str | None = None) -> str:
    """Canonical ``owner/repo[/path]`` key used to spot already-imported skills.

    Owner and repo are lowercased; a trailing ``SKILL.md`` / ``README.md`` and
    surrounding slashes are dropped from the path, so a folder and the skill
    file inside it produce the same key.
    """
    base = f"{(owner or '').lower()}/{(repo or '').lower()}"
    clean = _strip_skill_file(path or "")
    return f"{base}/{clean}" if clean else base


def parse_github_url(url: str) -> GitHubRef | None:
    """Parse ``github.com/<owner>/<repo>(/tree/<ref>/<subpath>)?``.

    ``blob`` URLs are rewritten to ``tree`` form first. Returns None for
    anything that is not a GitHub repository URL.
    """
    if not url:
        return None
    cleaned = url.strip()
    cleaned = re.sub(r"\.git$", "", cleaned).rstrip("/")
    cleaned = cleaned.replace("/blob/", "/tree/", 1)

    match = _GITHUB_URL_RE.search(cleaned)
    if not match:
        return None
    subpath = _strip_skill_file(match.group(3)) if match.group(3) else ""
    return GitHubRef(owner=match.group(1), repo=match.group(2), subpath=subpath or None)


def parse_github_source(source: str) -> GitHubRef | None:
    """Like :func:`parse_github_url` but also accepts ``owner/repo`` shorthand."""
    ref = parse_github_url(source)
    if ref:
        return ref
    match = _SHORTHAND_RE.match(re.sub(r"\.git$", "", (source or "").strip()).rstrip("/"))
    if not match:
        return None
    return GitHubRef(owner=match.group(1), repo=match.group(2))
