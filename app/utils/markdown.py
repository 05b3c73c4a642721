"""Markdown helpers — SKILL.md frontmatter, README descriptions, display names."""

from __future__ import annotations

import re
from typing import Any

import yaml

ACRONYMS = frozenset({
    "ai", "api", "aws", "ci", "cd", "cli", "cms", "cpu", "css", "csv",
    "db", "dns", "docx", "dom", "gcp", "gif", "gpu", "html", "http",
    "https", "ide", "io", "ip", "json", "jwt", "llm", "mcp", "ml",
    "npm", "os", "pdf", "pptx", "qa", "rag", "rest", "rpc", "sdk",
    "seo", "sql", "ssh", "ssl", "svg", "tls", "ui", "url", "ux",
    "vm", "xml", "xlsx", "yaml",
})


def parse_skill_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML frontmatter from a SKILL.md file.

    Returns (metadata_dict, body_after_frontmatter).
    """
    match = re.match(r"^---\s*\n(.*?)\n---\s*\n?(.*)", content, re.DOTALL)
    if not match:
        return {}, content

    try:
        meta = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        meta = {}
    if not isinstance(meta, dict):
        meta = {}

    return meta, match.group(2)


def frontmatter_list(meta: dict[str, Any], key: str) -> list[str]:
    """Read a frontmatter field that may be a YAML list or a comma-separated string."""
    value = meta.get(key)
    if isinstance(value, list):
        return [str(v).strip() for v in value if str(v).strip()]
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return []


def description_from_readme(readme: str | None, max_len: int = 400) -> str:
    """First prose block of a README, stripped of HTML, badges and markup."""
    if not readme:
        return ""
    text = re.sub(r"<[^>]+>", " ", readme)
    text = re.sub(r"^#\s+.+?\n+", "", text, count=1, flags=re.MULTILINE)
    text = re.sub(r"^>\s*.*$", "", text, flags=re.MULTILINE)
    text = re.sub(r"!\[[^\]]*\]\([^)]+\)", "", text)
    text = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", text).strip()

    # Cut at the first section heading before markup is stripped
    first_block = re.split(r"\n#{2,6}\s|\n\n\n", text)[0]
    first_block = re.sub(r"[*_`#]", "", first_block).strip()
    if not first_block:
        return ""
    first_block = re.sub(r"\n+", " ", first_block)
    first_block = re.sub(r"\s{2,}", " ", first_block).strip()
    return first_block[:max_len]


def title_case(slug: str) -> str:
    """``pdf-tools_kit`` → ``PDF Tools Kit``."""
    words = [w for w in re.sub(r"[-_]", " ", slug).split(" ") if w]
    return " ".join(w.upper() if w.lower() in ACRONYMS else w[:1].upper() + w[1:].lower() for w in words)


def infer_display_name(
    repo: str, fm_name: str, readme: str | None, skill_dir: str | None = None
) -> str:
    """Pick the best human-readable name for a listing.

    A frontmatter name with spaces wins outright; a slug-style frontmatter
    name is title-cased; then a short README heading; then the directory
    or repo name.
    """
    if fm_name and " " in fm_name:
        return fm_name
    if fm_name and ("-" in fm_name or "_" in fm_name):
        return title_case(fm_name)

    if readme:
        html = re.search(r"<h1[^>]*>([^<]+)</h1>", readme, re.IGNORECASE)
        md = re.search(r"^#\s+(.+)", readme, re.MULTILINE)
        heading = (html.group(1).strip() if html else None) or (md.group(1).strip() if md else None)
        if heading and len(heading) < 80:
            clean = re.sub(r"^\W+", "", re.sub(r"[*_`]", "", heading)).strip()
            if clean:
                return clean

    dir_name = skill_dir.rsplit("/", 1)[-1] if skill_dir else None
    return title_case(fm_name or dir_name or repo)


def slugify(value: str) -> str:
    value = re.sub(r"[^a-z0-9-]", "-", value.lower())
    return re.sub(r"-+", "-", value).strip("-")
