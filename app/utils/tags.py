"""Tag extraction from repo names, descriptions and README text."""

from __future__ import annotations

import re

MAX_TAGS = 15

# Words that carry no signal when splitting a repo name
TAG_NOISE_WORDS = frozenset({
    "mcp", "ai", "agent", "skill", "claude", "code", "tool", "server",
    "plugin", "extension", "the", "for", "and", "with", "your", "app",
    "bot", "kit", "sdk", "api", "cli", "dev", "pro", "hub", "lab",
    "new", "open", "source", "free", "beta", "alpha", "v1", "v2",
    "use", "get", "run", "set", "add", "my", "its", "all", "any",
})

# Known technology/domain keyword → normalized tag
TAG_KEYWORDS: dict[str, str] = {
    # Languages
    "python": "python", "typescript": "typescript", "javascript": "javascript",
    "rust": "rust", "golang": "golang", "ruby": "ruby", "java": "java",
    "swift": "swift", "kotlin": "kotlin", "php": "php", "csharp": "c-sharp",
    "c++": "cpp", "cpp": "cpp", "elixir": "elixir", "scala": "scala",
    "haskell": "haskell", "lua": "lua", "perl": "perl", "zig": "zig",
    # Frameworks & runtimes
    "react": "react", "vue": "vue", "angular": "angular", "nextjs": "nextjs",
    "svelte": "svelte", "django": "django", "flask": "flask", "express": "express",
    "fastapi": "fastapi", "rails": "rails", "laravel": "laravel", "spring": "spring",
    "nestjs": "nestjs", "nuxt": "nuxt", "remix": "remix", "astro": "astro",
    "gatsby": "gatsby", "electron": "electron", "tauri": "tauri",
    # Platforms & infrastructure
    "unity": "unity", "unreal": "unreal", "godot": "godot", "docker": "docker",
    "kubernetes": "kubernetes", "k8s": "kubernetes", "terraform": "terraform",
    "ansible": "ansible", "aws": "aws", "gcp": "gcp", "azure": "azure",
    "vercel": "vercel", "netlify": "netlify", "cloudflare": "cloudflare", "heroku": "heroku",
    # Databases & data
    "supabase": "supabase", "firebase": "firebase", "postgres": "postgresql",
    "postgresql": "postgresql", "mysql": "mysql", "mongodb": "mongodb", "redis": "redis",
    "sqlite": "sqlite", "prisma": "prisma", "drizzle": "drizzle",
    "elasticsearch": "elasticsearch", "dynamodb": "dynamodb",
    # Testing & quality
    "testing": "testing", "jest": "testing", "pytest": "testing", "vitest": "testing",
    "playwright": "testing", "cypress": "testing", "mocha": "testing",
    "lint": "linting", "eslint": "linting", "prettier": "formatting",
    # Security & auth
    "security": "security", "auth": "authentication", "oauth": "authentication",
    "jwt": "authentication",
    # DevOps
    "cicd": "ci-cd", "devops": "devops", "deployment": "deployment",
    "monitoring": "monitoring", "logging": "logging",
    # Version control
    "git": "git", "github": "github", "gitlab": "gitlab", "bitbucket": "bitbucket",
    # Domains
    "3d": "3d", "gamedev": "game-development", "game": "game-development",
    "blockchain": "blockchain", "crypto": "crypto", "web3": "web3",
    "ml": "machine-learning", "machine-learning": "machine-learning",
    # Editors & clients
    "vscode": "vscode", "vim": "vim", "neovim": "neovim", "cursor": "cursor",
    "windsurf": "windsurf", "emacs": "emacs",
    # Content & docs
    "markdown": "markdown", "documentation": "documentation",
    # Mobile
    "mobile": "mobile", "ios": "ios", "android": "android",
    # Data & AI
    "scraping": "web-scraping", "scraper": "web-scraping", "crawler": "web-scraping",
    "rag": "rag", "embeddings": "embeddings", "llm": "llm", "openai": "openai",
    "anthropic": "anthropic", "gemini": "gemini",
    # Integrations
    "slack": "slack", "discord": "discord", "notion": "notion", "jira": "jira",
    "figma": "figma", "linear": "linear", "trello": "trello", "asana": "asana",
    "stripe": "stripe", "shopify": "shopify", "wordpress": "wordpress",
    "twilio": "twilio", "sendgrid": "sendgrid", "sentry": "sentry",
    "datadog": "datadog", "grafana": "grafana", "prometheus": "prometheus",
    # Creative tools
    "blender": "blender", "photoshop": "photoshop", "illustrator": "illustrator",
    "maya": "maya", "cinema4d": "cinema4d", "davinci": "davinci-resolve",
    # Browsers
    "browser": "browser", "chrome": "chrome", "firefox": "firefox",
    "puppeteer": "puppeteer", "selenium": "selenium",
    # Finance
    "finance": "finance", "trading": "trading", "stocks": "finance",
    # Communication
    "email": "email", "whatsapp": "whatsapp", "telegram": "telegram",
    # Misc
    "graphql": "graphql", "grpc": "grpc", "rest-api": "rest-api", "restful": "rest-api",
    "websocket": "websocket", "regex": "regex", "cron": "cron", "queue": "queue",
    "cache": "caching", "pdf": "pdf", "csv": "csv", "json": "json", "yaml": "yaml", "xml": "xml",
}

_DESC_SPLIT_RE = re.compile(r"[\s,./;:()\[\]\"']+")


def extract_tags(repo: str, description: str, readme: str | None) -> list[str]:
    """Extract normalized tags from a repo name, its description and README head."""
    tags: dict[str, None] = {}

    for part in re.split(r"[-_]+", (repo or "").lower()):
        if len(part) < 2 or part in TAG_NOISE_WORDS:
            continue
        if part in TAG_KEYWORDS:
            tags[TAG_KEYWORDS[part]] = None

    for word in _DESC_SPLIT_RE.split((description or "").lower()):
        if len(word) >= 2 and word in TAG_KEYWORDS:
            tags[TAG_KEYWORDS[word]] = None

    if readme:
        # word boundaries so "scala" does not match inside "scalable"
        snippet = readme[:500].lower()
        for keyword, tag in TAG_KEYWORDS.items():
            if len(keyword) >= 3 and re.search(rf"\b{re.escape(keyword)}\b", snippet):
                tags[tag] = None

    return list(tags)


def merge_tags(existing: list[str], extracted: list[str], limit: int = MAX_TAGS) -> list[str]:
    """Additive merge: keep existing tags first, append new ones, cap at ``limit``."""
    return list(dict.fromkeys([*existing, *extracted]))[:limit]
