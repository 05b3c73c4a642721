"""Client compatibility: which agents and editors can consume an artifact, and how to install it."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

# Clients that can consume generic markdown instructions (SKILL.md, AGENTS.md, …)
MARKDOWN_CLIENTS: tuple[str, ...] = (
    "claude-code", "claude-desktop", "cursor", "vscode-copilot", "windsurf",
    "continue-dev", "codex", "gemini-cli", "amp", "roo-code", "goose",
    "opencode", "trae", "qodo", "command-code",
)

# Clients that speak MCP
MCP_CLIENTS: tuple[str, ...] = (
    "claude-code", "claude-desktop", "cursor", "vscode-copilot", "windsurf",
    "continue-dev", "gemini-cli", "amp", "roo-code", "goose",
)

# Formats that only work with specific clients
FORMAT_CLIENTS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "cursorrules": ("cursor",),
    "mdc": ("cursor",),
    "claude_md": ("claude-code", "claude-desktop"),
    "copilot_instructions": ("vscode-copilot", "github"),
    "gemini_md": ("gemini", "gemini-cli"),
    "windsurf_rules": ("windsurf",),
    "clinerules": ("roo-code",),
})

PRIMARY_CLIENT = "claude-code"
MCP_ARTIFACT = "mcp_server"


@dataclass(frozen=True)
class ClientLink:
    client_slug: str
    install_instructions: str
    is_primary: bool = False


class ClientResolver:
    """Resolve compatible clients for an artifact type / format standard.

    First match wins: a format-specific mapping, then the MCP client set for
    MCP servers, then the markdown-consuming set.
    """

    def __init__(
        self,
        markdown_clients: Sequence[str] = MARKDOWN_CLIENTS,
        mcp_clients: Sequence[str] = MCP_CLIENTS,
        format_clients: Mapping[str, Sequence[str]] = FORMAT_CLIENTS,
        *,
        primary_client: str = PRIMARY_CLIENT,
        install_tool: str = "mdskills",
    ) -> None:
        self.markdown_clients = tuple(markdown_clients)
        self.mcp_clients = tuple(mcp_clients)
        self.format_clients: Mapping[str, tuple[str, ...]] = MappingProxyType(
            {fmt: tuple(slugs) for fmt, slugs in format_clients.items()}
        )
        self.primary_client = primary_client
        self.install_tool = install_tool

    def resolve(self, artifact_type: str | None, format_standard: str | None = None) -> list[str]:
        if format_standard and format_standard in self.format_clients:
            return list(self.format_clients[format_standard])
        if artifact_type == MCP_ARTIFACT:
            return list(self.mcp_clients)
        return list(self.markdown_clients)

    def primary_for(self, client_slugs: Sequence[str]) -> str | None:
        """The flagship client if present, else the first of the set."""
        if not client_slugs:
            return None
        if self.primary_client in client_slugs:
            return self.primary_client
        return client_slugs[0]

    def install_instructions(
        self,
        client_slug: str,
        *,
        artifact_type: str | None,
        owner: str,
        repo: str,
        slug: str,
    ) -> str:
        if artifact_type == MCP_ARTIFACT:
            package = repo
            if client_slug == "claude-code":
                return f"claude mcp add {slug} -- npx -y {package}"
            if client_slug == "cursor":
                snippet = {"mcpServers": {slug: {"command": "npx", "args": ["-y", package]}}}
                return "Add to .cursor/mcp.json:\n" + json.dumps(snippet, separators=(",", ":"))
            return f"npx -y {package}"
        return f"npx {self.install_tool} install {owner}/{slug}"

    def plan_links(
        self,
        client_slugs: Sequence[str],
        *,
        artifact_type: str | None,
        owner: str,
        repo: str,
        slug: str,
    ) -> list[ClientLink]:
        """One link per client, exactly one of them primary."""
        ordered = list(dict.fromkeys(client_slugs))
        primary = self.primary_for(ordered)
        return [
            ClientLink(
                client_slug=c,
                install_instructions=self.install_instructions(
                    c, artifact_type=artifact_type, owner=owner, repo=repo, slug=slug
                ),
                is_primary=(c == primary),
            )
            for c in ordered
        ]


default_resolver = ClientResolver()


def resolve_clients(artifact_type: str | None, format_standard: str | None = None) -> list[str]:
    return default_resolver.resolve(artifact_type, format_standard)
