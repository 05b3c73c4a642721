"""Skill request/response schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.models.skill import Skill


class ArtifactType(str, Enum):
    SKILL_PACK = "skill_pack"
    MCP_SERVER = "mcp_server"
    WORKFLOW_PACK = "workflow_pack"
    RULESET = "ruleset"
    OPENAPI_ACTION = "openapi_action"
    EXTENSION = "extension"
    TEMPLATE_BUNDLE = "template_bundle"
    PLUGIN = "plugin"
    TOOL = "tool"


class SortOrder(str, Enum):
    POPULAR = "popular"
    RECENT = "recent"
    TRENDING = "trending"


class CategoryRef(BaseModel):
    slug: str
    name: str

    model_config = {"from_attributes": True}


class SkillClientResponse(BaseModel):
    client_slug: str
    client_name: str
    install_instructions: str | None
    is_primary: bool


class Permissions(BaseModel):
    filesystem_read: bool = False
    filesystem_write: bool = False
    shell_exec: bool = False
    network_access: bool = False
    git_write: bool = False


class SkillListItem(BaseModel):
    slug: str
    name: str
    description: str
    owner: str
    repo: str
    skill_path: str
    github_url: str | None
    weekly_installs: int
    upvotes: int
    tags: list[str]
    platforms: list[str]
    artifact_type: str
    format_standard: str | None
    skill_type: str
    github_stars: int
    github_forks: int
    license: str | None
    category: CategoryRef | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SkillDetail(SkillListItem):
    content: str | None = None
    readme: str | None = None
    has_plugin: bool = False
    difficulty: str = "intermediate"
    clients: list[SkillClientResponse] = []
    permissions: Permissions = Permissions()


class SkillListResponse(BaseModel):
    items: list[SkillListItem]
    total: int
    page: int
    total_pages: int


def to_list_item(skill: Skill) -> SkillListItem:
    return SkillListItem.model_validate(skill)


def to_detail(skill: Skill) -> SkillDetail:
    detail = SkillDetail.model_validate(skill)
    detail.clients = [
        SkillClientResponse(
            client_slug=link.client.slug,
            client_name=link.client.name,
            install_instructions=link.install_instructions,
            is_primary=link.is_primary,
        )
        for link in sorted(skill.listing_clients, key=lambda lc: (not lc.is_primary, lc.client.sort_order))
    ]
    detail.permissions = Permissions(
        filesystem_read=skill.perm_filesystem_read,
        filesystem_write=skill.perm_filesystem_write,
        shell_exec=skill.perm_shell_exec,
        network_access=skill.perm_network_access,
        git_write=skill.perm_git_write,
    )
    return detail


class InstallEvent(BaseModel):
    slug: str | None = None


class CommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: str
    body: str
    username: str
    created_at: datetime


class VoteResponse(BaseModel):
    voted: bool
    upvotes: int
