"""Skill ORM model. One row per marketplace listing (skill, MCP server, ruleset, plugin)."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.models.category import Category


def _uuid() -> str:
    return str(uuid.uuid4())


class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    slug: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")

    # Source location
    owner: Mapped[str] = mapped_column(String(128), default="")
    repo: Mapped[str] = mapped_column(String(128), default="")
    skill_path: Mapped[str] = mapped_column(String(512), default="")
    dedup_key: Mapped[str] = mapped_column(String(800), unique=True, index=True)  # owner/repo/path
    github_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    content: Mapped[str | None] = mapped_column(Text, nullable=True)  # SKILL.md body
    readme: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str | None] = mapped_column(String(16), nullable=True)  # published | draft | NULL
    featured: Mapped[bool] = mapped_column(Boolean, default=False)
    skill_type: Mapped[str] = mapped_column(String(16), default="skill")  # skill | hybrid
    has_plugin: Mapped[bool] = mapped_column(Boolean, default=False)
    difficulty: Mapped[str] = mapped_column(String(16), default="intermediate")
    artifact_type: Mapped[str] = mapped_column(String(32), default="skill_pack")
    format_standard: Mapped[str | None] = mapped_column(String(32), nullable=True)

    category_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    platforms: Mapped[list[str]] = mapped_column(JSON, default=list)
    license: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Counters
    github_stars: Mapped[int] = mapped_column(Integer, default=0)
    github_forks: Mapped[int] = mapped_column(Integer, default=0)
    weekly_installs: Mapped[int] = mapped_column(Integer, default=0)
    upvotes: Mapped[int] = mapped_column(Integer, default=0)

    # Permissions inferred from content
    perm_filesystem_read: Mapped[bool] = mapped_column(Boolean, default=False)
    perm_filesystem_write: Mapped[bool] = mapped_column(Boolean, default=False)
    perm_shell_exec: Mapped[bool] = mapped_column(Boolean, default=False)
    perm_network_access: Mapped[bool] = mapped_column(Boolean, default=False)
    perm_git_write: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    category: Mapped[Category | None] = relationship(lazy="selectin")
    tag_rows: Mapped[list["SkillTag"]] = relationship(
        back_populates="skill", cascade="all, delete-orphan", lazy="selectin", order_by="SkillTag.position"
    )
    listing_clients: Mapped[list["ListingClient"]] = relationship(  # noqa: F821
        "ListingClient", back_populates="skill", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    def set_tags(self, tags: list[str]) -> None:
        """Replace the tag set, keeping first-seen order and dropping duplicates.

        Rows for tags that survive are reused so the (skill_id, tag) unique
        constraint never sees a delete+insert of the same pair in one flush.
        """
        seen: list[str] = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        existing = {row.tag: row for row in self.tag_rows}
        rows = []
        for i, tag in enumerate(seen):
            row = existing.get(tag) or SkillTag(tag=tag)
            row.position = i
            rows.append(row)
        self.tag_rows = rows

    @property
    def is_published(self) -> bool:
        return self.status in (None, "published")


class SkillTag(Base):
    __tablename__ = "skill_tags"
    __table_args__ = (UniqueConstraint("skill_id", "tag", name="uq_skill_tag"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    skill_id: Mapped[str] = mapped_column(String(36), ForeignKey("skills.id", ondelete="CASCADE"), index=True)
    tag: Mapped[str] = mapped_column(String(64), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    skill: Mapped[Skill] = relationship(back_populates="tag_rows")
