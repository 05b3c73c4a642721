"""Listing query builder for skill listings (filters, sort, pagination)."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from sqlalchemy import Select, func, or_, select

from app.config import settings
from app.models import Category, Client, ListingClient, Skill, SkillTag
from app.schemas.skill import SortOrder


@dataclass(frozen=True)
class ListingFilters:
    text: str | None = None
    category: str | None = None
    client: str | None = None
    artifact_type: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    featured: bool = False


@dataclass(frozen=True)
class ListingQuery:
    statement: Select
    count_statement: Select
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def total_pages(total_matching: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total_matching / page_size)


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def published_clause():
    return or_(Skill.status == "published", Skill.status.is_(None))


def filter_conditions(filters: ListingFilters) -> list:
    conds = [published_clause()]
    text = (filters.text or "").strip()
    if text:
        pattern = _like_pattern(text)
        conds.append(or_(
            Skill.name.ilike(pattern, escape="\\"),
            Skill.description.ilike(pattern, escape="\\"),
        ))
    if filters.category:
        conds.append(Skill.category.has(Category.slug == filters.category))
    if filters.client:
        conds.append(Skill.listing_clients.any(ListingClient.client.has(Client.slug == filters.client)))
    if filters.artifact_type:
        conds.append(Skill.artifact_type == filters.artifact_type)
    if filters.featured:
        conds.append(Skill.featured.is_(True))
    tags = [t for t in filters.tags if t]
    if tags:
        conds.append(Skill.tag_rows.any(SkillTag.tag.in_(tags)))
    return conds


def sort_columns(sort: SortOrder | str | None) -> list:
    try:
        order = SortOrder(sort) if sort else SortOrder.POPULAR
    except ValueError:
        order = SortOrder.POPULAR
    if order is SortOrder.RECENT:
        primary = Skill.created_at.desc()
    else:
        # trending is currently the same ordering as popular
        primary = Skill.weekly_installs.desc()
    return [primary, Skill.slug.asc()]


def build_query(
    filters: ListingFilters | None = None,
    sort: SortOrder | str | None = SortOrder.POPULAR,
    page: int = 1,
    page_size: int | None = None,
) -> ListingQuery:
    """Compose filters, sort key and 1-based page into row + count statements."""
    filters = filters or ListingFilters()
    size = page_size or settings.page_size
    page = max(int(page or 1), 1)
    conds = filter_conditions(filters)

    statement = (
        select(Skill)
        .where(*conds)
        .order_by(*sort_columns(sort))
        .limit(size)
        .offset((page - 1) * size)
    )
    count_statement = select(func.count()).select_from(Skill).where(*conds)
    return ListingQuery(statement=statement, count_statement=count_statement, page=page, page_size=size)
