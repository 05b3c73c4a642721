"""Categories, clients and skill-to-client links."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Category, Client, ListingClient, Skill
from app.services.clients import ClientLink
from app.services.listing import published_clause


async def list_categories(db: AsyncSession, with_counts: bool = True) -> list[tuple[Category, int | None]]:
    result = await db.execute(select(Category).order_by(Category.sort_order, Category.slug))
    categories = list(result.scalars().all())
    if not with_counts:
        return [(c, None) for c in categories]

    stmt = (
        select(Skill.category_id, func.count())
        .where(Skill.category_id.is_not(None), published_clause())
        .group_by(Skill.category_id)
    )
    counts = dict((await db.execute(stmt)).all())
    return [(c, counts.get(c.id, 0)) for c in categories]


async def get_category_by_slug(db: AsyncSession, slug: str) -> Category | None:
    result = await db.execute(select(Category).where(Category.slug == slug))
    return result.scalar_one_or_none()


async def category_ids_by_slug(db: AsyncSession) -> dict[str, str]:
    result = await db.execute(select(Category.slug, Category.id))
    return dict(result.all())


async def list_clients(db: AsyncSession) -> list[Client]:
    result = await db.execute(select(Client).order_by(Client.sort_order, Client.slug))
    return list(result.scalars().all())


async def get_client_by_slug(db: AsyncSession, slug: str) -> Client | None:
    result = await db.execute(select(Client).where(Client.slug == slug))
    return result.scalar_one_or_none()


async def client_ids_by_slug(db: AsyncSession) -> dict[str, str]:
    result = await db.execute(select(Client.slug, Client.id))
    return dict(result.all())


async def upsert_skill_clients(
    db: AsyncSession,
    skill_id: str,
    links: Sequence[ClientLink],
    client_ids: dict[str, str] | None = None,
) -> tuple[list[str], list[str]]:
    """Create or overwrite (skill, client) links keyed on the pair.

    Only one link per skill stays primary: when a primary link is written,
    any other primary link of the skill is demoted. Does not commit.
    Returns (linked client slugs, unknown client slugs).
    """
    if client_ids is None:
        client_ids = await client_ids_by_slug(db)

    result = await db.execute(select(ListingClient).where(ListingClient.skill_id == skill_id))
    existing = {lc.client_id: lc for lc in result.scalars().all()}

    linked: list[str] = []
    missing: list[str] = []
    primary_id: str | None = None
    for link in links:
        client_id = client_ids.get(link.client_slug)
        if not client_id:
            missing.append(link.client_slug)
            continue
        row = existing.get(client_id)
        if row is None:
            row = ListingClient(skill_id=skill_id, client_id=client_id)
            db.add(row)
            existing[client_id] = row
        row.install_instructions = link.install_instructions
        row.is_primary = link.is_primary
        if link.is_primary:
            primary_id = client_id
        linked.append(link.client_slug)

    if primary_id is not None:
        for client_id, row in existing.items():
            if client_id != primary_id and row.is_primary:
                row.is_primary = False
    return linked, missing
