"""Skill service: listing, detail, install counter, comments and votes."""

from __future__ import annotations

import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Comment, ListingClient, Skill, User, Vote
from app.services.listing import ListingFilters, build_query, published_clause, total_pages
from app.schemas.skill import SortOrder

logger = logging.getLogger(__name__)


async def search_skills(
    db: AsyncSession,
    filters: ListingFilters | None = None,
    sort: SortOrder | str | None = SortOrder.POPULAR,
    page: int = 1,
    page_size: int | None = None,
) -> tuple[list[Skill], int, int, int]:
    """Return (items, total_matching, page, total_pages)."""
    query = build_query(filters, sort=sort, page=page, page_size=page_size)
    total = (await db.execute(query.count_statement)).scalar_one()
    if query.offset >= total:
        # Past the last page; the offset may not even fit the driver's integer type
        return [], total, query.page, total_pages(total, query.page_size)
    result = await db.execute(query.statement)
    items = list(result.scalars().all())
    return items, total, query.page, total_pages(total, query.page_size)


async def get_skill(db: AsyncSession, slug: str, published_only: bool = True) -> Skill | None:
    stmt = (
        select(Skill)
        .where(Skill.slug == slug)
        .options(selectinload(Skill.listing_clients).joinedload(ListingClient.client))
    )
    if published_only:
        stmt = stmt.where(published_clause())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def record_install(db: AsyncSession, slug: str) -> bool:
    """Best-effort install counter bump; never raises.

    A single UPDATE ... SET n = n + 1 so concurrent installs are not lost.
    Returns whether a skill row was touched.
    """
    try:
        result = await db.execute(
            update(Skill)
            .where(Skill.slug == slug)
            .values(weekly_installs=Skill.weekly_installs + 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return (result.rowcount or 0) > 0
    except SQLAlchemyError as exc:
        logger.warning("Install counter update failed for %s: %s", slug, exc)
        await db.rollback()
        return False


async def list_comments(db: AsyncSession, skill: Skill) -> list[Comment]:
    stmt = select(Comment).where(Comment.skill_id == skill.id).order_by(Comment.created_at, Comment.id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def add_comment(db: AsyncSession, skill: Skill, user: User, body: str) -> Comment:
    comment = Comment(skill_id=skill.id, user_id=user.id, body=body.strip())
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return comment


async def toggle_vote(db: AsyncSession, skill: Skill, user: User) -> tuple[bool, int]:
    """Add the user's vote, or remove it if present. Returns (voted, upvotes)."""
    existing = await db.execute(
        select(Vote).where(Vote.skill_id == skill.id, Vote.user_id == user.id)
    )
    vote = existing.scalar_one_or_none()
    if vote:
        await db.delete(vote)
        voted = False
    else:
        db.add(Vote(skill_id=skill.id, user_id=user.id))
        voted = True
    await db.flush()

    count = (await db.execute(
        select(func.count()).select_from(Vote).where(Vote.skill_id == skill.id)
    )).scalar_one()
    skill.upvotes = count
    await db.commit()
    return voted, count


async def clear_skills(db: AsyncSession) -> int:
    """Delete every skill (bulk-clear tooling). Returns the number removed."""
    count = (await db.execute(select(func.count()).select_from(Skill))).scalar_one()
    # Tags, client links, comments and votes go with their skill via ON DELETE CASCADE
    await db.execute(delete(Skill))
    await db.commit()
    logger.info("Deleted %d skills", count)
    return count
