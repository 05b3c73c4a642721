"""Backfills over already-imported skills: categories, client links, tags.

Every backfill is a dry run unless ``apply`` is set; the summary lists what
was (or would be) changed per skill.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Skill
from app.schemas.admin import BackfillSummary
from app.services import catalog_service
from app.services.classifier import CategoryClassifier, default_classifier
from app.services.clients import ClientResolver, default_resolver
from app.services.listing import published_clause
from app.utils.tags import extract_tags, merge_tags

logger = logging.getLogger(__name__)


def _emit(summary: BackfillSummary, line: str) -> None:
    summary.lines.append(line)
    logger.info(line)


async def backfill_categories(
    db: AsyncSession,
    apply: bool = False,
    reset_owner: str | None = None,
    classifier: CategoryClassifier = default_classifier,
) -> BackfillSummary:
    """Classify published skills without a category.

    With ``reset_owner`` every skill of that owner is cleared first (apply
    mode only) and re-classified.
    """
    summary = BackfillSummary(applied=apply)
    category_ids = await catalog_service.category_ids_by_slug(db)

    if reset_owner and apply:
        result = await db.execute(
            update(Skill).where(Skill.owner == reset_owner).values(category_id=None)
            .execution_options(synchronize_session=False)
        )
        _emit(summary, f"Cleared category for {result.rowcount} skills of {reset_owner}")

    stmt = (
        select(Skill)
        .where(published_clause())
        .order_by(Skill.slug)
        .execution_options(populate_existing=True)
    )
    if reset_owner:
        stmt = stmt.where(Skill.owner == reset_owner)
    else:
        stmt = stmt.where(Skill.category_id.is_(None))
    skills = list((await db.execute(stmt)).scalars().all())

    for skill in skills:
        summary.processed += 1
        detected = classifier.classify(skill.name, skill.description, skill.tags, skill.readme)
        category_id = category_ids.get(detected) if detected else None
        if not category_id:
            summary.skipped += 1
            continue
        _emit(summary, f"{skill.slug} -> {detected}")
        if apply:
            skill.category_id = category_id
        summary.updated += 1

    if apply:
        await db.commit()
    return summary


async def backfill_clients(
    db: AsyncSession,
    apply: bool = False,
    resolver: ClientResolver = default_resolver,
) -> BackfillSummary:
    """Add the resolver's client links that published skills are missing.

    Existing links are left untouched, so running it twice adds nothing.
    """
    summary = BackfillSummary(applied=apply)
    client_ids = await catalog_service.client_ids_by_slug(db)

    stmt = (
        select(Skill)
        .where(published_clause())
        .options(selectinload(Skill.listing_clients))
        .order_by(Skill.slug)
        .execution_options(populate_existing=True)
    )
    skills = list((await db.execute(stmt)).scalars().all())

    for skill in skills:
        summary.processed += 1
        targets = resolver.resolve(skill.artifact_type or "skill_pack", skill.format_standard or "skill_md")
        linked_ids = {lc.client_id for lc in skill.listing_clients}
        has_primary = any(lc.is_primary for lc in skill.listing_clients)

        planned = resolver.plan_links(
            targets, artifact_type=skill.artifact_type, owner=skill.owner, repo=skill.repo, slug=skill.slug
        )
        new_links = [
            link for link in planned
            if link.client_slug in client_ids and client_ids[link.client_slug] not in linked_ids
        ]
        if not new_links:
            summary.skipped += 1
            continue
        if has_primary:
            new_links = [replace(link, is_primary=False) for link in new_links]

        _emit(summary, f"{skill.slug} +{len(new_links)} clients: {', '.join(link.client_slug for link in new_links)}")
        if apply:
            await catalog_service.upsert_skill_clients(db, skill.id, new_links, client_ids)
        summary.updated += len(new_links)

    if apply:
        await db.commit()
    return summary


async def backfill_tags(
    db: AsyncSession,
    apply: bool = False,
    slug: str | None = None,
) -> BackfillSummary:
    """Additive tag extraction; existing tags are kept and listed first."""
    summary = BackfillSummary(applied=apply)

    stmt = (
        select(Skill)
        .where(published_clause())
        .order_by(Skill.slug)
        .execution_options(populate_existing=True)
    )
    if slug:
        stmt = stmt.where(Skill.slug == slug)
    skills = list((await db.execute(stmt)).scalars().all())

    for skill in skills:
        summary.processed += 1
        existing = skill.tags
        merged = merge_tags(existing, extract_tags(skill.repo, skill.description, skill.readme))
        new_tags = [t for t in merged if t not in existing]
        if not new_tags:
            summary.skipped += 1
            continue
        _emit(summary, f"{skill.slug} +{len(new_tags)} tags: [{', '.join(new_tags)}]")
        if apply:
            skill.set_tags(merged)
        summary.updated += 1

    if apply:
        await db.commit()
    return summary

