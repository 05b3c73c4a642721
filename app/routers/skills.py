"""Public skill endpoints — listing, detail, comments and votes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.deps import require_user
from app.models import User
from app.schemas.skill import (
    CommentCreate,
    CommentResponse,
    SkillDetail,
    SkillListResponse,
    SortOrder,
    VoteResponse,
    to_detail,
    to_list_item,
)
from app.services import skill_service
from app.services.listing import ListingFilters

logger = logging.getLogger(__name__)

router = APIRouter()

LIST_CACHE_CONTROL = "public, s-maxage=60, stale-while-revalidate=300"


def _split_tags(values: list[str] | None) -> tuple[str, ...]:
    tags: list[str] = []
    for value in values or []:
        tags.extend(t.strip() for t in value.split(",") if t.strip())
    return tuple(dict.fromkeys(tags))


@router.get("/", response_model=SkillListResponse)
async def list_skills(
    response: Response,
    q: str | None = None,
    category: str | None = None,
    client: str | None = None,
    artifact_type: str | None = None,
    tags: list[str] | None = Query(None),
    featured: bool = False,
    sort: str = SortOrder.POPULAR.value,
    page: int = 1,
    page_size: int | None = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    filters = ListingFilters(
        text=q,
        category=category,
        client=client,
        artifact_type=artifact_type,
        tags=_split_tags(tags),
        featured=featured,
    )
    size = min(page_size or settings.page_size, settings.max_page_size)
    try:
        items, total, page, pages = await skill_service.search_skills(
            db, filters, sort=sort, page=page, page_size=size
        )
    except SQLAlchemyError:
        logger.exception("Skill listing query failed")
        raise HTTPException(status_code=503, detail="Database error")

    response.headers["Cache-Control"] = LIST_CACHE_CONTROL
    return SkillListResponse(
        items=[to_list_item(s) for s in items], total=total, page=page, total_pages=pages
    )


@router.get("/{slug}", response_model=SkillDetail)
async def get_skill(slug: str, db: AsyncSession = Depends(get_db)):
    try:
        skill = await skill_service.get_skill(db, slug)
    except SQLAlchemyError:
        logger.exception("Skill detail query failed for %s", slug)
        raise HTTPException(status_code=503, detail="Database error")
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    return to_detail(skill)


@router.get("/{slug}/comments", response_model=list[CommentResponse])
async def list_comments(slug: str, db: AsyncSession = Depends(get_db)):
    skill = await skill_service.get_skill(db, slug)
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    comments = await skill_service.list_comments(db, skill)
    return [
        CommentResponse(id=c.id, body=c.body, username=c.user.username, created_at=c.created_at)
        for c in comments
    ]


@router.post("/{slug}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    slug: str,
    data: CommentCreate,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    skill = await skill_service.get_skill(db, slug)
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    if not data.body.strip():
        raise HTTPException(status_code=422, detail="Comment body is empty")
    comment = await skill_service.add_comment(db, skill, user, data.body)
    return CommentResponse(
        id=comment.id, body=comment.body, username=user.username, created_at=comment.created_at
    )


@router.post("/{slug}/vote", response_model=VoteResponse)
async def toggle_vote(
    slug: str,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    skill = await skill_service.get_skill(db, slug)
    if not skill:
        raise HTTPException(status_code=404, detail="Skill not found")
    voted, upvotes = await skill_service.toggle_vote(db, skill, user)
    return VoteResponse(voted=voted, upvotes=upvotes)
