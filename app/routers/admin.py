"""Admin endpoints — token exchange, GitHub import and backfills."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.deps import get_github_client, require_admin
from app.models import User
from app.schemas.admin import (
    AdminAuthRequest,
    BackfillRequest,
    BackfillSummary,
    ImportRequest,
    ImportResult,
    TokenResponse,
)
from app.schemas.catalog import CategoryResponse
from app.services import backfill_service, catalog_service
from app.services.auth_service import ADMIN_SUBJECT, check_admin_secret, create_access_token
from app.services.github_service import GitHubClient
from app.services.import_service import SkillImporter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/auth", response_model=TokenResponse)
async def admin_auth(data: AdminAuthRequest):
    """Exchange the configured admin secret for an admin access token."""
    if not settings.admin_secret:
        raise HTTPException(status_code=503, detail="Admin not configured")
    if not check_admin_secret(data.password):
        raise HTTPException(status_code=401, detail="Invalid password")
    token = create_access_token(ADMIN_SUBJECT, ADMIN_SUBJECT, role="admin")
    return TokenResponse(access_token=token)


@router.get("/categories", response_model=list[CategoryResponse])
async def admin_categories(
    _: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    rows = await catalog_service.list_categories(db, with_counts=False)
    return [category for category, _count in rows]


@router.post("/import", response_model=ImportResult)
async def import_skill(
    data: ImportRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    github: GitHubClient = Depends(get_github_client),
):
    logger.info("Import requested by %s: %s", admin.username, data.url)
    return await SkillImporter(github).import_skill(db, data)


@router.post("/backfill/categories", response_model=BackfillSummary)
async def backfill_categories(
    data: BackfillRequest,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await backfill_service.backfill_categories(db, apply=data.apply, reset_owner=data.reset_owner)


@router.post("/backfill/clients", response_model=BackfillSummary)
async def backfill_clients(
    data: BackfillRequest,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await backfill_service.backfill_clients(db, apply=data.apply)


@router.post("/backfill/tags", response_model=BackfillSummary)
async def backfill_tags(
    data: BackfillRequest,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await backfill_service.backfill_tags(db, apply=data.apply, slug=data.slug)
