"""Install tracking: an anonymous counter bumped by the CLI."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.skill import InstallEvent
from app.services import skill_service

router = APIRouter()

MAX_SLUG_LENGTH = 200


@router.post("")
async def record_install(data: InstallEvent, db: AsyncSession = Depends(get_db)):
    slug = (data.slug or "").strip()
    if not slug or len(slug) > MAX_SLUG_LENGTH:
        raise HTTPException(status_code=400, detail="Missing or invalid slug")
    # Unknown slugs and store failures are ignored; the client never waits on this
    await skill_service.record_install(db, slug)
    return {"ok": True}
