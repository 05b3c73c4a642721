"""Category and client reference-data endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.catalog import CategoryResponse, ClientResponse
from app.services import catalog_service

categories_router = APIRouter()
clients_router = APIRouter()

CATALOG_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"


@categories_router.get("/", response_model=list[CategoryResponse])
async def list_categories(response: Response, db: AsyncSession = Depends(get_db)):
    rows = await catalog_service.list_categories(db)
    response.headers["Cache-Control"] = CATALOG_CACHE_CONTROL
    return [
        CategoryResponse.model_validate(category).model_copy(update={"skill_count": count})
        for category, count in rows
    ]


@clients_router.get("/", response_model=list[ClientResponse])
async def list_clients(response: Response, db: AsyncSession = Depends(get_db)):
    response.headers["Cache-Control"] = CATALOG_CACHE_CONTROL
    return await catalog_service.list_clients(db)


@clients_router.get("/{slug}", response_model=ClientResponse)
async def get_client(slug: str, db: AsyncSession = Depends(get_db)):
    client = await catalog_service.get_client_by_slug(db, slug)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client
