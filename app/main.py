"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import async_session, init_db
from app.routers import admin, catalog, installs, skills
from app.services.seed_service import seed_reference_data

# ── Logging setup ────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
# httpx logs every request at INFO; imports make hundreds of them
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await init_db()

    # ── Seed categories and clients ──────────────────────────────
    async with async_session() as session:
        result = await seed_reference_data(session)
        if result["categories"] or result["clients"]:
            logger.info("Reference data: %d categories, %d clients created",
                        len(result["categories"]), len(result["clients"]))

    yield


app = FastAPI(
    title="mdskills",
    description="Marketplace for AI agent skills, MCP servers and rulesets",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(skills.router, prefix="/api/skills", tags=["skills"])
app.include_router(catalog.categories_router, prefix="/api/categories", tags=["categories"])
app.include_router(catalog.clients_router, prefix="/api/clients", tags=["clients"])
app.include_router(installs.router, prefix="/api/installs", tags=["installs"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/health")
async def health():
    return {"status": "ok", "service": "mdskills"}
