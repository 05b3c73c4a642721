"""Shared fixtures: in-memory database, seeded reference data, API client, fake GitHub."""

import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  register mappers
from app.database import Base, enable_sqlite_foreign_keys, get_db
from app.deps import get_github_client
from app.main import app as fastapi_app
from app.models import Skill
from app.services.auth_service import create_access_token
from app.services.github_service import GitHubClient
from app.services.seed_service import seed_reference_data

RAW = "https://raw.githubusercontent.com"
API = "https://api.github.com"


class FakeGitHub:
    """Routes GitHub raw/API requests to canned responses; anything else is a 404."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, str]] = {}
        self.requests: list[str] = []

    def add_repo(self, owner: str, repo: str, **meta) -> None:
        data = {
            "description": meta.get("description", ""),
            "stargazers_count": meta.get("stars", 0),
            "forks_count": meta.get("forks", 0),
            "topics": meta.get("topics", []),
            "license": {"spdx_id": meta["license"]} if meta.get("license") else None,
            "default_branch": meta.get("default_branch", "main"),
        }
        self.routes[f"{API}/repos/{owner}/{repo}"] = (200, json.dumps(data))

    def add_file(self, owner: str, repo: str, path: str, content: str) -> None:
        self.routes[f"{RAW}/{owner}/{repo}/HEAD/{path}"] = (200, content)

    def add_url(self, url: str, content: str) -> None:
        self.routes[url] = (200, content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        status, body = self.routes.get(url, (404, "Not Found"))
        return httpx.Response(status, text=body)

    def client(self) -> GitHubClient:
        return GitHubClient(httpx.AsyncClient(transport=httpx.MockTransport(self.handler)))


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_reference_data(session)
    return factory


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def fake_github():
    return FakeGitHub()


@pytest_asyncio.fixture
async def client(session_factory, fake_github):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_github():
        async with fake_github.client() as github:
            yield github

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_github_client] = override_github
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def admin_headers():
    token = create_access_token("admin", "admin", role="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def user_headers():
    token = create_access_token("user-1", "alice", role="user")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_skill(db_session):
    """Insert a published skill with sensible defaults."""

    async def make(slug: str, **fields) -> Skill:
        owner = fields.pop("owner", "acme")
        repo = fields.pop("repo", slug)
        tags = fields.pop("tags", [])
        skill = Skill(
            slug=slug,
            name=fields.pop("name", slug.replace("-", " ").title()),
            description=fields.pop("description", f"{slug} description"),
            owner=owner,
            repo=repo,
            skill_path=fields.pop("skill_path", ""),
            dedup_key=fields.pop("dedup_key", f"{owner}/{slug}".lower()),
            status=fields.pop("status", "published"),
            **fields,
        )
        skill.set_tags(tags)
        db_session.add(skill)
        await db_session.commit()
        return skill

    return make
