"""Admin request/response schemas."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.skill import ArtifactType


class AdminAuthRequest(BaseModel):
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ImportRequest(BaseModel):
    url: str = Field(..., min_length=1)
    slug: str | None = Field(None, pattern=r"^[a-z0-9\-]+$", max_length=200)
    name: str | None = None
    category: str | None = None
    platforms: list[str] | None = None
    artifact_type: ArtifactType | None = None
    format_standard: str | None = None
    dry_run: bool = False

    @field_validator("platforms", mode="before")
    @classmethod
    def split_platforms(cls, v: Any) -> Any:
        # Accept "claude-code, cursor" as well as a list
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v


class ImportResult(BaseModel):
    success: bool
    status: str  # created | duplicate | dry_run | failed
    slug: str | None = None
    name: str | None = None
    id: str | None = None
    derived: dict[str, Any] = {}
    error: str | None = None
    logs: list[str] = []


class BackfillRequest(BaseModel):
    apply: bool = False
    reset_owner: str | None = None  # categories: clear and re-detect this owner
    slug: str | None = None  # tags: only this skill


class BackfillSummary(BaseModel):
    applied: bool
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    lines: list[str] = []


class BatchImportSummary(BaseModel):
    applied: bool
    parsed: int = 0
    existing: int = 0
    missing: int = 0
    imported: int = 0
    failed: int = 0
    skipped: list[str] = []  # "<name> (<reason>)"
