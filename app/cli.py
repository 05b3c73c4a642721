"""mdskills command line — serve the API and run the admin import/backfill jobs.

Every write command is a dry run unless ``--apply`` is given.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer

from app.config import settings
from app.database import async_session, init_db
from app.schemas.admin import BackfillSummary, ImportRequest
from app.schemas.skill import ArtifactType
from app.services import backfill_service, skill_service
from app.services.github_service import GitHubClient
from app.services.import_service import SkillImporter, batch_import, parse_list_entries
from app.services.seed_service import seed_reference_data
from app.utils.github import parse_github_url

app = typer.Typer(help="mdskills marketplace administration")
logger = logging.getLogger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _mode_banner(apply: bool) -> None:
    typer.echo("APPLY MODE - will update database" if apply else "DRY RUN - pass --apply to write changes")


def _print_summary(summary: BackfillSummary, noun: str) -> None:
    for line in summary.lines:
        typer.echo(f"  {line}")
    verb = "Updated" if summary.applied else "Would update"
    typer.echo(f"\n{verb}: {summary.updated} {noun}  (processed {summary.processed}, unchanged {summary.skipped})")


async def _prepare() -> None:
    await init_db()
    async with async_session() as db:
        await seed_reference_data(db)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run("app.main:app", host=host, port=port, reload=reload)


@app.command()
def seed() -> None:
    """Create tables and insert missing categories and clients."""

    async def run() -> dict[str, list[str]]:
        await init_db()
        async with async_session() as db:
            return await seed_reference_data(db)

    result = asyncio.run(run())
    typer.echo(f"Categories created: {len(result['categories'])}")
    typer.echo(f"Clients created: {len(result['clients'])}")


@app.command("import")
def import_url(
    url: str = typer.Argument(..., help="GitHub URL or owner/repo"),
    slug: Optional[str] = typer.Option(None, help="Override the generated slug"),
    name: Optional[str] = typer.Option(None, help="Override the display name"),
    category: Optional[str] = typer.Option(None, help="Category slug"),
    platforms: Optional[str] = typer.Option(None, help="Comma-separated client slugs"),
    artifact_type: Optional[ArtifactType] = typer.Option(None, "--type", help="Artifact type"),
    format_standard: Optional[str] = typer.Option(None, "--format", help="Format standard"),
    apply: bool = typer.Option(False, "--apply", help="Write to the database"),
) -> None:
    """Import a single skill from GitHub."""
    _mode_banner(apply)
    request = ImportRequest(
        url=url, slug=slug, name=name, category=category, platforms=platforms,
        artifact_type=artifact_type, format_standard=format_standard, dry_run=not apply,
    )

    async def run():
        await _prepare()
        async with GitHubClient() as github, async_session() as db:
            return await SkillImporter(github).import_skill(db, request)

    result = asyncio.run(run())
    for line in result.logs:
        typer.echo(f"  {line}")
    if not result.success:
        typer.echo(f"Import failed: {result.error}", err=True)
        raise typer.Exit(code=1)
    if result.status == "dry_run":
        typer.echo(json.dumps(result.derived, indent=2))


async def _read_list(github: GitHubClient, source: str) -> str | None:
    if source.startswith(("http://", "https://")):
        ref = parse_github_url(source)
        if ref:
            return await github.fetch_readme(ref.owner, ref.repo, ref.subpath)
        return await github.fetch_text(source)
    path = Path(source)
    return path.read_text(encoding="utf-8") if path.is_file() else None


@app.command("import-list")
def import_list(
    source: str = typer.Argument(..., help="Awesome-list repo URL, raw README URL or local file"),
    limit: Optional[int] = typer.Option(None, help="Import at most N new entries"),
    delay: Optional[float] = typer.Option(None, help="Seconds between imports"),
    artifact_type: Optional[ArtifactType] = typer.Option(None, "--type", help="Artifact type for every entry"),
    apply: bool = typer.Option(False, "--apply", help="Write to the database"),
) -> None:
    """Batch-import the GitHub entries of an awesome-list README."""
    _mode_banner(apply)

    async def run():
        await _prepare()
        async with GitHubClient() as github, async_session() as db:
            readme = await _read_list(github, source)
            if readme is None:
                return None
            entries = parse_list_entries(readme)
            typer.echo(f"Parsed {len(entries)} entries")
            return await batch_import(
                db, SkillImporter(github), entries,
                apply=apply, limit=limit, delay=delay, artifact_type=artifact_type,
            )

    summary = asyncio.run(run())
    if summary is None:
        typer.echo(f"Could not read list: {source}", err=True)
        raise typer.Exit(code=1)
    for reason in summary.skipped:
        typer.echo(f"  skipped: {reason}")
    typer.echo(f"\nAlready in DB: {summary.existing}")
    typer.echo(f"Missing: {summary.missing}")
    typer.echo(f"{'Imported' if apply else 'Would import'}: {summary.imported}")
    typer.echo(f"Failed: {summary.failed}")


@app.command("backfill-categories")
def backfill_categories(
    reset_owner: Optional[str] = typer.Option(None, help="Clear and re-detect all skills of this owner"),
    apply: bool = typer.Option(False, "--apply", help="Write to the database"),
) -> None:
    """Assign categories to skills that have none."""
    _mode_banner(apply)

    async def run() -> BackfillSummary:
        await _prepare()
        async with async_session() as db:
            return await backfill_service.backfill_categories(db, apply=apply, reset_owner=reset_owner)

    _print_summary(asyncio.run(run()), "skills")


@app.command("backfill-clients")
def backfill_clients(
    apply: bool = typer.Option(False, "--apply", help="Write to the database"),
) -> None:
    """Add missing skill/client links."""
    _mode_banner(apply)

    async def run() -> BackfillSummary:
        await _prepare()
        async with async_session() as db:
            return await backfill_service.backfill_clients(db, apply=apply)

    _print_summary(asyncio.run(run()), "client links")


@app.command("backfill-tags")
def backfill_tags(
    slug: Optional[str] = typer.Option(None, help="Only this skill"),
    apply: bool = typer.Option(False, "--apply", help="Write to the database"),
) -> None:
    """Add tags extracted from repo name, description and README."""
    _mode_banner(apply)

    async def run() -> BackfillSummary:
        await _prepare()
        async with async_session() as db:
            return await backfill_service.backfill_tags(db, apply=apply, slug=slug)

    _print_summary(asyncio.run(run()), "skills")


@app.command("clear-skills")
def clear_skills(
    yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt"),
) -> None:
    """Delete every skill and its links, comments and votes."""
    if not yes:
        typer.confirm("Delete ALL skills?", abort=True)

    async def run() -> int:
        await init_db()
        async with async_session() as db:
            return await skill_service.clear_skills(db)

    typer.echo(f"Deleted {asyncio.run(run())} skills")


if __name__ == "__main__":
    app()
