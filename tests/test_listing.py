"""Listing query builder tests."""

from datetime import datetime, timedelta

import pytest

from app.models import ListingClient
from app.services import catalog_service, skill_service
from app.services.listing import ListingFilters, build_query, total_pages


def test_total_pages():
    assert total_pages(25, 10) == 3
    assert total_pages(20, 10) == 2
    assert total_pages(0, 10) == 0
    assert total_pages(1, 20) == 1


def test_page_below_one_is_first_page():
    query = build_query(page=0, page_size=10)
    assert query.page == 1
    assert query.offset == 0
    assert build_query(page=-3, page_size=10).offset == 0
    assert build_query(page=3, page_size=10).offset == 20


@pytest.mark.asyncio
async def test_pagination_contract(db_session, make_skill):
    for i in range(25):
        await make_skill(f"skill-{i:02d}", weekly_installs=i)

    items, total, page, pages = await skill_service.search_skills(db_session, page=3, page_size=10)
    assert (len(items), total, page, pages) == (5, 25, 3, 3)

    items, total, page, pages = await skill_service.search_skills(db_session, page=4, page_size=10)
    assert items == []
    assert total == 25


@pytest.mark.asyncio
async def test_popular_sort_orders_by_installs(db_session, make_skill):
    await make_skill("low", weekly_installs=1)
    await make_skill("high", weekly_installs=50)
    await make_skill("mid", weekly_installs=10)

    items, *_ = await skill_service.search_skills(db_session, sort="popular")
    assert [s.slug for s in items] == ["high", "mid", "low"]

    # trending and unknown sort values rank the same way
    trending, *_ = await skill_service.search_skills(db_session, sort="trending")
    bogus, *_ = await skill_service.search_skills(db_session, sort="bogus")
    assert [s.slug for s in trending] == [s.slug for s in bogus] == ["high", "mid", "low"]


@pytest.mark.asyncio
async def test_recent_sort_orders_by_created_at(db_session, make_skill):
    now = datetime(2026, 1, 1)
    await make_skill("oldest", created_at=now - timedelta(days=2), weekly_installs=99)
    await make_skill("newest", created_at=now)
    await make_skill("middle", created_at=now - timedelta(days=1))

    items, *_ = await skill_service.search_skills(db_session, sort="recent")
    assert [s.slug for s in items] == ["newest", "middle", "oldest"]


@pytest.mark.asyncio
async def test_drafts_are_hidden_and_null_status_is_published(db_session, make_skill):
    await make_skill("live")
    await make_skill("legacy", status=None)
    await make_skill("draft", status="draft")

    items, total, *_ = await skill_service.search_skills(db_session)
    assert {s.slug for s in items} == {"live", "legacy"}
    assert total == 2


@pytest.mark.asyncio
async def test_text_filter_matches_name_or_description(db_session, make_skill):
    await make_skill("pdf-tools", name="PDF Tools", description="Split and merge")
    await make_skill("merger", name="Merger", description="Combine PDF files")
    await make_skill("other", name="Other", description="Unrelated")

    items, *_ = await skill_service.search_skills(db_session, ListingFilters(text="pdf"))
    assert {s.slug for s in items} == {"pdf-tools", "merger"}


@pytest.mark.asyncio
async def test_text_filter_escapes_wildcards(db_session, make_skill):
    await make_skill("percent", description="100% coverage")
    await make_skill("plain", description="1000 coverage")

    items, *_ = await skill_service.search_skills(db_session, ListingFilters(text="100%"))
    assert [s.slug for s in items] == ["percent"]


@pytest.mark.asyncio
async def test_category_and_artifact_filters(db_session, make_skill):
    testing = await catalog_service.get_category_by_slug(db_session, "testing")
    await make_skill("tester", category_id=testing.id, artifact_type="skill_pack")
    await make_skill("server", category_id=testing.id, artifact_type="mcp_server")
    await make_skill("uncategorized", artifact_type="mcp_server")

    items, *_ = await skill_service.search_skills(db_session, ListingFilters(category="testing"))
    assert {s.slug for s in items} == {"tester", "server"}

    items, *_ = await skill_service.search_skills(
        db_session, ListingFilters(category="testing", artifact_type="mcp_server")
    )
    assert [s.slug for s in items] == ["server"]


@pytest.mark.asyncio
async def test_client_filter(db_session, make_skill):
    cursor = await catalog_service.get_client_by_slug(db_session, "cursor")
    linked = await make_skill("linked")
    await make_skill("unlinked")
    db_session.add(ListingClient(skill_id=linked.id, client_id=cursor.id, is_primary=True))
    await db_session.commit()

    items, *_ = await skill_service.search_skills(db_session, ListingFilters(client="cursor"))
    assert [s.slug for s in items] == ["linked"]


@pytest.mark.asyncio
async def test_tags_filter_is_any_of(db_session, make_skill):
    await make_skill("py", tags=["python", "cli"])
    await make_skill("js", tags=["javascript"])
    await make_skill("none")

    items, *_ = await skill_service.search_skills(db_session, ListingFilters(tags=("python", "javascript")))
    assert {s.slug for s in items} == {"py", "js"}

    items, *_ = await skill_service.search_skills(db_session, ListingFilters(tags=("cli",)))
    assert [s.slug for s in items] == ["py"]
