"""Tests for schema creation on the SQLite fallback."""

import pytest
from sqlalchemy import select

from portfolio_site.database import create_schema
from portfolio_site.models import SiteSection


async def _section_keys(engine):
    async with engine.connect() as conn:
        result = await conn.execute(select(SiteSection.key).order_by(SiteSection.order_index))
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_schema_seeds_sections(engine):
    await create_schema(engine)

    assert await _section_keys(engine) == ["about", "formats", "prices", "why-me", "process", "contacts"]


@pytest.mark.asyncio
async def test_create_schema_is_repeatable(engine, seed):
    await seed(SiteSection(key="about", order_index=0, title_en="About me"))

    await create_schema(engine)
    await create_schema(engine)

    keys = await _section_keys(engine)
    assert len(keys) == 6
    assert sorted(keys) == sorted(set(keys))


@pytest.mark.asyncio
async def test_seeded_sections_are_served(engine, client):
    await create_schema(engine)

    response = await client.get("/api/sections", params={"locale": "en"})

    assert [section["key"] for section in response.json()] == [
        "about", "formats", "prices", "why-me", "process", "contacts"
    ]
