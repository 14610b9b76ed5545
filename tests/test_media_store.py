"""Tests for retrieving ordered category media."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from portfolio_site.gallery.store import MediaItemStore, STATUS_EMPTY, STATUS_ERROR, STATUS_OK
from factories import make_category, make_media


@pytest.mark.asyncio
async def test_fetch_orders_by_order_index_then_insertion(seed, session_factory):
    (category,) = await seed(make_category())
    await seed(
        make_media(category.id, media_url="u/late", order_index=2),
        make_media(category.id, media_url="u/first-tie", order_index=1),
        make_media(category.id, media_url="u/second-tie", order_index=1),
        make_media(category.id, media_url="u/early", order_index=0),
    )

    async with session_factory() as session:
        result = await MediaItemStore(session).fetch(category.id)

    assert result.status == STATUS_OK
    assert result.ok
    assert [item.media_url for item in result.items] == ["u/early", "u/first-tie", "u/second-tie", "u/late"]


@pytest.mark.asyncio
async def test_fetch_only_returns_items_of_that_category(seed, session_factory):
    first, second = await seed(make_category(), make_category(slug="murals"))
    await seed(make_media(first.id, media_url="mine"), make_media(second.id, media_url="theirs"))

    async with session_factory() as session:
        result = await MediaItemStore(session).fetch(first.id)

    assert [item.media_url for item in result.items] == ["mine"]


@pytest.mark.asyncio
async def test_category_without_items_is_empty(seed, session_factory):
    (category,) = await seed(make_category())

    async with session_factory() as session:
        result = await MediaItemStore(session).fetch(category.id)

    assert result.status == STATUS_EMPTY
    assert result.items == []
    assert result.error is None


@pytest.mark.asyncio
async def test_unknown_category_is_empty(session_factory):
    async with session_factory() as session:
        result = await MediaItemStore(session).fetch(999)

    assert result.status == STATUS_EMPTY


@pytest.mark.asyncio
async def test_database_failure_is_an_error_state():
    session = MagicMock()
    session.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")))

    result = await MediaItemStore(session).fetch(1)

    assert result.status == STATUS_ERROR
    assert result.items == []
    assert result.error == "Failed to load media items"
    session.execute.assert_awaited_once()


@pytest.mark.asyncio
async def test_connection_failure_is_an_error_state():
    session = MagicMock()
    session.execute = AsyncMock(side_effect=ConnectionRefusedError("connection refused"))

    result = await MediaItemStore(session).fetch(1)

    assert result.status == STATUS_ERROR
    assert result.error == "Failed to load media items"
