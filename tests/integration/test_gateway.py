"""Integration tests for the database gateway against SQLite."""

import pytest
from libs.common.errors import InfrastructureError, InvariantError
from services.shop_service.models import CategoryModel
from sqlalchemy import func, insert, select, text, update

categories = CategoryModel.__table__


async def _count(db) -> int:
    return await db.query_one(
        select(func.count().label("n")).select_from(categories),
        map_row=lambda row: row["n"],
    )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_insert_returns_generated_key_and_rows_map(db):
    first = await db.execute_insert(insert(categories).values(name="Books"))
    second = await db.execute_insert(insert(categories).values(name="Games"))
    assert second == first + 1

    names = await db.query_many(
        select(categories.c.name).order_by(categories.c.name),
        map_row=lambda row: row["name"],
    )
    assert names == ["Books", "Games"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_query_one_returns_none_when_empty(db):
    found = await db.query_one(
        select(categories).where(categories.c.category_id == 999),
        map_row=dict,
    )
    assert found is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_returns_affected_rows(db):
    await db.execute_insert(insert(categories).values(name="A"))
    await db.execute_insert(insert(categories).values(name="B"))
    rows = await db.execute_update(update(categories).values(description="x"))
    assert rows == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_transaction_commits(db):
    async with db.transaction() as tx:
        assert tx.in_transaction
        await tx.execute_insert(insert(categories).values(name="Kept"))
    assert await _count(db) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_transaction_rolls_back_on_error(db):
    """Nothing written inside a failed block survives."""
    with pytest.raises(InvariantError):
        async with db.transaction() as tx:
            await tx.execute_insert(insert(categories).values(name="Lost"))
            async with tx.transaction() as inner:
                assert inner is tx
            raise InvariantError("abort")
    assert await _count(db) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_driver_errors_become_infrastructure_errors(db):
    with pytest.raises(InfrastructureError) as exc_info:
        await db.query_many(text("SELECT * FROM missing_table"), map_row=dict)
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "Database operation failed"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_ping(db):
    assert await db.ping() is True
