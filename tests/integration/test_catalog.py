"""Integration tests for product, category and inventory persistence."""

from decimal import Decimal

import pytest
from libs.common.errors import InvariantError, NotFoundError
from services.shop_service.dao import CategoryDAO, InventoryDAO, ProductDAO
from services.shop_service.services import category_service
from tests.factories import CategoryFactory, ProductFactory, stocked_product

# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_product_round_trip_with_categories(db):
    books = await CategoryDAO(db).create(CategoryFactory.create(name="Books"))
    art = await CategoryDAO(db).create(CategoryFactory.create(name="Art"))
    product_id = await ProductDAO(db).create(
        ProductFactory.create(name="Atlas", price=Decimal("42.50")), [books, art]
    )

    product = await ProductDAO(db).find_by_id(product_id)
    assert product.name == "Atlas"
    assert product.price == Decimal("42.50")
    assert product.created_at is not None
    assert [c.name for c in product.categories] == ["Art", "Books"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_new_product_gets_empty_stock_row(db):
    product_id = await ProductDAO(db).create(ProductFactory.create())
    stock = await InventoryDAO(db).find_by_product(product_id)
    assert stock.quantity_available == 0
    assert stock.reserved_quantity == 0
    assert stock.reorder_level == 10


@pytest.mark.asyncio
@pytest.mark.integration
async def test_price_range_is_inclusive(db):
    dao = ProductDAO(db)
    for price in ("5.00", "10.00", "20.00", "20.01"):
        await dao.create(ProductFactory.create(name=f"P{price}", price=Decimal(price)))

    found = await dao.find_by_price_range(Decimal("10.00"), Decimal("20.00"))
    assert [p.price for p in found] == [Decimal("10.00"), Decimal("20.00")]

    cheap = await dao.find_by_price_range(None, Decimal("5.00"))
    assert [p.name for p in cheap] == ["P5.00"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inactive_products_hidden_from_listings(db):
    dao = ProductDAO(db)
    await dao.create(ProductFactory.create(name="Visible Lamp"))
    hidden = await dao.create(ProductFactory.create(name="Hidden Lamp", is_active=False))

    assert [p.name for p in await dao.find_all_active()] == ["Visible Lamp"]
    assert [p.name for p in await dao.find_by_name("lamp")] == ["Visible Lamp"]
    # Direct lookups still see it
    assert (await dao.find_by_id(hidden)).is_active is False


@pytest.mark.asyncio
@pytest.mark.integration
async def test_name_search_escapes_wildcards(db):
    dao = ProductDAO(db)
    await dao.create(ProductFactory.create(name="100% Cotton Shirt"))
    await dao.create(ProductFactory.create(name="1000 Piece Puzzle"))
    assert [p.name for p in await dao.find_by_name("100%")] == ["100% Cotton Shirt"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_find_by_category(db):
    toys = await CategoryDAO(db).create(CategoryFactory.create(name="Toys"))
    dao = ProductDAO(db)
    in_toys = await dao.create(ProductFactory.create(), [toys])
    await dao.create(ProductFactory.create())

    assert [p.product_id for p in await dao.find_by_category(toys)] == [in_toys]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_replaces_category_links(db):
    a = await CategoryDAO(db).create(CategoryFactory.create(name="A"))
    b = await CategoryDAO(db).create(CategoryFactory.create(name="B"))
    dao = ProductDAO(db)
    product_id = await dao.create(ProductFactory.create(), [a])

    product = await dao.find_by_id(product_id)
    await dao.update(product.model_copy(update={"price": Decimal("1.00")}), [b])

    updated = await dao.find_by_id(product_id)
    assert updated.price == Decimal("1.00")
    assert updated.category_ids == [b]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_product_removes_stock_and_links(db):
    cat = await CategoryDAO(db).create(CategoryFactory.create())
    product_id = await stocked_product(db, stock=3, category_ids=[cat])

    assert await ProductDAO(db).delete(product_id) == 1
    assert await ProductDAO(db).find_by_id(product_id) is None
    assert await InventoryDAO(db).find_by_product(product_id) is None
    assert await ProductDAO(db).delete(product_id) == 0


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reserve_release_and_fulfil(db):
    product_id = await stocked_product(db, stock=5)
    stock = InventoryDAO(db)

    assert await stock.reserve(product_id, 4) is True
    assert await stock.reserve(product_id, 2) is False
    assert (await stock.find_by_product(product_id)).reserved_quantity == 4

    await stock.release(product_id, 1)
    after = await stock.fulfill(product_id, 3)
    assert after.quantity_available == 2
    assert after.reserved_quantity == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_stock_for_unknown_product(db):
    with pytest.raises(NotFoundError, match="Inventory not found"):
        await InventoryDAO(db).increase(999, 1)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_low_stock_report(db):
    low = await stocked_product(db, stock=10)
    await stocked_product(db, stock=50)
    await InventoryDAO(db).reserve(low, 2)

    rows = await InventoryDAO(db).find_below_reorder()
    assert [r.product_id for r in rows] == [low]
    assert rows[0].available_for_sale == 8


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_category_with_missing_parent(db):
    with pytest.raises(NotFoundError, match="Parent category not found"):
        await category_service.create_category(
            db, CategoryFactory.create(parent_category_id=77)
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_category_cycle_rejected(db):
    root = await category_service.create_category(db, CategoryFactory.create(name="Root"))
    child = await category_service.create_category(
        db, CategoryFactory.create(name="Child", parent_category_id=root)
    )
    root_category = await CategoryDAO(db).find_by_id(root)

    with pytest.raises(InvariantError, match="cycle"):
        await category_service.update_category(
            db, root_category.model_copy(update={"parent_category_id": child})
        )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_category_orphans_children_and_unlinks_products(db):
    parent = await category_service.create_category(db, CategoryFactory.create())
    child = await category_service.create_category(
        db, CategoryFactory.create(parent_category_id=parent)
    )
    product_id = await ProductDAO(db).create(ProductFactory.create(), [parent])

    await category_service.delete_category(db, parent)

    assert (await CategoryDAO(db).find_by_id(child)).is_root
    assert (await ProductDAO(db).find_by_id(product_id)).categories == []
    with pytest.raises(NotFoundError):
        await category_service.delete_category(db, parent)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_category_name_search(db):
    await CategoryDAO(db).create(CategoryFactory.create(name="Garden Tools"))
    await CategoryDAO(db).create(CategoryFactory.create(name="Kitchen"))
    found = await CategoryDAO(db).find_by_name("garden")
    assert [c.name for c in found] == ["Garden Tools"]
