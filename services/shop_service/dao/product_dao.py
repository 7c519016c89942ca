"""Product persistence, including category links and the stock row."""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.datetime_utils import utc_now
from libs.db.gateway import Database
from services.shop_service.dao.category_dao import like_pattern, map_category
from services.shop_service.domain import Category, Product
from services.shop_service.models import (
    CategoryModel,
    InventoryModel,
    ProductCategoryModel,
    ProductModel,
)
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql import Select

products = ProductModel.__table__
categories = CategoryModel.__table__
products_categories = ProductCategoryModel.__table__
inventory = InventoryModel.__table__

# Stock row created alongside every new product
INITIAL_QUANTITY = 0
INITIAL_RESERVED = 0
INITIAL_REORDER_LEVEL = 10


def map_product(row: RowMapping) -> Product:
    return Product(
        product_id=row["product_id"],
        name=row["name"],
        description=row["description"],
        price=row["price"],
        sku=row["sku"],
        weight=row["weight"],
        dimensions=row["dimensions"],
        brand=row["brand"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        is_active=row["is_active"],
    )


def _product_values(product: Product) -> dict:
    return {
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "sku": product.sku,
        "weight": product.weight,
        "dimensions": product.dimensions,
        "brand": product.brand,
        "is_active": product.is_active,
    }


class ProductDAO:
    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------------
    # Reads (categories are always attached)
    # ------------------------------------------------------------------

    async def _load(self, stmt: Select) -> list[Product]:
        found = await self.db.query_many(stmt, map_row=map_product)
        return await self._attach_categories(found)

    async def _attach_categories(self, found: list[Product]) -> list[Product]:
        if not found:
            return found
        stmt = (
            select(products_categories.c.product_id, *categories.c)
            .join(
                categories,
                categories.c.category_id == products_categories.c.category_id,
            )
            .where(
                products_categories.c.product_id.in_([p.product_id for p in found])
            )
            .order_by(categories.c.name, categories.c.category_id)
        )
        links = await self.db.query_many(
            stmt, map_row=lambda row: (row["product_id"], map_category(row))
        )
        by_product: dict[int, list[Category]] = defaultdict(list)
        for product_id, category in links:
            by_product[product_id].append(category)
        return [
            p.model_copy(update={"categories": by_product.get(p.product_id, [])})
            for p in found
        ]

    async def find_by_id(self, product_id: int) -> Optional[Product]:
        found = await self._load(
            select(products).where(products.c.product_id == product_id)
        )
        return found[0] if found else None

    async def find_all_active(self) -> list[Product]:
        """Active products, newest first."""
        return await self._load(
            select(products)
            .where(products.c.is_active.is_(True))
            .order_by(products.c.created_at.desc(), products.c.product_id.desc())
        )

    async def find_by_name(self, name: str) -> list[Product]:
        """Active products whose name contains ``name``, ignoring case."""
        return await self._load(
            select(products)
            .where(
                products.c.name.ilike(like_pattern(name), escape="\\"),
                products.c.is_active.is_(True),
            )
            .order_by(products.c.name, products.c.product_id)
        )

    async def find_by_category(self, category_id: int) -> list[Product]:
        return await self._load(
            select(products)
            .join(
                products_categories,
                products_categories.c.product_id == products.c.product_id,
            )
            .where(
                products_categories.c.category_id == category_id,
                products.c.is_active.is_(True),
            )
            .order_by(products.c.name, products.c.product_id)
        )

    async def find_by_price_range(
        self, min_price: Optional[Decimal], max_price: Optional[Decimal]
    ) -> list[Product]:
        """Active products priced within [min_price, max_price].

        Both bounds are inclusive; a None bound is open.
        """
        stmt = select(products).where(products.c.is_active.is_(True))
        if min_price is not None:
            stmt = stmt.where(products.c.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(products.c.price <= max_price)
        return await self._load(
            stmt.order_by(products.c.price, products.c.product_id)
        )

    async def categories_for_product(self, product_id: int) -> list[Category]:
        stmt = (
            select(categories)
            .join(
                products_categories,
                products_categories.c.category_id == categories.c.category_id,
            )
            .where(products_categories.c.product_id == product_id)
            .order_by(categories.c.name)
        )
        return await self.db.query_many(stmt, map_row=map_category)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self, product: Product, category_ids: Optional[Iterable[int]] = None
    ) -> int:
        """Insert a product with its stock row and category links."""
        if category_ids is None:
            category_ids = product.category_ids
        now = utc_now()
        async with self.db.transaction() as tx:
            product_id = await tx.execute_insert(
                insert(products).values(
                    **_product_values(product), created_at=now, updated_at=now
                )
            )
            await tx.execute_insert(
                insert(inventory).values(
                    product_id=product_id,
                    quantity_available=INITIAL_QUANTITY,
                    reserved_quantity=INITIAL_RESERVED,
                    reorder_level=INITIAL_REORDER_LEVEL,
                    last_updated=now,
                )
            )
            await self._link_categories(tx, product_id, category_ids)
        return product_id

    async def update(
        self, product: Product, category_ids: Optional[Iterable[int]] = None
    ) -> int:
        """Update product columns; replace category links when ids are given."""
        async with self.db.transaction() as tx:
            rows = await tx.execute_update(
                update(products)
                .where(products.c.product_id == product.product_id)
                .values(**_product_values(product), updated_at=utc_now())
            )
            if rows and category_ids is not None:
                await tx.execute_update(
                    delete(products_categories).where(
                        products_categories.c.product_id == product.product_id
                    )
                )
                await self._link_categories(tx, product.product_id, category_ids)
        return rows

    async def delete(self, product_id: int) -> int:
        """Delete a product together with its category links and stock row."""
        async with self.db.transaction() as tx:
            await tx.execute_update(
                delete(products_categories).where(
                    products_categories.c.product_id == product_id
                )
            )
            await tx.execute_update(
                delete(inventory).where(inventory.c.product_id == product_id)
            )
            return await tx.execute_update(
                delete(products).where(products.c.product_id == product_id)
            )

    @staticmethod
    async def _link_categories(
        tx: Database, product_id: int, category_ids: Iterable[int]
    ) -> None:
        for category_id in dict.fromkeys(category_ids):
            await tx.execute_insert(
                insert(products_categories).values(
                    product_id=product_id, category_id=category_id
                )
            )
