"""Category persistence."""

from typing import Iterable, Optional

from libs.common.datetime_utils import utc_now
from libs.db.gateway import Database
from services.shop_service.domain import Category
from services.shop_service.models import CategoryModel, ProductCategoryModel
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping

categories = CategoryModel.__table__
products_categories = ProductCategoryModel.__table__


def map_category(row: RowMapping) -> Category:
    return Category(
        category_id=row["category_id"],
        name=row["name"],
        description=row["description"],
        parent_category_id=row["parent_category_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def like_pattern(term: str) -> str:
    """Substring LIKE pattern with wildcards in ``term`` escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class CategoryDAO:
    def __init__(self, db: Database):
        self.db = db

    async def find_by_id(self, category_id: int) -> Optional[Category]:
        stmt = select(categories).where(categories.c.category_id == category_id)
        return await self.db.query_one(stmt, map_row=map_category)

    async def find_all(self) -> list[Category]:
        stmt = select(categories).order_by(categories.c.name, categories.c.category_id)
        return await self.db.query_many(stmt, map_row=map_category)

    async def find_by_name(self, name: str) -> list[Category]:
        stmt = (
            select(categories)
            .where(categories.c.name.ilike(like_pattern(name), escape="\\"))
            .order_by(categories.c.name)
        )
        return await self.db.query_many(stmt, map_row=map_category)

    async def find_missing(self, category_ids: Iterable[int]) -> set[int]:
        """Return the ids from ``category_ids`` that have no category row."""
        wanted = set(category_ids)
        if not wanted:
            return set()
        stmt = select(categories.c.category_id).where(
            categories.c.category_id.in_(wanted)
        )
        found = await self.db.query_many(stmt, map_row=lambda row: row["category_id"])
        return wanted - set(found)

    async def ancestor_ids(self, category_id: int) -> list[int]:
        """Walk parent links upward from ``category_id``, nearest first."""
        ancestors: list[int] = []
        current = await self.find_by_id(category_id)
        while current is not None and current.parent_category_id is not None:
            if current.parent_category_id in ancestors:
                break
            ancestors.append(current.parent_category_id)
            current = await self.find_by_id(current.parent_category_id)
        return ancestors

    async def create(self, category: Category) -> int:
        now = utc_now()
        stmt = insert(categories).values(
            name=category.name,
            description=category.description,
            parent_category_id=category.parent_category_id,
            created_at=now,
            updated_at=now,
        )
        return await self.db.execute_insert(stmt)

    async def update(self, category: Category) -> int:
        stmt = (
            update(categories)
            .where(categories.c.category_id == category.category_id)
            .values(
                name=category.name,
                description=category.description,
                parent_category_id=category.parent_category_id,
                updated_at=utc_now(),
            )
        )
        return await self.db.execute_update(stmt)

    async def delete(self, category_id: int) -> int:
        """Delete a category, unlinking its products and orphaning its children."""
        async with self.db.transaction() as tx:
            await tx.execute_update(
                delete(products_categories).where(
                    products_categories.c.category_id == category_id
                )
            )
            await tx.execute_update(
                update(categories)
                .where(categories.c.parent_category_id == category_id)
                .values(parent_category_id=None, updated_at=utc_now())
            )
            return await tx.execute_update(
                delete(categories).where(categories.c.category_id == category_id)
            )
