"""Inventory persistence.

Stock mutations lock the product's inventory row (``SELECT ... FOR UPDATE``)
inside a transaction, apply the domain operation and write the row back, so
concurrent reservations cannot oversell.
"""

from typing import Callable, Optional, TypeVar

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFoundError
from libs.db.gateway import Database
from services.shop_service.domain import Inventory
from services.shop_service.models import InventoryModel
from sqlalchemy import select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql import Select

inventory = InventoryModel.__table__

T = TypeVar("T")


def locked_stock(product_id: int) -> Select:
    """Select a product's inventory row, locking it until the transaction ends."""
    return (
        select(inventory)
        .where(inventory.c.product_id == product_id)
        .with_for_update()
    )


def map_inventory(row: RowMapping) -> Inventory:
    return Inventory(
        inventory_id=row["inventory_id"],
        product_id=row["product_id"],
        quantity_available=row["quantity_available"],
        reserved_quantity=row["reserved_quantity"],
        reorder_level=row["reorder_level"],
        last_updated=row["last_updated"],
    )


class InventoryDAO:
    def __init__(self, db: Database):
        self.db = db

    async def find_by_product(self, product_id: int) -> Optional[Inventory]:
        stmt = select(inventory).where(inventory.c.product_id == product_id)
        return await self.db.query_one(stmt, map_row=map_inventory)

    async def find_below_reorder(self) -> list[Inventory]:
        """Rows whose free stock is at or below the reorder level."""
        stmt = (
            select(inventory)
            .where(
                inventory.c.quantity_available - inventory.c.reserved_quantity
                <= inventory.c.reorder_level
            )
            .order_by(inventory.c.product_id)
        )
        return await self.db.query_many(stmt, map_row=map_inventory)

    async def _locked(self, tx: Database, product_id: int) -> Inventory:
        stock = await tx.query_one(locked_stock(product_id), map_row=map_inventory)
        if stock is None:
            raise NotFoundError("Inventory not found")
        return stock

    async def _save(self, tx: Database, stock: Inventory) -> None:
        await tx.execute_update(
            update(inventory)
            .where(inventory.c.inventory_id == stock.inventory_id)
            .values(
                quantity_available=stock.quantity_available,
                reserved_quantity=stock.reserved_quantity,
                reorder_level=stock.reorder_level,
                last_updated=utc_now(),
            )
        )

    async def _mutate(
        self, product_id: int, operation: Callable[[Inventory], T]
    ) -> tuple[T, Inventory]:
        async with self.db.transaction() as tx:
            stock = await self._locked(tx, product_id)
            result = operation(stock)
            if result is not False:
                await self._save(tx, stock)
        return result, stock

    async def reserve(self, product_id: int, quantity: int) -> bool:
        """Hold stock for an order; False when too little is free."""
        reserved, _ = await self._mutate(
            product_id, lambda stock: stock.reserve(quantity)
        )
        return reserved

    async def release(self, product_id: int, quantity: int) -> Inventory:
        _, stock = await self._mutate(
            product_id, lambda stock: stock.release(quantity)
        )
        return stock

    async def increase(self, product_id: int, quantity: int) -> Inventory:
        _, stock = await self._mutate(
            product_id, lambda stock: stock.increase(quantity)
        )
        return stock

    async def restock(
        self, product_id: int, quantity: int, reorder_level: Optional[int] = None
    ) -> Inventory:
        """Add stock and optionally move the reorder level in one transaction."""

        def apply(stock: Inventory) -> None:
            stock.increase(quantity)
            if reorder_level is not None:
                stock.set_reorder_level(reorder_level)

        _, stock = await self._mutate(product_id, apply)
        return stock

    async def fulfill(self, product_id: int, quantity: int) -> Inventory:
        _, stock = await self._mutate(
            product_id, lambda stock: stock.fulfill(quantity)
        )
        return stock
