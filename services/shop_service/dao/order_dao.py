"""Order persistence: orders own their items."""

from collections import defaultdict
from typing import Optional

from libs.db.gateway import Database
from services.shop_service.domain import Order, OrderItem
from services.shop_service.models import OrderItemModel, OrderModel, OrderStatus
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql import Select

orders = OrderModel.__table__
order_items = OrderItemModel.__table__


def select_order(order_id: int, *, for_update: bool = False) -> Select:
    stmt = select(orders).where(orders.c.order_id == order_id)
    return stmt.with_for_update() if for_update else stmt


def map_order_item(row: RowMapping) -> OrderItem:
    return OrderItem(
        order_item_id=row["order_item_id"],
        order_id=row["order_id"],
        product_id=row["product_id"],
        quantity=row["quantity"],
        unit_price=row["unit_price"],
    )


def map_order(row: RowMapping) -> Order:
    return Order(
        order_id=row["order_id"],
        user_id=row["user_id"],
        order_status=row["order_status"],
        total_amount=row["total_amount"],
        shipping_address=row["shipping_address"],
        billing_address=row["billing_address"],
        payment_method=row["payment_method"],
        order_date=row["order_date"],
        shipped_date=row["shipped_date"],
        delivered_date=row["delivered_date"],
        notes=row["notes"],
    )


class OrderDAO:
    def __init__(self, db: Database):
        self.db = db

    async def _load(self, stmt: Select) -> list[Order]:
        found = await self.db.query_many(stmt, map_row=map_order)
        if not found:
            return found
        items_stmt = (
            select(order_items)
            .where(order_items.c.order_id.in_([o.order_id for o in found]))
            .order_by(order_items.c.order_item_id)
        )
        items = await self.db.query_many(items_stmt, map_row=map_order_item)
        by_order: dict[int, list[OrderItem]] = defaultdict(list)
        for item in items:
            by_order[item.order_id].append(item)
        return [o.model_copy(update={"items": by_order.get(o.order_id, [])}) for o in found]

    async def find_by_id(self, order_id: int, *, for_update: bool = False) -> Optional[Order]:
        """Load one order with its items; ``for_update`` locks the order row."""
        found = await self._load(select_order(order_id, for_update=for_update))
        return found[0] if found else None

    async def find_by_user(self, user_id: int) -> list[Order]:
        return await self._load(
            select(orders)
            .where(orders.c.user_id == user_id)
            .order_by(orders.c.order_date.desc(), orders.c.order_id.desc())
        )

    async def find_all(self) -> list[Order]:
        return await self._load(
            select(orders).order_by(orders.c.order_date.desc(), orders.c.order_id.desc())
        )

    async def create(self, order: Order) -> int:
        """Insert an order and its items in one transaction; returns the id."""
        async with self.db.transaction() as tx:
            order_id = await tx.execute_insert(
                insert(orders).values(
                    user_id=order.user_id,
                    order_status=order.order_status,
                    total_amount=order.total_amount,
                    shipping_address=order.shipping_address,
                    billing_address=order.billing_address,
                    payment_method=order.payment_method,
                    order_date=order.order_date,
                    shipped_date=order.shipped_date,
                    delivered_date=order.delivered_date,
                    notes=order.notes,
                )
            )
            for item in order.items:
                await tx.execute_insert(
                    insert(order_items).values(
                        order_id=order_id,
                        product_id=item.product_id,
                        quantity=item.quantity,
                        unit_price=item.unit_price,
                    )
                )
        return order_id

    async def update_status(self, order: Order) -> int:
        stmt = (
            update(orders)
            .where(orders.c.order_id == order.order_id)
            .values(
                order_status=order.order_status,
                shipped_date=order.shipped_date,
                delivered_date=order.delivered_date,
            )
        )
        return await self.db.execute_update(stmt)

    async def delete(self, order_id: int) -> int:
        async with self.db.transaction() as tx:
            await tx.execute_update(
                delete(order_items).where(order_items.c.order_id == order_id)
            )
            return await tx.execute_update(
                delete(orders).where(orders.c.order_id == order_id)
            )

    async def has_purchased(self, user_id: int, product_id: int) -> bool:
        """True when the user has a non-cancelled order containing the product."""
        stmt = (
            select(order_items.c.order_item_id)
            .join(orders, orders.c.order_id == order_items.c.order_id)
            .where(
                orders.c.user_id == user_id,
                order_items.c.product_id == product_id,
                orders.c.order_status != OrderStatus.CANCELLED,
            )
            .limit(1)
        )
        found = await self.db.query_one(stmt, map_row=lambda row: True)
        return bool(found)
