"""Order placement and lifecycle, keeping inventory reservations in step.

Stock changes and the order row they belong to are written in one
transaction: a shortfall on any line rolls the whole order back.
"""

from typing import Iterable, Optional

from libs.common.errors import (
    ForbiddenError,
    InvariantError,
    NotFoundError,
    ValidationError,
)
from libs.common.logging import get_logger
from libs.db.gateway import Database
from services.shop_service.dao import InventoryDAO, OrderDAO, ProductDAO
from services.shop_service.domain import Order, OrderItem, User
from services.shop_service.models import OrderStatus

logger = get_logger(__name__)

# Statuses whose items still hold a stock reservation
RESERVING_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED)


def merge_lines(lines: Iterable[tuple[int, int]]) -> dict[int, int]:
    """Collapse repeated products into one quantity per product id."""
    merged: dict[int, int] = {}
    for product_id, quantity in lines:
        if quantity <= 0:
            raise InvariantError("Quantity must be positive")
        merged[product_id] = merged.get(product_id, 0) + quantity
    return merged


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


async def place_order(
    db: Database,
    *,
    user_id: int,
    lines: Iterable[tuple[int, int]],
    shipping_address: Optional[str] = None,
    billing_address: Optional[str] = None,
    payment_method: Optional[str] = None,
    notes: Optional[str] = None,
) -> Order:
    """Reserve stock for every line and record a PENDING order.

    Unit prices are captured from the current product rows.
    """
    merged = merge_lines(lines)
    if not merged:
        raise ValidationError("Order must contain at least one item")

    async with db.transaction() as tx:
        products = ProductDAO(tx)
        stock = InventoryDAO(tx)
        items: list[OrderItem] = []

        # Lock inventory rows in product order
        for product_id in sorted(merged):
            quantity = merged[product_id]
            product = await products.find_by_id(product_id)
            if product is None or not product.is_active:
                raise NotFoundError(f"Product not found: {product_id}")
            if not await stock.reserve(product_id, quantity):
                raise InvariantError(f"Insufficient stock for product {product_id}")
            items.append(
                OrderItem(
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=product.price,
                )
            )

        order = Order.place(
            user_id=user_id,
            items=items,
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
            notes=notes,
        )
        orders = OrderDAO(tx)
        order_id = await orders.create(order)
        created = await orders.find_by_id(order_id)

    logger.info(
        "Placed order %s for user %s (items=%d, total=%s)",
        order_id,
        user_id,
        created.total_item_count,
        created.total_amount,
    )
    return created


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_order(db: Database, order_id: int, *, user: User) -> Order:
    """Return an order visible to ``user`` (its owner, or any admin)."""
    order = await OrderDAO(db).find_by_id(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if order.user_id != user.user_id and not user.is_admin:
        raise ForbiddenError("Access to this order is not allowed")
    return order


async def orders_for_user(db: Database, user_id: int) -> list[Order]:
    return await OrderDAO(db).find_by_user(user_id)


async def all_orders(db: Database) -> list[Order]:
    return await OrderDAO(db).find_all()


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def advance_order(db: Database, order_id: int) -> Order:
    """Move an order to its next status; shipping consumes the reservation."""
    async with db.transaction() as tx:
        orders = OrderDAO(tx)
        order = await orders.find_by_id(order_id, for_update=True)
        if order is None:
            raise NotFoundError("Order not found")

        previous = order.order_status
        new_status = order.advance_status()
        if new_status is None:
            raise InvariantError(f"Order is {previous.value} and cannot advance")

        if new_status == OrderStatus.SHIPPED:
            stock = InventoryDAO(tx)
            for item in order.items:
                await stock.fulfill(item.product_id, item.quantity)

        await orders.update_status(order)

    logger.info("Order %s moved %s -> %s", order_id, previous.value, new_status.value)
    return order


async def cancel_order(db: Database, order_id: int, *, user: User) -> Order:
    """Cancel an order, returning reserved stock to sale.

    Customers may cancel their own orders until they ship; admins may cancel
    any order that is not yet delivered.
    """
    async with db.transaction() as tx:
        orders = OrderDAO(tx)
        order = await orders.find_by_id(order_id, for_update=True)
        if order is None:
            raise NotFoundError("Order not found")
        if order.user_id != user.user_id and not user.is_admin:
            raise ForbiddenError("Access to this order is not allowed")

        previous = order.order_status
        if not user.is_admin and not order.can_be_cancelled():
            raise InvariantError(f"Order is {previous.value} and cannot be cancelled")
        if not order.cancel_order():
            raise InvariantError(f"Order is {previous.value} and cannot be cancelled")

        if previous in RESERVING_STATUSES:
            stock = InventoryDAO(tx)
            for item in order.items:
                await stock.release(item.product_id, item.quantity)

        await orders.update_status(order)

    logger.info("Order %s cancelled (was %s)", order_id, previous.value)
    return order
