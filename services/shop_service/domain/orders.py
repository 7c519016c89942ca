"""Orders, order lines and the status transitions applied to them."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.errors import InvariantError
from pydantic import Field, computed_field, field_validator
from services.shop_service.domain.base import DomainModel, Money
from services.shop_service.models.enums import OrderStatus


class OrderItem(DomainModel):
    order_item_id: Optional[int] = None
    order_id: Optional[int] = None
    product_id: int
    quantity: int
    unit_price: Money

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v: int) -> int:
        if v <= 0:
            raise InvariantError("Quantity must be positive")
        return v

    @field_validator("unit_price")
    @classmethod
    def unit_price_not_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise InvariantError("Unit price cannot be negative")
        return v

    @computed_field(alias="totalPrice")
    @property
    def total_price(self) -> Money:
        return self.unit_price * self.quantity


class Order(DomainModel):
    """A customer order.

    ``total_amount`` and ``order_date`` are fixed at creation; status only
    moves along the transitions ``OrderStatus`` allows.
    """

    order_id: Optional[int] = None
    user_id: int
    order_status: OrderStatus = OrderStatus.PENDING
    total_amount: Money = Field(frozen=True)
    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    payment_method: Optional[str] = None
    order_date: datetime = Field(default_factory=utc_now, frozen=True)
    shipped_date: Optional[datetime] = None
    delivered_date: Optional[datetime] = None
    notes: Optional[str] = None
    items: list[OrderItem] = Field(default_factory=list)

    @field_validator("total_amount")
    @classmethod
    def total_not_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise InvariantError("Total amount cannot be negative")
        return v

    @classmethod
    def place(cls, *, user_id: int, items: list[OrderItem], **details) -> "Order":
        """Build a new PENDING order whose total is the sum of its lines."""
        total = sum((item.total_price for item in items), Decimal("0"))
        return cls(user_id=user_id, total_amount=total, items=items, **details)

    @computed_field(alias="totalItemCount")
    @property
    def total_item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def set_order_status(self, status: OrderStatus) -> None:
        if not self.order_status.can_transition_to(status):
            raise InvariantError(
                f"Cannot transition from {self.order_status.value} to {status.value}"
            )
        self.order_status = status
        if status == OrderStatus.SHIPPED and self.shipped_date is None:
            self.shipped_date = utc_now()
        elif status == OrderStatus.DELIVERED and self.delivered_date is None:
            self.delivered_date = utc_now()

    def advance_status(self) -> Optional[OrderStatus]:
        """Move to the next status in the happy path; None when there is none."""
        next_status = self.order_status.next_status
        if next_status is None:
            return None
        self.set_order_status(next_status)
        return next_status

    def cancel_order(self) -> bool:
        if self.order_status.is_final_state:
            return False
        self.set_order_status(OrderStatus.CANCELLED)
        return True

    def can_be_cancelled(self) -> bool:
        return self.order_status in (OrderStatus.PENDING, OrderStatus.CONFIRMED)
