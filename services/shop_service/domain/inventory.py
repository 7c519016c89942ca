"""Stock levels and the reservation arithmetic applied to them."""

from datetime import datetime
from typing import Optional

from libs.common.errors import InvariantError
from pydantic import ValidationInfo, computed_field, field_validator, model_validator
from services.shop_service.domain.base import DomainModel

_LABELS = {
    "quantity_available": "Quantity available",
    "reserved_quantity": "Reserved quantity",
    "reorder_level": "Reorder level",
}


class Inventory(DomainModel):
    """Stock for a single product.

    ``reserved_quantity`` is stock promised to open orders; it never exceeds
    ``quantity_available``.
    """

    inventory_id: Optional[int] = None
    product_id: int
    quantity_available: int = 0
    reserved_quantity: int = 0
    reorder_level: int = 10
    last_updated: Optional[datetime] = None

    @field_validator("quantity_available", "reserved_quantity", "reorder_level")
    @classmethod
    def not_negative(cls, v: int, info: ValidationInfo) -> int:
        if v < 0:
            raise InvariantError(f"{_LABELS[info.field_name]} cannot be negative")
        return v

    @model_validator(mode="after")
    def reserved_within_available(self) -> "Inventory":
        if self.reserved_quantity > self.quantity_available:
            raise InvariantError("Reserved quantity cannot exceed available quantity")
        return self

    @computed_field(alias="availableForSale")
    @property
    def available_for_sale(self) -> int:
        return max(0, self.quantity_available - self.reserved_quantity)

    @computed_field(alias="belowReorder")
    @property
    def below_reorder(self) -> bool:
        return self.available_for_sale <= self.reorder_level

    @computed_field(alias="totalStock")
    @property
    def total_stock(self) -> int:
        return self.quantity_available + self.reserved_quantity

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def reserve(self, quantity: int) -> bool:
        """Hold ``quantity`` units; False when not enough stock is free."""
        if quantity <= 0:
            raise InvariantError("Reservation quantity must be positive")
        if self.available_for_sale < quantity:
            return False
        self.reserved_quantity += quantity
        return True

    def release(self, quantity: int) -> None:
        """Return held units to sale, never dropping below zero."""
        if quantity <= 0:
            raise InvariantError("Release quantity must be positive")
        self.reserved_quantity = max(0, self.reserved_quantity - quantity)

    def increase(self, quantity: int) -> None:
        if quantity < 0:
            raise InvariantError("Amount to increase cannot be negative")
        self.quantity_available += quantity

    def fulfill(self, quantity: int) -> None:
        """Turn held units into a sale: both counters drop by ``quantity``."""
        if quantity <= 0:
            raise InvariantError("Fulfil quantity must be positive")
        if quantity > self.reserved_quantity:
            raise InvariantError("Cannot fulfil more than the reserved quantity")
        self.reserved_quantity -= quantity
        self.quantity_available -= quantity

    def set_reorder_level(self, level: int) -> None:
        if level < 0:
            raise InvariantError("Reorder level cannot be negative")
        self.reorder_level = level
