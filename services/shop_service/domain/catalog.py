"""Catalog entities: categories and products."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.errors import InvariantError
from pydantic import Field, field_validator, model_validator
from services.shop_service.domain.base import DomainModel, Money


class Category(DomainModel):
    category_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    parent_category_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def not_own_parent(self) -> "Category":
        if (
            self.category_id is not None
            and self.parent_category_id == self.category_id
        ):
            raise InvariantError("Category cannot be its own parent")
        return self

    @property
    def is_root(self) -> bool:
        return self.parent_category_id is None


class Product(DomainModel):
    product_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    price: Money
    sku: Optional[str] = None
    weight: Optional[Money] = None
    dimensions: Optional[str] = None
    brand: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_active: bool = True
    categories: list[Category] = Field(default_factory=list)

    @field_validator("price")
    @classmethod
    def price_not_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise InvariantError("Price cannot be negative")
        return v

    @field_validator("weight")
    @classmethod
    def weight_not_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise InvariantError("Weight cannot be negative")
        return v

    @property
    def category_ids(self) -> list[int]:
        return [c.category_id for c in self.categories if c.category_id is not None]
