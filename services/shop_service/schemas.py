"""Request and response bodies for the Shop Service API.

Entities from ``services.shop_service.domain`` are returned directly; the
models here cover request payloads and the small envelope responses.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from services.shop_service.models.enums import UserType


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


# ============================================================================
# AUTH
# ============================================================================


class LoginRequest(ApiModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginUser(ApiModel):
    id: int
    username: str
    email: str
    first_name: str
    last_name: str
    user_type: UserType


class LoginResponse(ApiModel):
    token: str
    user: LoginUser


# ============================================================================
# CATALOG
# ============================================================================


class ProductBase(ApiModel):
    description: Optional[str] = None
    sku: Optional[str] = Field(None, max_length=100)
    weight: Optional[Decimal] = None
    dimensions: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)


class ProductCreate(ProductBase):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal
    is_active: bool = True
    category_ids: list[int] = Field(default_factory=list)


class ProductUpdate(ProductBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = None
    is_active: Optional[bool] = None
    category_ids: Optional[list[int]] = None


class CategoryCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    parent_category_id: Optional[int] = None


class CategoryUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    parent_category_id: Optional[int] = None


class RestockRequest(ApiModel):
    quantity: int
    reorder_level: Optional[int] = None


# ============================================================================
# ORDERS & REVIEWS
# ============================================================================


class OrderLine(ApiModel):
    product_id: int
    quantity: int


class OrderCreate(ApiModel):
    items: list[OrderLine] = Field(default_factory=list)
    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class ReviewCreate(ApiModel):
    rating: int
    title: Optional[str] = Field(None, max_length=255)
    comment: Optional[str] = None


# ============================================================================
# ENVELOPES
# ============================================================================


class IdResponse(BaseModel):
    id: int


class MessageResponse(BaseModel):
    message: str
