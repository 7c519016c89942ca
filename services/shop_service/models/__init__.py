"""Shop Service models package."""

from services.shop_service.models.catalog import (
    CategoryModel,
    InventoryModel,
    ProductCategoryModel,
    ProductModel,
)
from services.shop_service.models.commerce import (
    OrderItemModel,
    OrderModel,
    ReviewModel,
)
from services.shop_service.models.enums import OrderStatus, UserType
from services.shop_service.models.users import UserModel

__all__ = [
    "CategoryModel",
    "InventoryModel",
    "OrderItemModel",
    "OrderModel",
    "OrderStatus",
    "ProductCategoryModel",
    "ProductModel",
    "ReviewModel",
    "UserModel",
    "UserType",
]
