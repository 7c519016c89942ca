"""Shop Service domain entities."""

from services.shop_service.domain.catalog import Category, Product
from services.shop_service.domain.inventory import Inventory
from services.shop_service.domain.orders import Order, OrderItem
from services.shop_service.domain.review import Review
from services.shop_service.domain.user import User

__all__ = [
    "Category",
    "Inventory",
    "Order",
    "OrderItem",
    "Product",
    "Review",
    "User",
]
