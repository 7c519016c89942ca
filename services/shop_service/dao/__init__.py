"""Data access objects for the Shop Service."""

from services.shop_service.dao.category_dao import CategoryDAO
from services.shop_service.dao.inventory_dao import InventoryDAO
from services.shop_service.dao.order_dao import OrderDAO
from services.shop_service.dao.product_dao import ProductDAO
from services.shop_service.dao.review_dao import ReviewDAO
from services.shop_service.dao.user_dao import UserDAO

__all__ = [
    "CategoryDAO",
    "InventoryDAO",
    "OrderDAO",
    "ProductDAO",
    "ReviewDAO",
    "UserDAO",
]
