"""Shop service routers package."""

from services.shop_service.routers.auth import router as auth_router
from services.shop_service.routers.categories import router as categories_router
from services.shop_service.routers.inventory import router as inventory_router
from services.shop_service.routers.orders import router as orders_router
from services.shop_service.routers.products import router as products_router

__all__ = [
    "auth_router",
    "categories_router",
    "inventory_router",
    "orders_router",
    "products_router",
]
