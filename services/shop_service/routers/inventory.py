"""Stock reporting for administrators."""

from fastapi import APIRouter, Depends
from libs.common.logging import get_logger
from libs.db.gateway import Database
from libs.db.session import get_database
from services.shop_service.dao import InventoryDAO
from services.shop_service.domain import Inventory, User
from services.shop_service.routers._helpers import require_admin

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

logger = get_logger(__name__)


@router.get("/low-stock", response_model=list[Inventory])
async def list_low_stock(
    admin: User = Depends(require_admin),
    db: Database = Depends(get_database),
):
    """Inventory rows at or below their reorder level."""
    rows = await InventoryDAO(db).find_below_reorder()
    logger.info("Low-stock report: %d products at or below reorder level", len(rows))
    return rows
