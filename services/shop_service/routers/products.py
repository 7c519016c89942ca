"""Product endpoints, with the product's stock and reviews nested below it."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.common.errors import NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.db.gateway import Database
from libs.db.session import get_database
from services.shop_service.dao import CategoryDAO, InventoryDAO, ProductDAO
from services.shop_service.domain import Inventory, Product, Review, User
from services.shop_service.routers._helpers import (
    get_current_account,
    parse_id,
    require_admin,
)
from services.shop_service.schemas import (
    IdResponse,
    MessageResponse,
    ProductCreate,
    ProductUpdate,
    RestockRequest,
    ReviewCreate,
)
from services.shop_service.services import review_service

router = APIRouter(
    prefix="/api/products",
    tags=["products"],
    dependencies=[Depends(get_current_user)],
)

logger = get_logger(__name__)


async def _check_categories(db: Database, category_ids: list[int]) -> None:
    missing = await CategoryDAO(db).find_missing(category_ids)
    if missing:
        raise ValidationError(
            "Category not found: " + ", ".join(str(i) for i in sorted(missing))
        )


async def _get_product_or_404(db: Database, product_id: int) -> Product:
    product = await ProductDAO(db).find_by_id(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


# ============================================================================
# COLLECTION
# ============================================================================


@router.get("", response_model=list[Product])
@router.get("/", response_model=list[Product], include_in_schema=False)
async def list_products(
    name: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice"),
    db: Database = Depends(get_database),
):
    """List active products, newest first, optionally filtered."""
    dao = ProductDAO(db)

    if min_price is not None and max_price is not None and min_price > max_price:
        raise ValidationError("minPrice cannot be greater than maxPrice")

    if name:
        found = await dao.find_by_name(name)
    elif category_id is not None:
        found = await dao.find_by_category(category_id)
    elif min_price is not None or max_price is not None:
        found = await dao.find_by_price_range(min_price, max_price)
    else:
        return await dao.find_all_active()

    # Remaining filters narrow the first query's result
    if category_id is not None:
        found = [p for p in found if category_id in p.category_ids]
    if min_price is not None:
        found = [p for p in found if p.price >= min_price]
    if max_price is not None:
        found = [p for p in found if p.price <= max_price]
    return found


@router.post("", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
@router.post(
    "/",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_product(
    body: ProductCreate,
    db: Database = Depends(get_database),
):
    """Create a product with an empty stock row."""
    product = Product(**body.model_dump(exclude={"category_ids"}))
    await _check_categories(db, body.category_ids)
    product_id = await ProductDAO(db).create(product, body.category_ids)
    logger.info("Created product %s (%s)", product_id, product.name)
    return IdResponse(id=product_id)


@router.put("", include_in_schema=False)
@router.delete("", include_in_schema=False)
async def product_id_required():
    raise ValidationError("Product ID required")


# ============================================================================
# SINGLE PRODUCT
# ============================================================================


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, db: Database = Depends(get_database)):
    """Get a product with its categories."""
    return await _get_product_or_404(db, parse_id(product_id, "product"))


@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    db: Database = Depends(get_database),
):
    """Update a product; only fields present in the body change."""
    existing = await _get_product_or_404(db, parse_id(product_id, "product"))

    changes = body.model_dump(exclude_unset=True, exclude={"category_ids"})
    updated = Product.model_validate({**existing.model_dump(), **changes})
    if body.category_ids is not None:
        await _check_categories(db, body.category_ids)

    dao = ProductDAO(db)
    await dao.update(updated, body.category_ids)
    return await dao.find_by_id(existing.product_id)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, db: Database = Depends(get_database)):
    """Delete a product, its category links and its stock row."""
    pid = parse_id(product_id, "product")
    if await ProductDAO(db).delete(pid) == 0:
        raise NotFoundError("Product not found")
    logger.info("Deleted product %s", pid)
    return MessageResponse(message="Product deleted successfully")


# ============================================================================
# INVENTORY
# ============================================================================


@router.get("/{product_id}/inventory", response_model=Inventory)
async def get_product_inventory(product_id: str, db: Database = Depends(get_database)):
    """Stock levels for a product."""
    stock = await InventoryDAO(db).find_by_product(parse_id(product_id, "product"))
    if stock is None:
        raise NotFoundError("Inventory not found")
    return stock


@router.post("/{product_id}/inventory/restock", response_model=Inventory)
async def restock_product(
    product_id: str,
    body: RestockRequest,
    admin: User = Depends(require_admin),
    db: Database = Depends(get_database),
):
    """Add stock (admin only), optionally changing the reorder level."""
    pid = parse_id(product_id, "product")
    updated = await InventoryDAO(db).restock(pid, body.quantity, body.reorder_level)
    logger.info(
        "Restocked product %s by %d (admin %s)", pid, body.quantity, admin.username
    )
    return updated


# ============================================================================
# REVIEWS
# ============================================================================


@router.get("/{product_id}/reviews", response_model=list[Review])
async def list_product_reviews(product_id: str, db: Database = Depends(get_database)):
    """Reviews for a product, newest first."""
    return await review_service.reviews_for_product(
        db, parse_id(product_id, "product")
    )


@router.post(
    "/{product_id}/reviews",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
)
async def create_product_review(
    product_id: str,
    body: ReviewCreate,
    account: User = Depends(get_current_account),
    db: Database = Depends(get_database),
):
    """Review a product as the calling user."""
    return await review_service.add_review(
        db,
        product_id=parse_id(product_id, "product"),
        user_id=account.user_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
    )
