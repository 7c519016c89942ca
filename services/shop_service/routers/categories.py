"""Category endpoints."""

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user
from libs.common.errors import NotFoundError, ValidationError
from libs.db.gateway import Database
from libs.db.session import get_database
from services.shop_service.dao import CategoryDAO
from services.shop_service.domain import Category
from services.shop_service.routers._helpers import parse_id
from services.shop_service.schemas import (
    CategoryCreate,
    CategoryUpdate,
    IdResponse,
    MessageResponse,
)
from services.shop_service.services import category_service

router = APIRouter(
    prefix="/api/categories",
    tags=["categories"],
    dependencies=[Depends(get_current_user)],
)


# ============================================================================
# COLLECTION
# ============================================================================


@router.get("", response_model=list[Category])
@router.get("/", response_model=list[Category], include_in_schema=False)
async def list_categories(db: Database = Depends(get_database)):
    """List all categories by name."""
    return await CategoryDAO(db).find_all()


@router.post("", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
@router.post(
    "/",
    response_model=IdResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_category(
    body: CategoryCreate,
    db: Database = Depends(get_database),
):
    """Create a category."""
    category = Category(**body.model_dump())
    category_id = await category_service.create_category(db, category)
    return IdResponse(id=category_id)


@router.put("", include_in_schema=False)
@router.delete("", include_in_schema=False)
async def category_id_required():
    raise ValidationError("Category ID required")


# ============================================================================
# SINGLE CATEGORY
# ============================================================================


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str, db: Database = Depends(get_database)):
    """Get a category by id."""
    category = await CategoryDAO(db).find_by_id(parse_id(category_id, "category"))
    if category is None:
        raise NotFoundError("Category not found")
    return category


@router.put("/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    db: Database = Depends(get_database),
):
    """Update a category; only fields present in the body change."""
    existing = await CategoryDAO(db).find_by_id(parse_id(category_id, "category"))
    if existing is None:
        raise NotFoundError("Category not found")

    changes = body.model_dump(exclude_unset=True)
    updated = Category.model_validate({**existing.model_dump(), **changes})
    return await category_service.update_category(db, updated)


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(category_id: str, db: Database = Depends(get_database)):
    """Delete a category."""
    await category_service.delete_category(db, parse_id(category_id, "category"))
    return MessageResponse(message="Category deleted successfully")
