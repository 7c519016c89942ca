"""Category rules that span more than one row: parent existence and cycles."""

from libs.common.errors import InvariantError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.common.validation import is_not_empty
from libs.db.gateway import Database
from services.shop_service.dao import CategoryDAO
from services.shop_service.domain import Category

logger = get_logger(__name__)


async def _check_parent(categories: CategoryDAO, category: Category) -> None:
    parent_id = category.parent_category_id
    if parent_id is None:
        return
    if await categories.find_by_id(parent_id) is None:
        raise NotFoundError("Parent category not found")
    if category.category_id is None:
        return
    # The new parent must not sit below this category
    if category.category_id in await categories.ancestor_ids(parent_id):
        raise InvariantError("Category hierarchy cannot contain a cycle")


async def create_category(db: Database, category: Category) -> int:
    if not is_not_empty(category.name):
        raise ValidationError("Category name is required")
    categories = CategoryDAO(db)
    await _check_parent(categories, category)
    category_id = await categories.create(category)
    logger.info("Created category %s (%s)", category_id, category.name)
    return category_id


async def update_category(db: Database, category: Category) -> Category:
    if not is_not_empty(category.name):
        raise ValidationError("Category name is required")
    categories = CategoryDAO(db)
    if await categories.find_by_id(category.category_id) is None:
        raise NotFoundError("Category not found")
    await _check_parent(categories, category)
    await categories.update(category)
    return await categories.find_by_id(category.category_id)


async def delete_category(db: Database, category_id: int) -> None:
    if await CategoryDAO(db).delete(category_id) == 0:
        raise NotFoundError("Category not found")
    logger.info("Deleted category %s", category_id)
