"""Product reviews."""

from typing import Optional

from libs.common.errors import NotFoundError
from libs.common.logging import get_logger
from libs.db.gateway import Database
from services.shop_service.dao import OrderDAO, ProductDAO, ReviewDAO
from services.shop_service.domain import Review

logger = get_logger(__name__)


async def add_review(
    db: Database,
    *,
    product_id: int,
    user_id: int,
    rating: int,
    title: Optional[str] = None,
    comment: Optional[str] = None,
) -> Review:
    """Record a review; it is a verified purchase when the user bought the product."""
    if await ProductDAO(db).find_by_id(product_id) is None:
        raise NotFoundError("Product not found")

    review = Review(
        product_id=product_id,
        user_id=user_id,
        rating=rating,
        title=title,
        comment=comment,
        is_verified_purchase=await OrderDAO(db).has_purchased(user_id, product_id),
    )
    reviews = ReviewDAO(db)
    review_id = await reviews.create(review)
    logger.info(
        "Review %s added for product %s (rating=%d, verified=%s)",
        review_id,
        product_id,
        rating,
        review.is_verified_purchase,
    )
    return await reviews.find_by_id(review_id)


async def reviews_for_product(db: Database, product_id: int) -> list[Review]:
    if await ProductDAO(db).find_by_id(product_id) is None:
        raise NotFoundError("Product not found")
    return await ReviewDAO(db).find_by_product(product_id)
