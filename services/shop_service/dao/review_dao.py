"""Review persistence."""

from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.gateway import Database
from services.shop_service.domain import Review
from services.shop_service.models import ReviewModel
from sqlalchemy import insert, select
from sqlalchemy.engine import RowMapping

reviews = ReviewModel.__table__


def map_review(row: RowMapping) -> Review:
    return Review.model_validate(dict(row))


class ReviewDAO:
    def __init__(self, db: Database):
        self.db = db

    async def find_by_id(self, review_id: int) -> Optional[Review]:
        stmt = select(reviews).where(reviews.c.review_id == review_id)
        return await self.db.query_one(stmt, map_row=map_review)

    async def find_by_product(self, product_id: int) -> list[Review]:
        """Reviews for a product, newest first."""
        stmt = (
            select(reviews)
            .where(reviews.c.product_id == product_id)
            .order_by(reviews.c.created_at.desc(), reviews.c.review_id.desc())
        )
        return await self.db.query_many(stmt, map_row=map_review)

    async def create(self, review: Review) -> int:
        stmt = insert(reviews).values(
            product_id=review.product_id,
            user_id=review.user_id,
            rating=review.rating,
            title=review.title,
            comment=review.comment,
            is_verified_purchase=review.is_verified_purchase,
            created_at=review.created_at or utc_now(),
        )
        return await self.db.execute_insert(stmt)
