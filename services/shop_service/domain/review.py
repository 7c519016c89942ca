from datetime import datetime
from typing import Optional

from libs.common.errors import InvariantError
from pydantic import field_validator
from services.shop_service.domain.base import DomainModel

MIN_RATING = 1
MAX_RATING = 5


class Review(DomainModel):
    review_id: Optional[int] = None
    product_id: int
    user_id: int
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    is_verified_purchase: bool = False

    @field_validator("rating")
    @classmethod
    def rating_in_range(cls, v: int) -> int:
        if not MIN_RATING <= v <= MAX_RATING:
            raise InvariantError("Rating must be between 1 and 5")
        return v

    @property
    def star_rating(self) -> str:
        return "★" * self.rating + "☆" * (MAX_RATING - self.rating)

    @property
    def is_positive(self) -> bool:
        return self.rating >= 4

    @property
    def is_negative(self) -> bool:
        return self.rating <= 2

    @property
    def is_neutral(self) -> bool:
        return self.rating == 3
