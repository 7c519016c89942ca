"""Unit tests for catalog, review and user entities."""

from decimal import Decimal

import pytest
from libs.common.errors import InvariantError
from services.shop_service.domain import Category, Review
from services.shop_service.models import UserType
from tests.factories import ProductFactory, UserFactory

# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("rating", [0, 6])
def test_rating_outside_range_rejected(rating):
    with pytest.raises(InvariantError) as exc_info:
        Review(product_id=1, user_id=1, rating=rating)
    assert exc_info.value.message == "Rating must be between 1 and 5"


@pytest.mark.unit
@pytest.mark.parametrize("rating", [1, 5])
def test_rating_bounds_accepted(rating):
    assert Review(product_id=1, user_id=1, rating=rating).rating == rating


@pytest.mark.unit
def test_review_sentiment_and_stars():
    assert Review(product_id=1, user_id=1, rating=4).is_positive
    assert Review(product_id=1, user_id=1, rating=3).is_neutral
    assert Review(product_id=1, user_id=1, rating=2).is_negative
    assert Review(product_id=1, user_id=1, rating=2).star_rating == "★★☆☆☆"


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_category_cannot_parent_itself():
    with pytest.raises(InvariantError, match="own parent"):
        Category(category_id=3, name="Loop", parent_category_id=3)


@pytest.mark.unit
def test_root_category():
    assert Category(name="Top").is_root
    assert not Category(name="Child", parent_category_id=1).is_root


@pytest.mark.unit
def test_product_price_and_weight_not_negative():
    with pytest.raises(InvariantError, match="Price cannot be negative"):
        ProductFactory.create(price=Decimal("-1"))
    with pytest.raises(InvariantError, match="Weight cannot be negative"):
        ProductFactory.create(weight=Decimal("-0.5"))
    assert ProductFactory.create(price=Decimal("0")).price == Decimal("0")


@pytest.mark.unit
def test_product_category_ids():
    product = ProductFactory.create(
        categories=[Category(category_id=1, name="A"), Category(category_id=2, name="B")]
    )
    assert product.category_ids == [1, 2]


@pytest.mark.unit
def test_product_price_serializes_as_number():
    data = ProductFactory.create(price=Decimal("19.99")).model_dump(
        mode="json", by_alias=True
    )
    assert data["price"] == 19.99
    assert data["isActive"] is True


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_user_helpers():
    user = UserFactory.create(first_name="Ada", last_name="Lovelace")
    assert user.full_name == "Ada Lovelace"
    assert not user.is_admin
    assert UserFactory.create(user_type=UserType.ADMIN).is_admin
