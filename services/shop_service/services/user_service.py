"""User registration, updates and authentication."""

from typing import Optional

from libs.auth.passwords import hash_password
from libs.common import validation
from libs.common.errors import ConflictError, NotFoundError, ValidationError
from libs.common.logging import get_logger
from libs.db.gateway import Database
from services.shop_service.dao import UserDAO
from services.shop_service.domain import User

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _validate_username(username: Optional[str]) -> None:
    if not validation.is_valid_username(username):
        raise ValidationError(
            "Invalid username: must be 3-20 alphanumeric characters or underscores"
        )


def _validate_email(email: Optional[str]) -> None:
    if not validation.is_valid_email(email):
        raise ValidationError(f"Invalid email format: {email}")


def _validate_name(name: Optional[str], field_label: str) -> None:
    if not validation.is_valid_name(name):
        raise ValidationError(f"{field_label} is invalid: {name}")


def _validate_user(user: User) -> None:
    _validate_username(user.username)
    _validate_email(user.email)
    _validate_name(user.first_name, "First name")
    _validate_name(user.last_name, "Last name")
    if user.phone and not validation.is_valid_phone(user.phone):
        raise ValidationError(f"Invalid phone number: {user.phone}")


# ---------------------------------------------------------------------------
# Registration and updates
# ---------------------------------------------------------------------------


async def register_user(db: Database, user: User, *, password: str) -> int:
    """Validate and store a new user; returns the new user id."""
    _validate_user(user)
    if not validation.is_not_empty(password):
        raise ValidationError("Password is required")

    users = UserDAO(db)
    if await users.find_by_username(user.username) is not None:
        raise ConflictError(f"Username already exists: {user.username}")
    if await users.find_by_email(user.email) is not None:
        raise ConflictError(f"Email already exists: {user.email}")

    user_id = await users.create(user, hash_password(password))
    logger.info("Successfully registered new user with ID: %s", user_id)
    return user_id


async def update_user(db: Database, user: User) -> int:
    """Validate and store changes to an existing user."""
    if user.user_id is None or not validation.is_positive(user.user_id):
        raise ValidationError("User ID must be positive")
    _validate_user(user)

    users = UserDAO(db)
    existing = await users.find_by_id(user.user_id)
    if existing is None:
        raise NotFoundError("User not found")

    # Duplicates only matter when the value actually changes
    if existing.email != user.email and await users.find_by_email(user.email):
        raise ConflictError(f"Email already exists: {user.email}")
    if existing.username != user.username and await users.find_by_username(
        user.username
    ):
        raise ConflictError(f"Username already exists: {user.username}")

    rows = await users.update(user)
    logger.info("Successfully updated user with ID: %s", user.user_id)
    return rows


async def change_password(db: Database, user_id: int, *, password: str) -> int:
    if not validation.is_not_empty(password):
        raise ValidationError("Password is required")
    return await UserDAO(db).update_password(user_id, hash_password(password))


async def delete_user(db: Database, user_id: int) -> int:
    rows = await UserDAO(db).delete(user_id)
    logger.info("Deleted user with ID: %s", user_id)
    return rows


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_user_by_id(db: Database, user_id: int) -> Optional[User]:
    user = await UserDAO(db).find_by_id(user_id)
    if user is None:
        logger.warning("User not found with ID: %s", user_id)
    return user


async def get_user_by_username(db: Database, username: str) -> Optional[User]:
    user = await UserDAO(db).find_by_username(username)
    if user is None:
        logger.warning("User not found with username: %s", username)
    return user


async def get_user_by_email(db: Database, email: str) -> Optional[User]:
    return await UserDAO(db).find_by_email(email)


async def get_all_users(db: Database) -> list[User]:
    users = await UserDAO(db).find_all()
    logger.debug("Retrieved %d users", len(users))
    return users


async def authenticate_user(
    db: Database, username: str, password: str
) -> Optional[User]:
    user = await UserDAO(db).authenticate(username, password)
    if user is not None:
        logger.info("Successful authentication for user: %s", username)
    else:
        logger.warning("Failed authentication attempt for username: %s", username)
    return user
