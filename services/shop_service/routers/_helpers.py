"""Shared helpers for shop routers: path ids and the calling account."""

import re

from fastapi import Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.errors import AuthError, ForbiddenError, ValidationError
from libs.db.gateway import Database
from libs.db.session import get_database
from services.shop_service.dao import UserDAO
from services.shop_service.domain import User

_ID_PATTERN = re.compile(r"^[+-]?\d+$", re.ASCII)
_INT32_MAX = 2**31 - 1


def parse_id(raw: str, entity: str) -> int:
    """Parse a path id, raising ``Invalid <entity> ID`` for non-numeric input."""
    value = raw.strip()
    if not _ID_PATTERN.match(value) or abs(int(value)) > _INT32_MAX:
        raise ValidationError(f"Invalid {entity} ID")
    return int(value)


async def get_current_account(
    auth_user: AuthUser = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> User:
    """Load the active user named by the bearer token."""
    account = await UserDAO(db).find_by_username(auth_user.username)
    if account is None or not account.is_active:
        raise AuthError("Invalid token")
    return account


async def require_admin(account: User = Depends(get_current_account)) -> User:
    if not account.is_admin:
        raise ForbiddenError("Admin privileges required")
    return account
