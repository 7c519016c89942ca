"""User persistence."""

from typing import Optional

from libs.auth.passwords import verify_password
from libs.common.datetime_utils import utc_now
from libs.db.gateway import Database
from services.shop_service.domain import User
from services.shop_service.models import UserModel
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import RowMapping

users = UserModel.__table__

# Every column except the password hash
USER_COLUMNS = [c for c in users.c if c.name != "password_hash"]


def map_user(row: RowMapping) -> User:
    return User.model_validate(dict(row))


class UserDAO:
    def __init__(self, db: Database):
        self.db = db

    async def find_by_id(self, user_id: int) -> Optional[User]:
        stmt = select(*USER_COLUMNS).where(users.c.user_id == user_id)
        return await self.db.query_one(stmt, map_row=map_user)

    async def find_by_username(self, username: str) -> Optional[User]:
        stmt = select(*USER_COLUMNS).where(users.c.username == username)
        return await self.db.query_one(stmt, map_row=map_user)

    async def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(*USER_COLUMNS).where(users.c.email == email)
        return await self.db.query_one(stmt, map_row=map_user)

    async def find_all(self) -> list[User]:
        stmt = select(*USER_COLUMNS).order_by(
            users.c.created_at.desc(), users.c.user_id.desc()
        )
        return await self.db.query_many(stmt, map_row=map_user)

    async def create(self, user: User, password_hash: str) -> int:
        """Insert ``user`` with an already-hashed password; returns the new id."""
        now = utc_now()
        stmt = insert(users).values(
            username=user.username,
            email=user.email,
            password_hash=password_hash,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            address=user.address,
            user_type=user.user_type,
            is_active=user.is_active,
            created_at=now,
            updated_at=now,
        )
        return await self.db.execute_insert(stmt)

    async def update(self, user: User) -> int:
        stmt = (
            update(users)
            .where(users.c.user_id == user.user_id)
            .values(
                username=user.username,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                phone=user.phone,
                address=user.address,
                user_type=user.user_type,
                is_active=user.is_active,
                updated_at=utc_now(),
            )
        )
        return await self.db.execute_update(stmt)

    async def update_password(self, user_id: int, password_hash: str) -> int:
        stmt = (
            update(users)
            .where(users.c.user_id == user_id)
            .values(password_hash=password_hash, updated_at=utc_now())
        )
        return await self.db.execute_update(stmt)

    async def delete(self, user_id: int) -> int:
        return await self.db.execute_update(delete(users).where(users.c.user_id == user_id))

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the active user whose stored hash matches ``password``."""
        stmt = select(users).where(
            users.c.username == username, users.c.is_active.is_(True)
        )
        row = await self.db.query_one(stmt, map_row=dict)
        if row is None or not verify_password(password, row["password_hash"]):
            return None
        return map_user(row)
