from datetime import datetime
from typing import Optional

from services.shop_service.domain.base import DomainModel
from services.shop_service.models.enums import UserType


class User(DomainModel):
    user_id: Optional[int] = None
    username: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    user_type: UserType = UserType.CUSTOMER
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN
