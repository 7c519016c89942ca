from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Represents the identity carried by a verified bearer token.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., alias="sub")
    issued_at: Optional[datetime] = Field(default=None, alias="iat")
    expires_at: Optional[datetime] = Field(default=None, alias="exp")
