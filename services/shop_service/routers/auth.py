"""Login: exchange a username and password for a bearer token."""

from typing import Optional

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_token_service
from libs.auth.tokens import TokenService
from libs.common.errors import AuthError, ValidationError
from libs.common.validation import is_not_empty
from libs.db.gateway import Database
from libs.db.session import get_database
from services.shop_service.schemas import LoginRequest, LoginResponse, LoginUser
from services.shop_service.services import user_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    body: Optional[LoginRequest] = None,
    db: Database = Depends(get_database),
    tokens: TokenService = Depends(get_token_service),
):
    """Authenticate a user and issue a bearer token."""
    if body is None or not is_not_empty(body.username) or not is_not_empty(body.password):
        raise ValidationError("Username and password are required")

    user = await user_service.authenticate_user(db, body.username, body.password)
    if user is None:
        raise AuthError("Invalid username or password")

    return LoginResponse(
        token=tokens.issue(user.username),
        user=LoginUser(
            id=user.user_id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            user_type=user.user_type,
        ),
    )
