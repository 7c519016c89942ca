from typing import Optional

from fastapi import Request

from libs.auth.models import AuthUser
from libs.auth.tokens import TokenService
from libs.common.errors import AuthError

BEARER_PREFIX = "Bearer "


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def bearer_token(header: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` header."""
    if not header or not header.startswith(BEARER_PREFIX):
        raise AuthError("Authorization token required")

    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthError("Authorization token required")
    return token


async def get_current_user(request: Request) -> AuthUser:
    """
    Validate the bearer token on the request and return the authenticated user.
    """
    token = bearer_token(request.headers.get("Authorization"))
    return get_token_service(request).verify(token)
