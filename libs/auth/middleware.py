"""
Bearer-token gate for a whole URL prefix.

Requests under the prefix are checked before routing, so a missing or bad
token answers 401 even when the path itself matches no route.

Usage:
    from libs.auth.middleware import add_bearer_auth_middleware

    add_bearer_auth_middleware(app, prefix="/api/", public_paths={"/api/auth/login"})
"""
from typing import Callable, Iterable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.auth.dependencies import bearer_token, get_token_service
from libs.common.error_handler import error_response
from libs.common.errors import AuthError


class BearerAuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, *, prefix: str, public_paths: Iterable[str] = ()):
        super().__init__(app)
        self.prefix = prefix
        self.public_paths = frozenset(public_paths)

    def is_protected(self, request: Request) -> bool:
        path = request.url.path
        return (
            request.method != "OPTIONS"
            and path.startswith(self.prefix)
            and path not in self.public_paths
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self.is_protected(request):
            try:
                token = bearer_token(request.headers.get("Authorization"))
                get_token_service(request).verify(token)
            except AuthError as exc:
                return error_response(exc.message, exc.status_code, exc.headers)
        return await call_next(request)


def add_bearer_auth_middleware(
    app: FastAPI, *, prefix: str, public_paths: Iterable[str] = ()
) -> None:
    """
    Require a valid bearer token for every path under ``prefix``.

    Add it before the other HTTP middleware so it runs innermost, inside
    request logging and CORS.
    """
    app.add_middleware(
        BearerAuthMiddleware, prefix=prefix, public_paths=tuple(public_paths)
    )
