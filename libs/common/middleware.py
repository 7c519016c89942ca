"""HTTP middleware for the shop API.

Two layers wrap every request:

- ``RequestContextMiddleware`` binds a request id to the logging context,
  echoes it back as ``X-Request-ID`` and logs one line per request.
- ``CORSHeadersMiddleware`` answers preflight requests and stamps the
  cross-origin headers on every response, including unhandled failures.

Usage:
    from libs.common.middleware import add_http_middleware

    add_http_middleware(app)
"""
import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.error_handler import GENERIC_SERVER_ERROR, error_response
from libs.common.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probe traffic is not worth a log line per hit
QUIET_PATHS = frozenset({"/health"})

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With",
    "Access-Control-Max-Age": "3600",
}


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log how it ended."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method, path = request.method, request.url.path
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=path,
            method=method,
        )
        verbose = path not in QUIET_PATHS
        started = time.perf_counter()

        if verbose:
            logger.info("Request started %s %s", method, path)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request %s %s failed",
                method,
                path,
                extra={"extra_fields": {"duration_ms": _elapsed_ms(started)}},
            )
            raise
        else:
            if verbose:
                status_code = response.status_code
                logger.log(
                    logging.WARNING if status_code >= 400 else logging.INFO,
                    "Request completed %s %s -> %d",
                    method,
                    path,
                    status_code,
                    extra={
                        "extra_fields": {
                            "status_code": status_code,
                            "duration_ms": _elapsed_ms(started),
                        }
                    },
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Attach the cross-origin headers to every response.

    Preflight ``OPTIONS`` requests are answered directly with an empty 200.
    Anything that escapes the app's exception handlers becomes a 500 JSON
    body so the headers are still present on failures.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        try:
            response = await call_next(request)
        except Exception:
            response = error_response(GENERIC_SERVER_ERROR, 500)

        response.headers.update(CORS_HEADERS)
        return response


def add_http_middleware(app: FastAPI) -> None:
    """
    Add request-context and CORS middleware to a FastAPI app.

    Starlette runs the last-added middleware outermost, so CORS wraps
    request logging.
    """
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(CORSHeadersMiddleware)
