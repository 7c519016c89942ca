"""Global exception handlers giving every error the same ``{"error": ...}`` body.

Usage:
    from libs.common.error_handler import add_exception_handlers

    app = FastAPI(default_response_class=UTF8JSONResponse)
    add_exception_handlers(app)
"""

from typing import Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.errors import ServiceError
from libs.common.logging import get_logger

logger = get_logger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"


class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


def error_response(message: str, status_code: int, headers=None) -> UTF8JSONResponse:
    return UTF8JSONResponse({"error": message}, status_code=status_code, headers=headers)


def describe_validation_error(exc: Union[RequestValidationError, PydanticValidationError]) -> str:
    """One-line summary of the first request validation problem."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def service_error_handler(request: Request, exc: ServiceError) -> UTF8JSONResponse:
    if exc.status_code >= 500:
        # Details were logged where the failure happened
        return error_response(GENERIC_SERVER_ERROR, exc.status_code)
    return error_response(exc.message, exc.status_code, exc.headers)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> UTF8JSONResponse:
    if exc.status_code == 404:
        message = "Endpoint not found"
    elif exc.status_code == 405:
        message = "Method not allowed"
    else:
        message = str(exc.detail)
    return error_response(message, exc.status_code, getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> UTF8JSONResponse:
    message = describe_validation_error(exc)
    logger.info("Rejected request body: %s", message)
    return error_response(message, 400)


def add_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
