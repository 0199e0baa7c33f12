"""Application errors and the handlers that render them as JSON"""

import logging
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields"


class ApiError(HTTPException):
    """HTTP error whose detail is shown to the caller as-is"""

    def __init__(self, status_code: int, message: str, headers: Optional[dict] = None):
        super().__init__(status_code=status_code, detail=message, headers=headers)


class ConfigurationError(RuntimeError):
    """A required API key or URL is not configured"""


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("message") or detail.get("error") or str(detail)
    else:
        message = str(detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Missing or blank required fields become a 400 with a single generic
    message; anything else reports the first pydantic message.
    """
    errors = exc.errors()
    logger.warning(f"Validation error for {request.url.path}: {errors}")

    if any(e.get("type") in ("missing", "string_too_short") for e in errors):
        return error_response(400, MISSING_FIELDS_MESSAGE)

    first = errors[0] if errors else {}
    message = first.get("msg") or "Invalid request"
    # pydantic prefixes custom ValueError messages
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return error_response(400, message)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} - Error: {exc}", exc_info=exc)
    return error_response(500, str(exc) or "An error occurred")
