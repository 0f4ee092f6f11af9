"""
Application errors and their HTTP translation.

Every error that reaches a client goes through one of the handlers below, so
the payload is always {"success": false, "error": <code>, "message": <text>}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    code = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.message
        super().__init__(self.message)


class InvalidInput(AppError):
    code = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class Unauthorized(AppError):
    code = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authorization denied"


class InvalidCredentials(Unauthorized):
    # Login answers 400, like the old server, and never says which field was wrong
    code = "invalid_credentials"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid credentials."


class Conflict(AppError):
    code = "conflict"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Resource already exists"


class NotFound(AppError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class ServiceUnavailable(AppError):
    code = "service_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Database is unavailable. Please try again in {retry_after} seconds."

    def __init__(self, message: str = None, retry_after: int = 30):
        self.retry_after = retry_after
        super().__init__(message or self.message.format(retry_after=retry_after))


def error_payload(code: str, message: str, **extra) -> dict:
    return {"success": False, "error": code, "message": message, **extra}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, ServiceUnavailable):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(exc.code, exc.message, retry_after=exc.retry_after),
            headers={"Retry-After": str(exc.retry_after)},
        )
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc.code, exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # First problem only, as "field: reason"
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{loc}: {first.get('msg')}" if loc else first.get("msg", message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_payload(InvalidInput.code, message),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_payload("internal_error", "Server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
