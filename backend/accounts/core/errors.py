"""
Error taxonomy and the JSON error handlers installed on the application.

Every error reaches the client as ``{"error": "<message>"}``:
- ApiError (and its auth subclasses): the status code and message it carries
- StoreError and any other unexpected exception: 500 with a generic
  message; the detail is only logged
- Request validation failures: 400
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("uvicorn.error")


class ApiError(Exception):
    """An expected failure that maps directly onto an HTTP status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AuthError(ApiError):
    """Base class for bearer token failures."""


class MissingToken(AuthError):
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Access token is required")


class InvalidOrExpiredToken(AuthError):
    def __init__(self):
        super().__init__(status.HTTP_403_FORBIDDEN, "Invalid or expired token")


class StoreError(Exception):
    """Any failure reported by the user record store."""


def error_body(message: str) -> dict:
    return {"error": message}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error("Server error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Server error"),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        logger.info("Rejected body on %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("Invalid request body"),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Server error"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(_: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )
