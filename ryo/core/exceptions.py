"""Application error kinds and the adapter that renders them as JSON."""
import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("ryo")


class AppException(Exception):
    """Base application error carrying a status code and a machine-readable code"""
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "error"

    def __init__(self, detail: str = "Request failed"):
        super().__init__(detail)
        self.detail = detail


class ValidationError(AppException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"

    def __init__(self, detail: str = "Validation error"):
        super().__init__(detail)


class AuthenticationError(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "authentication_error"

    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(detail)


class AuthorizationError(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    code = "authorization_error"

    def __init__(self, detail: str = "Not authorized"):
        super().__init__(detail)


class NotFoundError(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail)


class UpstreamError(AppException):
    """Database or object storage failure"""
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_error"

    def __init__(self, detail: str = "Upstream service failure"):
        super().__init__(detail)


class InvalidToken(Exception):
    """Raised by the identity verifier and the session codec.

    Never rendered directly; callers turn it into an AuthenticationError.
    """


def error_body(detail: str, code: str) -> dict:
    return {"Error": detail, "code": code}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    if isinstance(exc, UpstreamError):
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.detail, exc.code))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), code),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        detail = "Invalid request"
    logger.warning(f"Request validation failed on {request.url.path}: {detail}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(detail, ValidationError.code),
    )


exception_handlers = {
    AppException: app_exception_handler,
    StarletteHTTPException: http_exception_handler,
    RequestValidationError: request_validation_exception_handler,
}
