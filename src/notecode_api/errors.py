"""Error types and the FastAPI handlers that turn them into responses."""

import logging
from typing import Optional

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from database.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Not authorized to access this route"


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    # 4xx resource errors answer with {"error": ...}, the rest with {"message": ...}
    body_key: str = "message"
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content={self.body_key: self.message})


class UnauthorizedError(ServiceError):
    """Authentication failed; the reason never reaches the client."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = UNAUTHORIZED_MESSAGE

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content={self.body_key: UNAUTHORIZED_MESSAGE},
            headers={"WWW-Authenticate": "Bearer"},
        )


class MissingCredentialError(UnauthorizedError):
    default_message = "Bearer credential missing or malformed"


class InvalidTokenError(UnauthorizedError):
    default_message = "Token is invalid or expired"


class UserNotFoundError(UnauthorizedError):
    default_message = "Token subject does not match a user"


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    body_key = "error"
    default_message = "Invalid request"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    body_key = "error"
    default_message = "Not authorized to access this file"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    body_key = "error"
    default_message = "File not found"


class InternalError(ServiceError):
    """Unexpected fault; the detail is logged, the client only sees a generic message."""

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content={self.body_key: self.default_message})


class ServiceUnavailableError(ServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"


async def handle_service_errors(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a ServiceError raised by a dependency or route."""
    if isinstance(exc, UnauthorizedError):
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
    elif exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return exc.to_response()


async def handle_store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    """Answer document store timeouts with 503."""
    logger.error(f"Document store unavailable during {request.method} {request.url.path}: {exc}")
    return ServiceUnavailableError().to_response()


async def handle_http_exceptions(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing failures (unknown path, wrong method) answer with an {"error": ...} body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_errors(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies are client errors: answer 400 with a short summary."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    return ValidationError("Invalid request body: " + "; ".join(problems)).to_response()


async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {err}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Something went wrong!"},
        )
