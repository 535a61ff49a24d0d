"""Application error hierarchy and the handlers that turn it into responses.

Services raise these exceptions; API routes never build error responses
themselves. Every error body has the shape ``{"detail": "<message>"}``.

Hierarchy:
    AppError
    ├── ValidationError     400  malformed or missing input
    ├── ConflictError       400  uniqueness violation (email already taken)
    ├── AuthError           401  missing or invalid session
    │   └── CredentialsError 400 wrong email/password at login
    ├── ForbiddenError      403  authenticated but not allowed
    ├── NotFoundError       404  referenced entity is absent
    ├── UpstreamError       500  asset host failure
    └── InternalError       500  anything unexpected
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class AppError(Exception):
    """Base class for errors that map to a client-safe response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ConflictError(AppError):
    # Reported as 400 to match the signup contract
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class CredentialsError(AuthError):
    """Login failure. Same message and status for unknown email and wrong password."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UpstreamError(AppError):
    """A third-party service (the image host) failed.

    The detailed message is kept for the server log; clients only see
    ``client_message``.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream service failed"
    client_message = "Image upload failed"


class InternalError(AppError):
    pass


def _client_message(exc: AppError) -> str:
    if isinstance(exc, UpstreamError):
        return exc.client_message
    if isinstance(exc, InternalError):
        return INTERNAL_ERROR_MESSAGE
    return exc.message


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(status_code=exc.status_code, content={"detail": _client_message(exc)})


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and path parameters as 400."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error in {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_MESSAGE},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error handlers on the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
