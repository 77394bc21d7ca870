"""
Application errors and FastAPI exception handlers
"""

from typing import Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from matchchats.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors rendered as {"error": {"code", "message"}}"""

    code: str = "app_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


# Remote directory -----------------------------------------------------
class DirectoryError(AppError):
    """A read against the remote directory failed"""
    code = "directory_error"
    status_code = status.HTTP_502_BAD_GATEWAY


class DirectoryNetworkError(DirectoryError):
    code = "directory_unreachable"


class DirectoryNotFoundError(DirectoryError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class DirectoryResponseError(DirectoryError):
    """Non-success status or a body that does not match the expected shape"""
    code = "directory_bad_response"


class ChatListUnavailableError(AppError):
    """The chat list could not be fetched; nothing can be displayed"""
    code = "chat_list_unavailable"
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, user_id: int, cause: Exception):
        super().__init__(f"Could not load chats for user {user_id}: {cause}")
        self.user_id = user_id
        self.cause = cause
        if isinstance(cause, DirectoryNotFoundError):
            self.status_code = status.HTTP_404_NOT_FOUND


# Session ----------------------------------------------------------------
class SessionError(AppError):
    code = "session_error"
    status_code = status.HTTP_401_UNAUTHORIZED


class NotAuthenticatedError(SessionError):
    code = "not_authenticated"


class CorruptSessionError(SessionError):
    """The persisted session exists but has no usable user id"""
    code = "corrupt_session"


class SessionStoreUnavailableError(SessionError):
    """The session store could not be read at all"""
    code = "session_store_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


async def app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.code, exc.message))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={**_error_body(ValidationError.code, "Request validation failed"), "detail": jsonable_encoder(exc.errors())},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal_error", "Internal server error"),
    )
