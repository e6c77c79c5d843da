# shikhi/utils/exceptions.py
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException

from shikhi import config
from shikhi.utils.logger import get_logger


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: Optional[str] = None

    def __init__(self, message: str, status_code: int = None, code: str = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, details=details)


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND_ERROR"

    def __init__(self, resource: str = "Resource", message: str = None):
        super().__init__(message or f"{resource} not found")


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)


class RateLimitError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "RATE_LIMIT_ERROR"

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(message)


class ServiceUnavailableError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "SERVICE_UNAVAILABLE"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, details=details)


class DatabaseError(AppError):
    code = "DATABASE_ERROR"


# ---------------------------
# RAISING SHORTHANDS
# ---------------------------
def not_found(entity: str = "Resource"):
    raise NotFoundError(entity)


def forbidden(message="Forbidden"):
    raise AuthorizationError(message)


def bad_request(message="Bad request"):
    raise ValidationError(message)


def unauthorized(message="Unauthorized"):
    raise AuthenticationError(message)


def to_oid(id_str: str, field: str = "id") -> ObjectId:
    """Convert string to ObjectId and validate."""
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {field}")


# ---------------------------
# ERROR -> RESPONSE MAPPING
# ---------------------------
def _validation_details(errors) -> list:
    return [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg"),
            "code": err.get("type"),
        }
        for err in errors
    ]


def create_error_response(error: Exception, path: Optional[str] = None) -> JSONResponse:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
    code = "INTERNAL_ERROR"
    details = None

    original = error
    if isinstance(error, PyMongoError) and not isinstance(error, DuplicateKeyError):
        error = DatabaseError(f"Database operation failed: {error}")

    if isinstance(error, AppError):
        status_code = error.status_code
        message = error.message
        code = error.code
        details = error.details
    elif isinstance(error, (RequestValidationError, PydanticValidationError)):
        status_code = status.HTTP_400_BAD_REQUEST
        message = "Validation error"
        code = "VALIDATION_ERROR"
        details = _validation_details(error.errors())
    elif isinstance(error, InvalidId):
        status_code = status.HTTP_400_BAD_REQUEST
        message = "Invalid ID format"
        code = "INVALID_ID_ERROR"
    elif isinstance(error, DuplicateKeyError):
        status_code = status.HTTP_409_CONFLICT
        message = "Resource already exists"
        code = "DUPLICATE_ERROR"
    elif isinstance(error, HTTPException):
        status_code = error.status_code
        message = error.detail if isinstance(error.detail, str) else "Request failed"
        code = None
        if not isinstance(error.detail, str):
            details = error.detail
    else:
        message = str(error) or message

    logger = get_logger(f"API:{path}" if path else "API")
    if status_code >= 500:
        logger.error(message, exc_info=original)
    else:
        logger.warning(f"{status_code} {message}")

    if config.IS_PRODUCTION and status_code >= 500:
        message = "Internal server error"
        details = None

    body = {"error": message, "timestamp": datetime.now(timezone.utc).isoformat()}
    if code:
        body["code"] = code
    if details is not None:
        body["details"] = details
    if path:
        body["path"] = path

    headers = getattr(error, "headers", None) if isinstance(error, HTTPException) else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def register_exception_handlers(app: FastAPI):
    async def handle(request: Request, exc: Exception):
        return create_error_response(exc, request.url.path)

    for exc_class in (
        AppError,
        RequestValidationError,
        PydanticValidationError,
        InvalidId,
        DuplicateKeyError,
        PyMongoError,
        HTTPException,
        Exception,
    ):
        app.add_exception_handler(exc_class, handle)
