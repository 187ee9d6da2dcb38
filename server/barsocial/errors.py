"""Application errors and the centralized error responder.

Every failure that reaches the client has the same JSON shape::

    {"message": "...", "status": 404}

`APIError` marks an operational (expected) failure. Anything else is treated
as a crash: logged with its traceback and answered with a bare 500.
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorMessages:
    USER_NOT_FOUND = "User not found"
    BAR_NOT_FOUND = "Bar not found"
    ERROR_ON_FOLLOW_USER = "Error following the user"
    ERROR_ON_UNFOLLOW_USER = "Error unfollowing the user"
    ERROR_ON_FOLLOW_BAR = "Error following the bar"
    ERROR_ON_UNFOLLOW_BAR = "Error unfollowing the bar"
    ERROR_ON_FOLLOW_TEAM = "Error adding the favorite team"
    ERROR_ON_UNFOLLOW_TEAM = "Error removing the favorite team"
    CANNOT_FOLLOW_SELF = "A user cannot follow itself"
    MISSING_TOKEN = "No authorization token was found"
    INVALID_TOKEN = "Invalid authorization token"
    FORBIDDEN_USER = "You are not allowed to modify this user"
    DUPLICATE_KEY = "Duplicate key"
    RATE_LIMITED = "Rate limit exceeded. Try again later."


class APIError(Exception):
    """Operational error carrying the HTTP status sent to the client.

    When `is_public` is false the message stays in the logs and the client only
    sees the reason phrase of the status.
    """

    def __init__(self, message: str, status: int = 500, is_public: bool = False):
        super().__init__(message)
        self.message = message
        self.status = status
        self.is_public = is_public

    def to_dict(self):
        message = self.message if self.is_public else HTTPStatus(self.status).phrase
        return {"message": message, "status": self.status}


class NotFoundError(APIError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, 404, True)


class ValidationError(APIError):
    def __init__(self, message: str):
        super().__init__(message, 400, True)


class AuthError(APIError):
    def __init__(self, message: str = ErrorMessages.INVALID_TOKEN, status: int = 401):
        super().__init__(message, status, True)


def error_response(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"message": message, "status": status})


def _format_validation_errors(errors) -> str:
    parts = []
    for err in errors:
        # drop the leading "body"/"query"/"path" segment
        location = ".".join(str(p) for p in err.get("loc", ())[1:])
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


async def api_error_handler(request: Request, exc: APIError):
    if exc.status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(_format_validation_errors(exc.errors()))
    return JSONResponse(status_code=error.status, content=error.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    logger.warning(f"Duplicate key on {request.method} {request.url.path}: {exc}")
    return error_response(409, ErrorMessages.DUPLICATE_KEY)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, HTTPStatus.INTERNAL_SERVER_ERROR.phrase)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
