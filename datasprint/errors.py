"""Application errors and the JSON envelope every failure is rendered with."""

import logging
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from datasprint.config import settings

LOGGER = logging.getLogger(__name__)

_STATUS_LABELS = {
    status.HTTP_400_BAD_REQUEST: "Bad Request",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "Not Found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method Not Allowed",
    status.HTTP_409_CONFLICT: "Conflict",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
}

_DETAIL_PAGES = {
    status.HTTP_403_FORBIDDEN: {
        "title": "403 - Forbidden",
        "description": "You do not have permission to access this resource.",
        "suggestions": [
            "Check if you are logged in with the correct account",
            "Verify that you have the necessary permissions",
            "Contact an administrator if you believe this is an error",
        ],
    },
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "title": "500 - Internal Server Error",
        "description": "Something went wrong on our end. We are working to fix it.",
        "suggestions": [
            "Try again in a few moments",
            "If the problem persists, contact support",
        ],
    },
}


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation Error"
    default_message = "Invalid request"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    default_message = "Authentication required"


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_message = "Access forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"
    default_message = "Record not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"
    default_message = "A record with this value already exists"


class InternalError(AppError):
    pass


def error_envelope(
    status_code: int, error: str, message: str, request: Request
) -> dict:
    body = {
        "success": False,
        "statusCode": status_code,
        "error": error,
        "message": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
        "method": request.method,
    }
    if status_code in _DETAIL_PAGES:
        body["details"] = _DETAIL_PAGES[status_code]
    return body


def _json(body: dict, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=body["statusCode"], content=body, headers=headers)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _json(error_envelope(exc.status_code, exc.error, exc.message, request))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    label = _STATUS_LABELS.get(exc.status_code, "Error")
    message = exc.detail if isinstance(exc.detail, str) else label
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    return _json(
        error_envelope(exc.status_code, label, message, request),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    body = error_envelope(
        status.HTTP_400_BAD_REQUEST, "Validation Error", "Invalid request body", request
    )
    body["details"] = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return _json(body)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
    body = error_envelope(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "Something went wrong",
        request,
    )
    if settings.is_development:
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return _json(body)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
