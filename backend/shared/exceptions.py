from __future__ import annotations

import logging
from typing import Any, Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error carrying the HTTP status it should be rendered with."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."
    error_type = "ApplicationError"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None, details: Any = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed."
    error_type = "ValidationError"


class AuthenticationRequired(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication credentials were not provided."
    error_type = "AuthenticationError"


class PermissionDenied(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action."
    error_type = "AuthorizationError"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."
    error_type = "NotFoundError"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error."
    error_type = "InternalError"


ERROR_TYPES = {
    status.HTTP_400_BAD_REQUEST: ValidationFailed.error_type,
    status.HTTP_401_UNAUTHORIZED: AuthenticationRequired.error_type,
    status.HTTP_403_FORBIDDEN: PermissionDenied.error_type,
    status.HTTP_404_NOT_FOUND: NotFound.error_type,
}


def failure_response(message: str, status_code: int, *, error_type: Optional[str] = None, details: Any = None, headers=None) -> Response:
    payload = {
        "success": False,
        "message": message,
        "error": error_type or ERROR_TYPES.get(status_code, InternalError.error_type),
    }
    if details:
        payload["details"] = details
    return Response(payload, status=status_code, headers=headers)


def _first_message(data: Any) -> str:
    if isinstance(data, dict):
        if "detail" in data:
            return str(data["detail"])
        for field, value in data.items():
            inner = _first_message(value)
            if field == "non_field_errors":
                return inner
            return f"{field}: {inner}"
        return "Validation failed."
    if isinstance(data, (list, tuple)):
        return _first_message(data[0]) if data else "Validation failed."
    return str(data)


def envelope_exception_handler(exc, context):
    """Render every error raised inside an API view as ``{success: false, message, error}``."""
    if isinstance(exc, AppError):
        if exc.status_code >= 500:
            logger.error("Application error in %s: %s", _view_name(context), exc.message)
        return failure_response(exc.message, exc.status_code, error_type=exc.error_type, details=exc.details)

    response = drf_exception_handler(exc, context)
    if response is not None:
        details = response.data if isinstance(response.data, (dict, list)) and "detail" not in response.data else None
        return failure_response(
            _first_message(response.data),
            response.status_code,
            details=details,
            headers={key: response[key] for key in ("WWW-Authenticate", "Retry-After") if response.has_header(key)},
        )

    logger.exception("Unhandled error in %s", _view_name(context))
    return failure_response(InternalError.default_message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def _view_name(context) -> str:
    view = (context or {}).get("view")
    return view.__class__.__name__ if view is not None else "unknown view"
