"""
PATH: backend/exceptions.py

DRF EXCEPTION HANDLER

Maps framework exceptions onto the error envelope:
- ValidationError           -> 422 VALIDATION_ERROR (+ field "errors")
- Http404 / NotFound        -> 404 NOT_FOUND
- PermissionDenied          -> 403 FORBIDDEN
- NotAuthenticated / bad JWT -> 401 UNAUTHENTICATED
- Throttled                 -> 429 THROTTLED
- MethodNotAllowed etc.     -> original status, generic code

Anything DRF does not recognise is left for Django (500) after logging.
"""

from __future__ import annotations

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

from backend.responses import error_response

logger = logging.getLogger(__name__)


def _first_message(detail) -> str:
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return "Invalid input."
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid input."
    return str(detail)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled API error",
            extra={"view": view.__class__.__name__ if view else None},
        )
        return None

    if isinstance(exc, exceptions.ValidationError):
        detail = exc.detail
        errors = detail if isinstance(detail, dict) else {"non_field_errors": detail}
        return error_response(
            code="VALIDATION_ERROR",
            message=_first_message(detail),
            http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            errors=errors,
        )

    if isinstance(exc, (Http404, exceptions.NotFound)):
        return error_response(
            code="NOT_FOUND",
            message="Resource not found.",
            http_status=status.HTTP_404_NOT_FOUND,
        )

    if isinstance(exc, (exceptions.PermissionDenied, DjangoPermissionDenied)):
        return error_response(
            code="FORBIDDEN",
            message=_first_message(getattr(exc, "detail", None) or "Forbidden."),
            http_status=status.HTTP_403_FORBIDDEN,
        )

    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        return error_response(
            code="UNAUTHENTICATED",
            message=_first_message(exc.detail),
            http_status=status.HTTP_401_UNAUTHORIZED,
        )

    if isinstance(exc, exceptions.Throttled):
        return error_response(
            code="THROTTLED",
            message=_first_message(exc.detail),
            http_status=status.HTTP_429_TOO_MANY_REQUESTS,
            retry_after=exc.wait,
        )

    code = getattr(exc, "default_code", "error")
    return error_response(
        code=str(code).upper(),
        message=_first_message(getattr(exc, "detail", str(exc))),
        http_status=response.status_code,
    )
