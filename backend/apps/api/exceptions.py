from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings
from django.core.exceptions import (
    PermissionDenied as DjangoPermissionDenied,
    ValidationError as DjangoValidationError,
)
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    MethodNotAllowed,
    NotFound,
    ParseError,
    PermissionDenied,
    UnsupportedMediaType,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from apps.api.utils import problem_response
from apps.common import get_logger
from apps.common.errors import (
    ApplicationError,
    CategoryDeleteNotAllowedError,
    DuplicateNameError,
    EntityNotFoundError,
    PaginationOutOfRangeError,
    RepositoryOperationError,
    ValidationFailedError,
)

logger = get_logger(__name__).bind(component="api", layer="exception")

UNHANDLED_CODE = "UNHANDLED"

# Domain errors answered at INFO; anything else from ApplicationError at WARNING.
_EXPECTED_ERRORS = (
    ValidationFailedError,
    EntityNotFoundError,
    DuplicateNameError,
    CategoryDeleteNotAllowedError,
    PaginationOutOfRangeError,
)

STATUS_CODE_DEFAULTS: Dict[int, Tuple[str, str]] = {
    status.HTTP_400_BAD_REQUEST: ("VALIDATION_ERROR", "Validation Failed"),
    status.HTTP_401_UNAUTHORIZED: ("UNAUTHORIZED", "Unauthorized"),
    status.HTTP_403_FORBIDDEN: ("FORBIDDEN", "Forbidden"),
    status.HTTP_404_NOT_FOUND: ("NOT_FOUND", "Resource Not Found"),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", "Method Not Allowed"),
    status.HTTP_406_NOT_ACCEPTABLE: ("NOT_ACCEPTABLE", "Not Acceptable"),
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: (
        "UNSUPPORTED_MEDIA_TYPE",
        "Unsupported Media Type",
    ),
    status.HTTP_429_TOO_MANY_REQUESTS: ("TOO_MANY_REQUESTS", "Too Many Requests"),
}


def global_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """
    Single failure boundary for DRF views: every exception becomes a problem payload.
    """

    request = context.get("request")
    bound_logger = _bind_logger(context)

    if isinstance(exc, ApplicationError):
        return _from_application_error(exc, request, bound_logger)

    if isinstance(exc, DjangoValidationError):
        exc = ValidationError(_normalize_django_validation_error(exc))

    response = drf_exception_handler(exc, context)
    if response is not None:
        return _from_drf_exception(exc, response, request, bound_logger)

    bound_logger.exception(
        "Unhandled exception bubbled to global handler",
        code=UNHANDLED_CODE,
        exception=exc.__class__.__name__,
    )
    detail = str(exc) if _expose_details() else "An unexpected error occurred."
    return problem_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Unexpected Error",
        detail or "An unexpected error occurred.",
        UNHANDLED_CODE,
        instance=_instance(request),
        trace_id=_trace_id(request),
        extensions=_debug_extensions(exc),
    )


def _from_application_error(exc: ApplicationError, request, bound_logger) -> Response:
    level = logging.WARNING
    if isinstance(exc, _EXPECTED_ERRORS):
        level = logging.INFO
    if isinstance(exc, RepositoryOperationError) or exc.status_code >= 500:
        level = logging.ERROR
    bound_logger.log(
        level,
        f"[{exc.code}] {exc.message}",
        exc_info=exc if level >= logging.ERROR else None,
        code=exc.code,
        status=exc.status_code,
    )
    extensions = {**exc.extensions(), **_debug_extensions(exc)}
    return problem_response(
        exc.status_code,
        exc.title,
        exc.message,
        exc.code,
        instance=_instance(request),
        trace_id=_trace_id(request),
        errors=exc.errors,
        extensions=extensions,
    )


def _from_drf_exception(exc: Exception, response: Response, request, bound_logger) -> Response:
    status_code = response.status_code
    code, title = _code_and_title(exc, status_code)
    errors = _flatten_errors(response.data) if isinstance(exc, ValidationError) else None
    detail = _extract_detail(response.data, title)
    headers = {
        key: value
        for key, value in (response.headers.items() if getattr(response, "headers", None) else [])
        if key.lower() in {"allow", "retry-after", "www-authenticate"}
    }
    log = bound_logger.error if status_code >= 500 else bound_logger.info
    log("Converted API exception", code=code, status=status_code)
    return problem_response(
        status_code,
        title,
        detail,
        code,
        instance=_instance(request),
        trace_id=_trace_id(request),
        errors=errors,
        headers=headers or None,
    )


def _code_and_title(exc: Exception, status_code: int) -> Tuple[str, str]:
    if isinstance(exc, ValidationError):
        return "VALIDATION_ERROR", "Validation Failed"
    if isinstance(exc, ParseError):
        return "MALFORMED_REQUEST", "Malformed Request"
    if isinstance(exc, (NotFound, Http404)):
        return "NOT_FOUND", "Resource Not Found"
    if isinstance(exc, MethodNotAllowed):
        return "METHOD_NOT_ALLOWED", "Method Not Allowed"
    if isinstance(exc, UnsupportedMediaType):
        return "UNSUPPORTED_MEDIA_TYPE", "Unsupported Media Type"
    if isinstance(exc, (PermissionDenied, DjangoPermissionDenied)):
        return "FORBIDDEN", "Forbidden"
    if status_code >= 500:
        return UNHANDLED_CODE, "Unexpected Error"
    return STATUS_CODE_DEFAULTS.get(status_code, ("REQUEST_ERROR", "Request Error"))


def _flatten_errors(payload: Any, prefix: str = "") -> List[str]:
    """Turn DRF's nested error structure into ``"field: message"`` strings."""
    if isinstance(payload, dict):
        out: List[str] = []
        for key, value in payload.items():
            field = f"{prefix}.{key}" if prefix else str(key)
            if field == "non_field_errors":
                field = ""
            out.extend(_flatten_errors(value, field))
        return out
    if isinstance(payload, list):
        out = []
        for index, item in enumerate(payload):
            if isinstance(item, (dict, list)):
                out.extend(_flatten_errors(item, f"{prefix}[{index}]"))
            else:
                out.extend(_flatten_errors(item, prefix))
        return out
    message = str(payload)
    return [f"{prefix}: {message}" if prefix else message]


def _normalize_django_validation_error(exc: DjangoValidationError):
    if hasattr(exc, "message_dict"):
        return exc.message_dict
    if hasattr(exc, "messages"):
        return list(exc.messages)
    return {"detail": getattr(exc, "message", "Validation failed")}


def _extract_detail(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, str):
            return detail
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (dict, list)):
        return "One or more validation errors occurred."
    return fallback


def _expose_details() -> bool:
    return bool(getattr(settings, "API_EXPOSE_EXCEPTION_DETAILS", settings.DEBUG))


def _debug_extensions(exc: Exception) -> Dict[str, Any]:
    if not _expose_details():
        return {}
    return {
        "exception": exc.__class__.__name__,
        "stackTrace": "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    }


def _instance(request) -> Optional[str]:
    return getattr(request, "path", None) if request is not None else None


def _trace_id(request) -> Optional[str]:
    if request is None:
        return None
    return getattr(request, "trace_id", None)


def _bind_logger(context: Dict[str, Any]):
    log = logger
    view = context.get("view")
    request = context.get("request")
    if view:
        log = log.bind(view=type(view).__name__)
    if request is not None:
        log = log.bind(
            method=getattr(request, "method", None),
            path=getattr(request, "path", None),
            trace_id=_trace_id(request),
        )
    return log


__all__ = ["ApplicationError", "global_exception_handler"]
