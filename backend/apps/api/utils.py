from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional

from rest_framework import status
from rest_framework.response import Response

PROBLEM_CONTENT_TYPE = "application/problem+json"


def envelope_response(
    data: Any = None,
    message: str = "",
    http_status: int = status.HTTP_200_OK,
    *,
    success: bool = True,
    errors: Optional[Iterable[str]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Response:
    """
    Wrap a payload in the uniform ``{success, message, data, errors}`` envelope.

    Args:
        data: Already-serialized payload, or None.
        message: Human-readable summary of the outcome.
        http_status: Status code of the response.
        success: False for client errors answered without raising.
        errors: Optional list of error strings.
        headers: Optional response headers.
    """

    if not isinstance(message, str):
        raise TypeError("envelope_response requires message to be a string")
    payload: Dict[str, Any] = {
        "success": bool(success),
        "message": message,
        "data": data,
        "errors": list(errors) if errors is not None else None,
    }
    return Response(payload, status=http_status, headers=dict(headers) if headers else None)


def problem_response(
    http_status: int,
    title: str,
    detail: str,
    code: str,
    *,
    instance: Optional[str] = None,
    trace_id: Optional[str] = None,
    errors: Optional[Iterable[str]] = None,
    extensions: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Response:
    """
    Return a problem-details payload with a machine-readable ``code``.

    Extension keys never overwrite the standard members.
    """

    if not isinstance(code, str) or not code.strip():
        raise ValueError("problem_response requires a non-empty code")
    if not 100 <= int(http_status) <= 599:
        raise ValueError("problem_response status must be a valid HTTP status code")
    if extensions is not None and not isinstance(extensions, Mapping):
        raise TypeError("problem_response extensions must be a mapping if provided")

    payload: Dict[str, Any] = {
        "title": title,
        "status": int(http_status),
        "detail": detail,
        "instance": instance,
        "code": code.strip().upper(),
        "traceId": trace_id,
    }
    if errors is not None:
        payload["errors"] = list(errors)
    for key, value in (extensions or {}).items():
        payload.setdefault(str(key), value)

    headers_dict = (
        {str(key): str(value) for key, value in headers.items()} if headers else None
    )
    return Response(
        payload,
        status=int(http_status),
        headers=headers_dict,
        content_type=PROBLEM_CONTENT_TYPE,
    )
