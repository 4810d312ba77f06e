import re
import uuid

from django.utils.deprecation import MiddlewareMixin

from apps.common import get_logger

logger = get_logger(__name__).bind(component="api", layer="middleware")

TRACE_HEADER = "X-Request-ID"
_VALID_TRACE_ID = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


class RequestContextMiddleware(MiddlewareMixin):
    """
    Attaches a trace id to every request so log lines and problem payloads
    can be correlated. An incoming ``X-Request-ID`` is reused when well formed.
    """

    def process_request(self, request):
        incoming = request.headers.get(TRACE_HEADER)
        if incoming and _VALID_TRACE_ID.match(incoming):
            request.trace_id = incoming
        else:
            request.trace_id = uuid.uuid4().hex
        logger.debug(
            "Request received",
            method=request.method,
            path=request.path,
            trace_id=request.trace_id,
        )

    def process_response(self, request, response):
        trace_id = getattr(request, "trace_id", None)
        if trace_id:
            response[TRACE_HEADER] = trace_id
        logger.debug(
            "Request completed",
            method=getattr(request, "method", None),
            path=getattr(request, "path", None),
            status=getattr(response, "status_code", None),
            trace_id=trace_id,
        )
        return response
