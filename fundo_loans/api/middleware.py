"""FastAPI middleware for request tracing and metrics"""

import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from fundo_loans.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate the caller's request ID, or assign one, for log correlation"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def endpoint_label(request: Request) -> str:
    """
    Full route template for a matched request, e.g. /api/loans/{loan_id}/payment.

    The matched route may only know its path relative to the router prefix,
    so the template is aligned with the tail of the request path and the
    remaining leading segments are kept as the prefix. Loan ids never reach
    the label.
    """
    template = getattr(request.scope.get("route"), "path", None)
    if not template:
        return "unmatched"

    template_parts = template.strip("/").split("/")
    path_parts = request.url.path.strip("/").split("/")
    if len(path_parts) < len(template_parts):
        return template

    prefix = path_parts[: len(path_parts) - len(template_parts)]
    return "/" + "/".join(prefix + template_parts)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request latency per route template"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint_label(request),
            status=response.status_code,
        ).observe(time.perf_counter() - start_time)

        return response
