"""Access log with a per-request correlation id.

The id is taken from an incoming X-Request-ID header (truncated to 64 chars) or
generated as "req_" + 12 hex digits. It is stored on request.state for the error
handlers and returned in the response header. One line per request:

    INFO pm.request: POST /wagers 201 23ms req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("pm.request")

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LEN = 64


def _request_id(request: Request) -> str:
    supplied = request.headers.get(REQUEST_ID_HEADER)
    if supplied:
        return supplied[:_MAX_REQUEST_ID_LEN]
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.state.request_id = _request_id(request)
        started = time.perf_counter()
        response = await call_next(request)
        took_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        # 5xx bodies are already logged with a traceback by the error handler
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s %d %.0fms %s",
            request.method,
            request.url.path,
            response.status_code,
            took_ms,
            request_id,
        )
        return response
