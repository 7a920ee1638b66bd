"""Error body returned by every failing endpoint.

Successful endpoints return their resource JSON directly (or 204 with no body).
Failures always look like:

    {"error": "Conflict", "code": 4001, "message": "...",
     "timestamp": "2026-01-01T00:00:00+00:00", "request_id": "req_..."}

"error" is the HTTP category name, "code" the AppError code from pm_common.errors.
"""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ErrorResponse(BaseModel):
    error: str
    code: int
    message: str
    timestamp: str = Field(default_factory=_now_iso)
    request_id: str = Field(default_factory=_new_request_id)


def error_response(error: str, code: int, message: str, request_id: str | None = None) -> ErrorResponse:
    if request_id is None:
        return ErrorResponse(error=error, code=code, message=message)
    return ErrorResponse(error=error, code=code, message=message, request_id=request_id)
