"""Unified API response wrapper.

All API endpoints return this format:
{
    "ok": true,              // discriminator
    "code": 0,               // 0=success, non-0=error code
    "message": "success",
    "error_kind": null,      // stable kind on error, e.g. "NOT_FOUND"
    "data": [ ... ],         // null on error
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    ok: bool = True
    code: int = 0
    message: str = "success"
    error_kind: str | None = None
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(ok=True, code=0, message="success", data=data)


def error_response(code: int, message: str, error_kind: str) -> ApiResponse:
    return ApiResponse(ok=False, code=code, message=message, error_kind=error_kind, data=None)
