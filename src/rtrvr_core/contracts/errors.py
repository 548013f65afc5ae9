# -*- coding: utf-8 -*-
"""Error code registry and helpers for rtrvr-core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class ErrorCode(str, Enum):
    """Canonical error codes attached to raised errors."""

    INTERNAL_ERROR = "internal.error"
    REQUEST_VALIDATION = "request.validation"
    AUTH_SCOPE = "auth.scope"
    TRANSPORT_NETWORK = "transport.network"
    TRANSPORT_HTTP = "transport.http"
    CANCELLED = "transport.cancelled"
    TOOL_EXECUTION = "tool.execution"
    DEVICE_UNAVAILABLE = "device.unavailable"
    LOCAL_SESSION_REQUIRED = "routing.local_session_required"
    STREAM_INTERRUPTED = "stream.interrupted"


@dataclass
class ErrorPayload:
    """Machine-readable view of a raised error.

    ``status`` and ``request_id`` are only set for errors that reached the
    server; ``details`` carries the raw server payload or routing context.
    """

    code: str
    message: str
    source: Optional[str] = None
    status: Optional[int] = None
    request_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase wire representation, empty fields omitted."""
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.source:
            payload["source"] = self.source
        if self.status is not None:
            payload["status"] = self.status
        if self.request_id:
            payload["requestId"] = self.request_id
        if self.details:
            payload["details"] = self.details
        return payload


def build_error(
    code: Union[ErrorCode, str],
    message: str,
    *,
    source: Optional[str] = None,
    status: Optional[int] = None,
    request_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorPayload:
    return ErrorPayload(
        code=code.value if isinstance(code, ErrorCode) else str(code),
        message=message,
        source=source,
        status=status,
        request_id=request_id,
        details=dict(details or {}),
    )
