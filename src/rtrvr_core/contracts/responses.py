# -*- coding: utf-8 -*-
"""Response data structures for rtrvr-core."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import RunMode, SelectedMode


@dataclass
class RoutingMetadata:
    """How a routed call was executed.

    ``selected_mode`` is always concrete; ``requested_mode`` keeps the value
    the caller asked for, including ``auto``.
    """

    selected_mode: SelectedMode
    requested_mode: RunMode
    fallback_applied: bool = False
    fallback_reason: Optional[str] = None
    device_id: Optional[str] = None
    request_id: Optional[str] = None
    attempt: Optional[int] = None

    def __post_init__(self) -> None:
        self.selected_mode = SelectedMode(self.selected_mode)
        self.requested_mode = RunMode(self.requested_mode)

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase wire representation."""
        payload: Dict[str, Any] = {
            "selectedMode": self.selected_mode.value,
            "requestedMode": self.requested_mode.value,
            "fallbackApplied": self.fallback_applied,
        }
        if self.fallback_reason is not None:
            payload["fallbackReason"] = self.fallback_reason
        if self.device_id is not None:
            payload["deviceId"] = self.device_id
        if self.request_id is not None:
            payload["requestId"] = self.request_id
        if self.attempt is not None:
            payload["attempt"] = self.attempt
        return payload


@dataclass
class UnifiedRunResponse:
    """Routed call result: routing metadata plus the server payload."""

    metadata: RoutingMetadata
    data: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"metadata": self.metadata.to_dict(), "data": self.data}


UnifiedScrapeResponse = UnifiedRunResponse


@dataclass
class ResponseMeta:
    """Typed view of the ``metadata`` object attached to server responses."""

    request_id: Optional[str] = None
    attempt: Optional[int] = None
    tool: Optional[str] = None
    requested_tool: Optional[str] = None
    alias_used: Optional[bool] = None

    @classmethod
    def from_payload(cls, value: Any) -> "ResponseMeta":
        """Read a ``metadata`` object field by field; wrong types become None."""
        if not isinstance(value, dict):
            return cls()

        attempt = value.get("attempt")
        if isinstance(attempt, bool) or not isinstance(attempt, (int, float)):
            attempt = None
        elif isinstance(attempt, float) and not math.isfinite(attempt):
            attempt = None
        alias_used = value.get("aliasUsed")
        return cls(
            request_id=_string_or_none(value.get("requestId")),
            attempt=int(attempt) if attempt is not None else None,
            tool=_string_or_none(value.get("tool")),
            requested_tool=_string_or_none(value.get("requestedTool")),
            alias_used=alias_used if isinstance(alias_used, bool) else None,
        )

    @property
    def is_empty(self) -> bool:
        return self.request_id is None and self.attempt is None


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass
class ToolRunResult:
    """Hub tool call result with the metadata the router needs."""

    data: Any = None
    request_id: Optional[str] = None
    attempt: Optional[int] = None
    tool: Optional[str] = None
    requested_tool: Optional[str] = None
    alias_used: Optional[bool] = None


@dataclass
class DeviceInfo:
    """One extension endpoint known to the hub."""

    device_id: str
    name: Optional[str] = None
    last_seen: Optional[str] = None
    has_capability_token: Optional[bool] = None


@dataclass
class DeviceListResult:
    """Normalised ``list_devices`` result."""

    online: bool = False
    device_count: int = 0
    devices: List[DeviceInfo] = field(default_factory=list)

    @property
    def first_device_id(self) -> Optional[str]:
        return self.devices[0].device_id if self.devices else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "online": self.online,
            "deviceCount": self.device_count,
            "devices": [
                {
                    key: value
                    for key, value in (
                        ("deviceId", device.device_id),
                        ("deviceName", device.name),
                        ("lastSeen", device.last_seen),
                        ("hasFcmToken", device.has_capability_token),
                    )
                    if value is not None
                }
                for device in self.devices
            ],
        }
