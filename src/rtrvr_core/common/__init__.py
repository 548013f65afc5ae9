"""Common utilities module for rtrvr-core."""

from rtrvr_core.common.constants import (
    DEFAULT_CLOUD_BASE_URL,
    DEFAULT_CONTROL_BASE_URL,
    DEFAULT_MCP_BASE_URL,
    DEFAULT_TIMEOUT,
)
from rtrvr_core.common.exceptions import (
    AuthScopeError,
    LocalSessionUnavailableError,
    NoDeviceError,
    OperationCancelled,
    RtrvrError,
    StreamError,
    ToolExecutionError,
    TransportError,
    ValidationError,
    is_no_device_error,
    is_supported_auth_token,
    is_unknown_tool_error,
)

__all__ = [
    "RtrvrError",
    "TransportError",
    "OperationCancelled",
    "ValidationError",
    "AuthScopeError",
    "ToolExecutionError",
    "NoDeviceError",
    "LocalSessionUnavailableError",
    "StreamError",
    "is_no_device_error",
    "is_unknown_tool_error",
    "is_supported_auth_token",
    "DEFAULT_CLOUD_BASE_URL",
    "DEFAULT_MCP_BASE_URL",
    "DEFAULT_CONTROL_BASE_URL",
    "DEFAULT_TIMEOUT",
]
