"""Custom exceptions for rtrvr-core."""

from typing import Any, Dict, Optional

from rtrvr_core.common.constants import CLOUD_TOKEN_PREFIX, HUB_TOKEN_PREFIX
from rtrvr_core.contracts.errors import ErrorCode, build_error


class RtrvrError(Exception):
    """Base exception class for rtrvr-core.

    Carries the optional HTTP status, request id, error code and structured
    details so machine consumers can inspect failures without parsing the
    message.
    """

    default_code: Optional[ErrorCode] = None

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        request_id: Optional[str] = None,
        code: Optional[str] = None,
        details: Any = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.request_id = request_id
        if code is None and self.default_code is not None:
            code = self.default_code.value
        self.code = code
        self.details = details
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable representation of the error."""
        payload = build_error(
            self.code or ErrorCode.INTERNAL_ERROR,
            self.message,
            source=type(self).__name__,
            status=self.status,
            request_id=self.request_id,
            details={"payload": self.details} if self.details is not None else None,
        )
        return payload.to_dict()


class TransportError(RtrvrError):
    """Raised when a request fails at the network or HTTP level."""

    default_code = ErrorCode.TRANSPORT_HTTP

    def __init__(self, message: str, **kwargs: Any):
        if kwargs.get("status") is None and kwargs.get("code") is None:
            kwargs["code"] = ErrorCode.TRANSPORT_NETWORK.value
        super().__init__(message, **kwargs)


class OperationCancelled(TransportError):
    """Raised when a caller-supplied cancel event fires mid-request."""

    default_code = ErrorCode.CANCELLED

    def __init__(self, message: str = "Request was cancelled.", **kwargs: Any):
        kwargs.setdefault("code", ErrorCode.CANCELLED.value)
        super().__init__(message, **kwargs)


class ValidationError(RtrvrError):
    """Raised when a request is missing required fields."""

    default_code = ErrorCode.REQUEST_VALIDATION


class AuthScopeError(RtrvrError):
    """Raised when the auth token cannot be used for an endpoint class."""

    default_code = ErrorCode.AUTH_SCOPE


class ToolExecutionError(RtrvrError):
    """Raised when the hub reports an unsuccessful tool call."""

    default_code = ErrorCode.TOOL_EXECUTION


class NoDeviceError(RtrvrError):
    """Raised when no extension device is online for a local-only call."""

    default_code = ErrorCode.DEVICE_UNAVAILABLE


class LocalSessionUnavailableError(RtrvrError):
    """Raised when the hub resolves a local-only call to its cloud variant."""

    default_code = ErrorCode.LOCAL_SESSION_REQUIRED


class StreamError(RtrvrError):
    """Raised when the progress event stream cannot be consumed."""

    default_code = ErrorCode.STREAM_INTERRUPTED


_NO_DEVICE_PHRASES = ("no online chrome extension", "no online extension")
_UNKNOWN_TOOL_PHRASES = ("unknown tool", "tool not found", "invalid tool")


def is_no_device_error(error: BaseException) -> bool:
    """Return True when the error message says the extension device is unavailable.

    The hub does not emit a structured code for this condition, so the check
    matches known message shapes.
    """
    if not isinstance(error, Exception):
        return False

    message = str(error).lower()
    if any(phrase in message for phrase in _NO_DEVICE_PHRASES):
        return True
    if "no online" in message and "device" in message:
        return True
    return "device" in message and ("not online" in message or "not found" in message)


def is_unknown_tool_error(error: BaseException) -> bool:
    """Return True when the error message says the hub does not know the tool."""
    if not isinstance(error, Exception):
        return False

    message = str(error).lower()
    return any(phrase in message for phrase in _UNKNOWN_TOOL_PHRASES)


def is_supported_auth_token(value: Optional[str]) -> bool:
    """Check whether a token carries one of the accepted prefixes."""
    if not isinstance(value, str):
        return False
    return value.startswith(CLOUD_TOKEN_PREFIX) or value.startswith(HUB_TOKEN_PREFIX)
