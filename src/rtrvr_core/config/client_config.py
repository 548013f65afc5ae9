# -*- coding: utf-8 -*-
"""Immutable construction-time configuration for a client instance."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional
from urllib.parse import urlparse

from ..common.constants import (
    DEFAULT_CLOUD_BASE_URL,
    DEFAULT_CONTROL_BASE_URL,
    DEFAULT_MCP_BASE_URL,
    DEFAULT_STREAM_RETRY_INTERVAL,
    DEFAULT_STREAM_STARTUP_GRACE,
    DEFAULT_TIMEOUT,
)
from ..common.utils import trim_trailing_slash
from ..contracts import RetryPolicy
from .routing_config import RoutingConfig

if TYPE_CHECKING:
    from .settings import Settings


@dataclass(frozen=True)
class ClientConfig:
    """Base URLs, timeouts, retry policy and routing defaults.

    Instances are frozen so one configuration can be shared by concurrent,
    independent calls.

    Attributes:
        cloud_base_url: Root of the cloud ``/agent`` and ``/scrape`` endpoints
        mcp_base_url: Hub endpoint for tool calls and the progress stream
        control_base_url: Root of the ``/cli/*`` control-plane endpoints
        timeout: Internal per-request timeout in seconds
        retry_policy: Retry and backoff policy (normalised on construction)
        default_headers: Headers added to every JSON request
        routing: Routing defaults
        stream_startup_grace: Seconds during which "not ready" stream statuses
            trigger a reconnect
        stream_retry_interval: Seconds to wait between those reconnects
    """

    cloud_base_url: str = DEFAULT_CLOUD_BASE_URL
    mcp_base_url: str = DEFAULT_MCP_BASE_URL
    control_base_url: str = DEFAULT_CONTROL_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    default_headers: Mapping[str, str] = field(default_factory=dict)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    stream_startup_grace: float = DEFAULT_STREAM_STARTUP_GRACE
    stream_retry_interval: float = DEFAULT_STREAM_RETRY_INTERVAL

    def __post_init__(self) -> None:
        for name in ("cloud_base_url", "mcp_base_url", "control_base_url"):
            value = getattr(self, name)
            self._validate_url(name, value)
            object.__setattr__(self, name, trim_trailing_slash(value.strip()))

        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")

        object.__setattr__(self, "retry_policy", self.retry_policy.normalized())
        object.__setattr__(
            self,
            "default_headers",
            MappingProxyType({str(k): str(v) for k, v in self.default_headers.items()}),
        )

    @staticmethod
    def _validate_url(name: str, value: Optional[str]) -> None:
        if not value or not value.strip():
            raise ValueError(f"{name} cannot be empty")

        parsed_url = urlparse(value.strip())
        if parsed_url.scheme not in ("http", "https"):
            raise ValueError(f"{name} scheme must be http or https")
        if not parsed_url.netloc:
            raise ValueError(f"{name} must include a host")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ClientConfig":
        """Create configuration from application settings."""
        return cls(
            cloud_base_url=settings.cloud_base_url,
            mcp_base_url=settings.mcp_base_url,
            control_base_url=settings.control_base_url,
            timeout=settings.timeout_seconds,
            retry_policy=RetryPolicy.create(
                max_attempts=settings.retry_max_attempts,
                base_delay_ms=settings.retry_base_delay_ms,
                max_delay_ms=settings.retry_max_delay_ms,
                retriable_status_codes=settings.retry_status_codes,
            ),
            routing=RoutingConfig(
                default_target=settings.default_target,
                prefer_extension_by_default=settings.prefer_extension_by_default,
            ),
            stream_startup_grace=settings.event_stream_startup_grace_seconds,
            stream_retry_interval=settings.event_stream_retry_interval_seconds,
        )
