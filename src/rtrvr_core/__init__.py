# -*- coding: utf-8 -*-
"""
rtrvr-core - Routing, Transport and Progress Streaming for rtrvr automation

Routes automation tasks to the managed cloud or to the user's browser
extension reached through the hub, retries transient failures, and streams
live progress events alongside each call.

Layers:
- Client Layer: RtrvrClient, RtrvrSdk
- Routing Layer: TaskRouter, CloudClient, payload translation
- Hub Layer: HubClient, DeviceDirectory, tool names
- Streaming Layer: SSE consumer, StreamSession orchestration
- Infrastructure Layer: HttpClient, fetchers, Settings, Logging
"""

__version__ = "0.1.0"

# Core components for public API
from rtrvr_core.client import RtrvrClient
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
)
from rtrvr_core.config import ClientConfig, RoutingConfig, Settings
from rtrvr_core.contracts import (
    RetryPolicy,
    RoutingMetadata,
    RunMode,
    SelectedMode,
    StreamEvent,
    UnifiedRunRequest,
    UnifiedRunResponse,
    UnifiedScrapeRequest,
)
from rtrvr_core.sdk import RtrvrSdk, create_rtrvr_client

__all__ = [
    "RtrvrClient",
    "RtrvrSdk",
    "create_rtrvr_client",
    "ClientConfig",
    "RoutingConfig",
    "RetryPolicy",
    "Settings",
    "UnifiedRunRequest",
    "UnifiedScrapeRequest",
    "UnifiedRunResponse",
    "RoutingMetadata",
    "RunMode",
    "SelectedMode",
    "StreamEvent",
    "RtrvrError",
    "TransportError",
    "OperationCancelled",
    "ValidationError",
    "AuthScopeError",
    "ToolExecutionError",
    "NoDeviceError",
    "LocalSessionUnavailableError",
    "StreamError",
    "__version__",
]
