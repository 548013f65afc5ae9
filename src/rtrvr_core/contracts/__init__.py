# -*- coding: utf-8 -*-
"""Data contracts for rtrvr-core.

This module contains the data structures exchanged between the client layers:

- requests.py: Request data structures (AgentRequest, ScrapeRequest,
  UnifiedRunRequest, UnifiedScrapeRequest, ToolRequest)
- responses.py: Response data structures (RoutingMetadata, UnifiedRunResponse,
  DeviceListResult, ToolRunResult)
- configs.py: Configuration data structures (RetryPolicy)
- enums.py: Enumerations (RunMode, SelectedMode, ResponseVerbosity)
- streaming.py: Progress stream data structures (StreamEvent)
- payloads.py: Payload size policy helpers (PayloadRef)
- errors.py: Error code registry (ErrorCode, ErrorPayload)
"""

from .configs import RetryPolicy
from .enums import ResponseVerbosity, RunMode, SelectedMode
from .errors import ErrorCode, ErrorPayload, build_error
from .payloads import PayloadRef, extract_payload_ref
from .requests import (
    AgentRequest,
    BasicWebhookAuth,
    BearerWebhookAuth,
    CloudFile,
    ExtensionPlannerRequest,
    ResponseOptions,
    ScrapeRequest,
    ToolRequest,
    UnifiedRunRequest,
    UnifiedScrapeRequest,
    WebhookSubscription,
)
from .responses import (
    DeviceInfo,
    DeviceListResult,
    ResponseMeta,
    RoutingMetadata,
    ToolRunResult,
    UnifiedRunResponse,
    UnifiedScrapeResponse,
)
from .streaming import StreamEvent, StreamEventHandler

__all__ = [
    # Request types
    "AgentRequest",
    "ScrapeRequest",
    "UnifiedRunRequest",
    "UnifiedScrapeRequest",
    "ExtensionPlannerRequest",
    "ToolRequest",
    "CloudFile",
    "WebhookSubscription",
    "BearerWebhookAuth",
    "BasicWebhookAuth",
    "ResponseOptions",
    # Response types
    "RoutingMetadata",
    "UnifiedRunResponse",
    "UnifiedScrapeResponse",
    "ResponseMeta",
    "ToolRunResult",
    "DeviceInfo",
    "DeviceListResult",
    # Configuration types
    "RetryPolicy",
    # Streaming types
    "StreamEvent",
    "StreamEventHandler",
    # Payload policy
    "PayloadRef",
    "extract_payload_ref",
    # Errors
    "ErrorCode",
    "ErrorPayload",
    "build_error",
    # Enums
    "RunMode",
    "SelectedMode",
    "ResponseVerbosity",
]
