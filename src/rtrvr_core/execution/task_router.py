# -*- coding: utf-8 -*-
"""Task Router - cloud / extension channel selection and execution."""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from ..common.exceptions import (
    LocalSessionUnavailableError,
    NoDeviceError,
    ValidationError,
    is_no_device_error,
)
from ..common.utils import has_text
from ..config.routing_config import RoutingConfig
from ..contracts import (
    DeviceListResult,
    ExtensionPlannerRequest,
    RoutingMetadata,
    RunMode,
    SelectedMode,
    ToolRequest,
    ToolRunResult,
    UnifiedRunRequest,
    UnifiedRunResponse,
    UnifiedScrapeRequest,
    UnifiedScrapeResponse,
)
from ..tools import TOOL_NAMES, DeviceDirectory, HubClient
from .cloud_client import CloudClient, validate_scrape_urls
from .payload_builders import (
    build_extension_scrape_params,
    build_planner_params,
    extract_response_meta,
    to_agent_request,
    to_extension_planner_request,
)

_RequestT = TypeVar("_RequestT", bound=Union[UnifiedRunRequest, UnifiedScrapeRequest])


@dataclass
class ExtensionOutcome:
    """Result of one extension tool call, with the channel that really ran it."""

    data: Any
    selected_mode: SelectedMode
    fallback_reason: Optional[str] = None
    request_id: Optional[str] = None
    attempt: Optional[int] = None


@dataclass(frozen=True)
class _RouteKind:
    """Per-operation wording for routing errors and fallback reasons."""

    label: str
    cloud_endpoint: str
    extension_name: str


_RUN = _RouteKind(label="run", cloud_endpoint="/agent", extension_name="Extension planner")
_SCRAPE = _RouteKind(
    label="scrape", cloud_endpoint="/scrape", extension_name="Extension scrape adapter"
)


class TaskRouter:
    """
    TaskRouter picks the execution channel for each call and executes it.

    Decisions are made per call with no state carried between calls:

    - ``cloud``: the cloud endpoint is called directly.
    - ``extension``: the extension tool is called directly; a server-side
      alias to the cloud variant is reported, never retried.
    - ``auto`` with a hard local-session requirement (``require_local_session``
      or an explicit ``device_id``): the extension must run the call, and a
      cloud alias is an error.
    - ``auto`` otherwise: the extension is tried when devices are online, and
      a device-unavailable failure falls back to the cloud.
    """

    def __init__(
        self,
        cloud: CloudClient,
        hub: HubClient,
        devices: DeviceDirectory,
        routing_config: Optional[RoutingConfig] = None,
    ):
        """
        Initialize task router.

        Args:
            cloud: Cloud endpoint client
            hub: Hub tool client
            devices: Device directory used for the online check
            routing_config: Routing defaults
        """
        self.cloud = cloud
        self.hub = hub
        self.devices = devices
        self.routing_config = routing_config or RoutingConfig()
        self.logger = logging.getLogger(__name__)

    async def run(
        self,
        request: UnifiedRunRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> UnifiedRunResponse:
        """
        Route an agent run to the cloud ``/agent`` endpoint or the planner tool.

        Raises:
            ValidationError: When ``input`` is empty
            NoDeviceError: When a local session is required but no device is online
            LocalSessionUnavailableError: When a required local session was
                resolved to the cloud by the hub
        """
        if not has_text(request.input):
            raise ValidationError("`input` is required.")
        request = self._apply_routing_defaults(request)

        async def run_cloud() -> Any:
            return await self.cloud.agent_run(to_agent_request(request), cancel_event)

        async def run_extension() -> ExtensionOutcome:
            return await self._run_planner(request, cancel_event)

        return await self._route(
            _RUN,
            request.target,
            request.device_id,
            request.require_local_session,
            run_cloud,
            run_extension,
            cancel_event,
        )

    async def scrape(
        self,
        request: UnifiedScrapeRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> UnifiedScrapeResponse:
        """
        Route a scrape to the cloud ``/scrape`` endpoint or the extension ``scrape`` tool.

        Raises:
            ValidationError: When ``urls`` is empty
            NoDeviceError: When a local session is required but no device is online
            LocalSessionUnavailableError: When a required local session was
                resolved to the cloud by the hub
        """
        validate_scrape_urls(request)
        request = self._apply_routing_defaults(request)

        async def run_cloud() -> Any:
            return await self.cloud.scrape_run(request, cancel_event)

        async def run_extension() -> ExtensionOutcome:
            return await self._run_extension_scrape(request, cancel_event)

        return await self._route(
            _SCRAPE,
            request.target,
            request.device_id,
            request.require_local_session,
            run_cloud,
            run_extension,
            cancel_event,
        )

    async def run_extension_planner(
        self,
        request: ExtensionPlannerRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ToolRunResult:
        """Execute the planner tool through the hub."""
        return await self.hub.run_tool_with_metadata(
            ToolRequest(
                tool=TOOL_NAMES.PLANNER,
                params=build_planner_params(request),
                device_id=request.device_id,
            ),
            cancel_event,
        )

    async def _route(
        self,
        kind: _RouteKind,
        target: Optional[RunMode],
        device_id: Optional[str],
        require_local_session: Optional[bool],
        run_cloud: Callable[[], Awaitable[Any]],
        run_extension: Callable[[], Awaitable[ExtensionOutcome]],
        cancel_event: Optional[asyncio.Event],
    ) -> UnifiedRunResponse:
        requested_mode = self.routing_config.resolve_mode(target)

        if requested_mode is RunMode.CLOUD:
            return self._cloud_response(await run_cloud(), requested_mode)

        if requested_mode is RunMode.EXTENSION:
            outcome = await run_extension()
            return self._extension_response(outcome, requested_mode, device_id)

        explicit_device = has_text(device_id)
        if require_local_session or explicit_device:
            devices: Optional[DeviceListResult] = None
            if not explicit_device:
                devices = await self.devices.list_devices(cancel_event)
                if not devices.online:
                    raise NoDeviceError(
                        "No online extension devices found, but this "
                        f"{kind.label} requires local browser session.",
                        details=devices.to_dict(),
                    )

            outcome = await run_extension()
            if outcome.selected_mode is not SelectedMode.EXTENSION:
                raise LocalSessionUnavailableError(
                    f"{kind.extension_name} is unavailable and local browser "
                    "session is required.",
                    request_id=outcome.request_id,
                    details={
                        "selectedMode": outcome.selected_mode.value,
                        "fallbackReason": outcome.fallback_reason,
                    },
                )
            return self._extension_response(
                outcome, requested_mode, self._resolve_device_id(device_id, devices)
            )

        devices = await self.devices.list_devices(cancel_event)
        if devices.online:
            try:
                outcome = await run_extension()
            except Exception as error:
                if not is_no_device_error(error):
                    raise
                self.logger.info(
                    "Extension device unavailable, falling back to cloud",
                    extra={"operation": kind.label, "error": str(error)},
                )
            else:
                return self._extension_response(
                    outcome, requested_mode, self._resolve_device_id(device_id, devices)
                )

        data = await run_cloud()
        reason = None
        if devices.online:
            reason = (
                "Extension device became unavailable during execution. "
                f"Routed to cloud {kind.cloud_endpoint}."
            )
        return self._cloud_response(
            data, requested_mode, fallback_applied=devices.online, fallback_reason=reason
        )

    async def _run_planner(
        self, request: UnifiedRunRequest, cancel_event: Optional[asyncio.Event]
    ) -> ExtensionOutcome:
        routed = await self.run_extension_planner(
            to_extension_planner_request(request), cancel_event
        )
        return self._to_outcome(TOOL_NAMES.PLANNER, routed, "Run")

    async def _run_extension_scrape(
        self, request: UnifiedScrapeRequest, cancel_event: Optional[asyncio.Event]
    ) -> ExtensionOutcome:
        routed = await self.hub.run_tool_with_metadata(
            ToolRequest(
                tool=TOOL_NAMES.SCRAPE,
                params=build_extension_scrape_params(request),
                device_id=request.device_id,
            ),
            cancel_event,
        )
        return self._to_outcome(TOOL_NAMES.SCRAPE, routed, "Scrape")

    def _to_outcome(self, requested_tool: str, routed: ToolRunResult, label: str) -> ExtensionOutcome:
        if self.routing_config.resolved_to_cloud(requested_tool, routed.tool):
            self.logger.info(
                "Hub resolved extension tool to its cloud variant",
                extra={"requested_tool": requested_tool, "resolved_tool": routed.tool},
            )
            return ExtensionOutcome(
                data=routed.data,
                selected_mode=SelectedMode.CLOUD,
                fallback_reason=f"{label} request resolved to {routed.tool}.",
                request_id=routed.request_id,
                attempt=routed.attempt,
            )
        return ExtensionOutcome(
            data=routed.data,
            selected_mode=SelectedMode.EXTENSION,
            request_id=routed.request_id,
            attempt=routed.attempt,
        )

    def _apply_routing_defaults(self, request: _RequestT) -> _RequestT:
        prefer_extension = self.routing_config.resolve_prefer_extension(request.prefer_extension)
        if prefer_extension == request.prefer_extension:
            return request
        return replace(request, prefer_extension=prefer_extension)

    @staticmethod
    def _resolve_device_id(
        device_id: Optional[str], devices: Optional[DeviceListResult]
    ) -> Optional[str]:
        if device_id is not None:
            return device_id
        return devices.first_device_id if devices is not None else None

    def _cloud_response(
        self,
        data: Any,
        requested_mode: RunMode,
        *,
        fallback_applied: bool = False,
        fallback_reason: Optional[str] = None,
    ) -> UnifiedRunResponse:
        meta = extract_response_meta(data)
        metadata = RoutingMetadata(
            selected_mode=SelectedMode.CLOUD,
            requested_mode=requested_mode,
            fallback_applied=fallback_applied,
            fallback_reason=fallback_reason,
            request_id=meta.request_id,
            attempt=meta.attempt,
        )
        self._log_decision(metadata)
        return UnifiedRunResponse(metadata=metadata, data=data)

    def _extension_response(
        self,
        outcome: ExtensionOutcome,
        requested_mode: RunMode,
        device_id: Optional[str],
    ) -> UnifiedRunResponse:
        metadata = RoutingMetadata(
            selected_mode=outcome.selected_mode,
            requested_mode=requested_mode,
            fallback_applied=outcome.selected_mode is not SelectedMode.EXTENSION,
            fallback_reason=outcome.fallback_reason,
            device_id=device_id,
            request_id=outcome.request_id,
            attempt=outcome.attempt,
        )
        self._log_decision(metadata)
        return UnifiedRunResponse(metadata=metadata, data=outcome.data)

    def _log_decision(self, metadata: RoutingMetadata) -> None:
        self.logger.info(
            "Routed call",
            extra={
                "selected_mode": metadata.selected_mode.value,
                "requested_mode": metadata.requested_mode.value,
                "fallback_applied": metadata.fallback_applied,
                "request_id": metadata.request_id,
            },
        )
