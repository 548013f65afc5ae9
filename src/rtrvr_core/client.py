# -*- coding: utf-8 -*-
"""Public client - cloud, hub, control-plane and routed calls."""

import asyncio
import logging
from typing import Any, Optional

from .common.exceptions import ValidationError, is_supported_auth_token
from .config.client_config import ClientConfig
from .config.settings import Settings
from .contracts import (
    AgentRequest,
    DeviceListResult,
    ExtensionPlannerRequest,
    ScrapeRequest,
    StreamEventHandler,
    ToolRequest,
    UnifiedRunRequest,
    UnifiedRunResponse,
    UnifiedScrapeRequest,
    UnifiedScrapeResponse,
)
from .execution import CloudClient, TaskRouter, ensure_cloud_scope
from .streaming import (
    StreamOutcome,
    StreamSession,
    execute_with_event_stream,
    prepare_scrape_stream_request,
    prepare_stream_request,
)
from .tools import TOOL_NAMES, DeviceDirectory, HubClient
from .transport import AiohttpFetcher, Fetcher, HttpClient

logger = logging.getLogger(__name__)


class RtrvrClient:
    """
    Entry point for every call against the cloud, the hub and the control plane.

    The configuration is immutable and the client keeps no per-call state, so
    one instance can serve concurrent independent calls.

    Example:
        async with RtrvrClient("rtrvr_...") as client:
            response = await client.run(UnifiedRunRequest(input="Find the pricing page"))
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[ClientConfig] = None,
        *,
        fetcher: Optional[Fetcher] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Bearer token; ``rtrvr_`` keys reach every endpoint,
                ``mcp_at_`` tokens only the hub
            config: Client configuration, defaults to production endpoints
            fetcher: Network primitive, defaults to a private aiohttp session

        Raises:
            ValidationError: When the token carries neither accepted prefix
        """
        if not api_key or not is_supported_auth_token(api_key):
            raise ValidationError(
                "A valid rtrvr auth token is required (rtrvr_... or mcp_at_...)."
            )

        self.config = config or ClientConfig()
        self._api_key = api_key
        self._owned_fetcher: Optional[AiohttpFetcher] = None
        if fetcher is None:
            self._owned_fetcher = AiohttpFetcher()
            fetcher = self._owned_fetcher
        self._fetcher = fetcher

        self.http = HttpClient(
            api_key,
            fetcher,
            timeout=self.config.timeout,
            retry_policy=self.config.retry_policy,
            default_headers=self.config.default_headers,
        )
        self.cloud = CloudClient(self.http, self.config.cloud_base_url, api_key)
        self.hub = HubClient(self.http, self.config.mcp_base_url)
        self.devices = DeviceDirectory(self.hub)
        self.router = TaskRouter(self.cloud, self.hub, self.devices, self.config.routing)

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, *, fetcher: Optional[Fetcher] = None
    ) -> "RtrvrClient":
        """Build a client from ``RTRVR_*`` environment settings."""
        settings = settings or Settings()
        return cls(
            settings.api_key or "",
            ClientConfig.from_settings(settings),
            fetcher=fetcher,
        )

    async def __aenter__(self) -> "RtrvrClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the aiohttp session when the client created it."""
        if self._owned_fetcher is not None:
            await self._owned_fetcher.close()

    # ------------------------------------------------------------------
    # Cloud endpoints
    # ------------------------------------------------------------------
    async def agent_run(
        self, request: AgentRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        return await self.cloud.agent_run(request, cancel_event)

    async def scrape_run(
        self, request: ScrapeRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        return await self.cloud.scrape_run(request, cancel_event)

    # ------------------------------------------------------------------
    # Routed calls
    # ------------------------------------------------------------------
    async def run(
        self, request: UnifiedRunRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> UnifiedRunResponse:
        return await self.router.run(request, cancel_event)

    async def agent(
        self, request: UnifiedRunRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> UnifiedRunResponse:
        return await self.run(request, cancel_event)

    async def scrape(
        self, request: UnifiedScrapeRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> UnifiedScrapeResponse:
        return await self.router.scrape(request, cancel_event)

    async def run_with_events(
        self,
        request: UnifiedRunRequest,
        on_event: StreamEventHandler,
        *,
        include_output: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> StreamOutcome:
        """
        Routed run with live progress events.

        The request is correlated with a trajectory id (generated if missing)
        and asks the server to emit events. ``StreamOutcome.result`` is the
        routed response; a failed stream only sets ``stream_warning``.
        """
        prepared = prepare_stream_request(request)
        session = self._stream_session(
            prepared.trajectory_id, prepared.phase, on_event, include_output
        )
        return await execute_with_event_stream(
            lambda: self.run(prepared, cancel_event), session, label="run"
        )

    async def scrape_with_events(
        self,
        request: UnifiedScrapeRequest,
        on_event: StreamEventHandler,
        *,
        include_output: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> StreamOutcome:
        """Routed scrape with live progress events; see ``run_with_events``."""
        prepared = prepare_scrape_stream_request(request)
        session = self._stream_session(prepared.trajectory_id, 1, on_event, include_output)
        return await execute_with_event_stream(
            lambda: self.scrape(prepared, cancel_event), session, label="scrape"
        )

    def _stream_session(
        self,
        trajectory_id: str,
        phase: int,
        on_event: StreamEventHandler,
        include_output: bool,
    ) -> StreamSession:
        return StreamSession(
            self._fetcher,
            self.config.mcp_base_url,
            self._api_key,
            trajectory_id,
            on_event,
            phase=phase,
            include_output=include_output,
            startup_grace=self.config.stream_startup_grace,
            retry_interval=self.config.stream_retry_interval,
        )

    # ------------------------------------------------------------------
    # Hub tools
    # ------------------------------------------------------------------
    async def extension_planner_run(
        self, request: ExtensionPlannerRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        result = await self.router.run_extension_planner(request, cancel_event)
        return result.data

    async def tool_run(
        self, request: ToolRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        return await self.hub.run_tool(request, cancel_event)

    async def list_devices(
        self, cancel_event: Optional[asyncio.Event] = None
    ) -> DeviceListResult:
        return await self.devices.list_devices(cancel_event)

    async def get_current_credits(self, cancel_event: Optional[asyncio.Event] = None) -> Any:
        return await self.tool_run(ToolRequest(tool=TOOL_NAMES.GET_CURRENT_CREDITS), cancel_event)

    # ------------------------------------------------------------------
    # Control plane
    # ------------------------------------------------------------------
    async def profile_get(self, cancel_event: Optional[asyncio.Event] = None) -> Any:
        return await self._control_get("/cli/profile", cancel_event)

    async def capabilities_get(
        self, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        return await self._control_get("/cli/capabilities", cancel_event)

    async def google_auth_status(
        self, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        return await self._control_get("/cli/google-auth/status", cancel_event)

    async def _control_get(self, path: str, cancel_event: Optional[asyncio.Event]) -> Any:
        ensure_cloud_scope(self._api_key, f"CLI {path}")
        logger.debug("Control plane request", extra={"path": path})
        return await self.http.request_json(
            f"{self.config.control_base_url}{path}",
            method="GET",
            cancel_event=cancel_event,
        )
