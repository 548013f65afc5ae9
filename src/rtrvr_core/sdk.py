# -*- coding: utf-8 -*-
"""Grouped convenience facade over ``RtrvrClient``."""

import asyncio
from typing import Any, Dict, Optional

from .client import RtrvrClient
from .config.client_config import ClientConfig
from .contracts import (
    DeviceListResult,
    ExtensionPlannerRequest,
    ScrapeRequest,
    ToolRequest,
    UnifiedRunRequest,
    UnifiedRunResponse,
    UnifiedScrapeRequest,
    UnifiedScrapeResponse,
)
from .execution import to_agent_request
from .tools import TOOL_NAMES
from .transport import Fetcher


class _AgentApi:
    def __init__(self, client: RtrvrClient):
        self._client = client

    async def run(
        self, request: UnifiedRunRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> UnifiedRunResponse:
        return await self._client.agent(request, cancel_event)

    async def cloud(
        self, request: UnifiedRunRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        """Run directly on the cloud, skipping routing."""
        return await self._client.agent_run(to_agent_request(request), cancel_event)


class _ScrapeApi:
    def __init__(self, client: RtrvrClient):
        self._client = client

    async def run(
        self, request: ScrapeRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        return await self._client.scrape_run(request, cancel_event)

    async def route(
        self, request: UnifiedScrapeRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> UnifiedScrapeResponse:
        return await self._client.scrape(request, cancel_event)


class _ExtensionApi:
    def __init__(self, client: RtrvrClient):
        self._client = client

    async def run(
        self, request: ExtensionPlannerRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        return await self._client.extension_planner_run(request, cancel_event)


class _ToolsApi:
    def __init__(self, client: RtrvrClient):
        self._client = client

    async def run(self, request: ToolRequest, cancel_event: Optional[asyncio.Event] = None) -> Any:
        return await self._client.tool_run(request, cancel_event)

    async def _call(self, tool: str, params: Dict[str, Any], device_id: Optional[str]) -> Any:
        return await self._client.tool_run(ToolRequest(tool=tool, params=params, device_id=device_id))

    async def act(self, params: Dict[str, Any], device_id: Optional[str] = None) -> Any:
        return await self._call(TOOL_NAMES.ACT, params, device_id)

    async def extract(self, params: Dict[str, Any], device_id: Optional[str] = None) -> Any:
        return await self._call(TOOL_NAMES.EXTRACT, params, device_id)

    async def crawl(self, params: Dict[str, Any], device_id: Optional[str] = None) -> Any:
        return await self._call(TOOL_NAMES.CRAWL, params, device_id)

    async def planner(self, params: Dict[str, Any], device_id: Optional[str] = None) -> Any:
        return await self._call(TOOL_NAMES.PLANNER, params, device_id)


class _DevicesApi:
    def __init__(self, client: RtrvrClient):
        self._client = client

    async def list(self) -> DeviceListResult:
        return await self._client.list_devices()


class _CreditsApi:
    def __init__(self, client: RtrvrClient):
        self._client = client

    async def get(self) -> Any:
        return await self._client.get_current_credits()


class _ProfileApi:
    def __init__(self, client: RtrvrClient):
        self._client = client

    async def get(self) -> Any:
        return await self._client.profile_get()

    async def capabilities(self) -> Any:
        return await self._client.capabilities_get()


class RtrvrSdk:
    """
    Client operations grouped by area.

    ``sdk.agent.run``, ``sdk.scrape.route``, ``sdk.tools.act`` and so on map
    one to one onto ``RtrvrClient`` methods; ``sdk.raw`` is the client itself.
    """

    def __init__(self, client: RtrvrClient):
        self.raw = client
        self.agent = _AgentApi(client)
        self.scrape = _ScrapeApi(client)
        self.extension = _ExtensionApi(client)
        self.tools = _ToolsApi(client)
        self.devices = _DevicesApi(client)
        self.credits = _CreditsApi(client)
        self.profile = _ProfileApi(client)

    async def run(
        self, request: UnifiedRunRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> UnifiedRunResponse:
        return await self.raw.run(request, cancel_event)

    async def close(self) -> None:
        await self.raw.close()

    async def __aenter__(self) -> "RtrvrSdk":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_rtrvr_client(
    api_key: str,
    config: Optional[ClientConfig] = None,
    *,
    fetcher: Optional[Fetcher] = None,
) -> RtrvrSdk:
    """Create a grouped SDK around a new ``RtrvrClient``."""
    return RtrvrSdk(RtrvrClient(api_key, config, fetcher=fetcher))
