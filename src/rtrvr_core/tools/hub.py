# -*- coding: utf-8 -*-
"""Hub client - tool calls routed to the browser extension."""

import asyncio
import logging
from typing import Any, Optional

from ..common.exceptions import ToolExecutionError
from ..contracts import ResponseMeta, ToolRequest, ToolRunResult
from ..transport import HttpClient
from .names import normalize_tool_name


class HubClient:
    """
    Executes tool calls through the shared hub endpoint.

    Every call is a single ``POST`` of ``{tool, params, deviceId?}``; the hub
    answers with ``{success, data?, error?, metadata?}``.
    """

    def __init__(self, http: HttpClient, mcp_base_url: str):
        self._http = http
        self._url = mcp_base_url
        self._logger = logging.getLogger(__name__)

    async def run_tool_with_metadata(
        self,
        request: ToolRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ToolRunResult:
        """
        Execute a tool call and keep the hub's response metadata.

        Args:
            request: Tool name (aliases accepted), params and optional device
            cancel_event: Optional caller cancellation

        Returns:
            ToolRunResult: Tool data plus request id, attempt and the tool the
            hub actually executed

        Raises:
            ToolExecutionError: When the hub reports ``success: false``
        """
        tool = normalize_tool_name(request.tool)
        payload = ToolRequest(
            tool=tool, params=request.params, device_id=request.device_id
        ).to_payload()

        response = await self._http.request_json(
            self._url, method="POST", body=payload, cancel_event=cancel_event
        )
        body = response if isinstance(response, dict) else {}

        if not body.get("success"):
            error = body.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            if not isinstance(message, str) or not message:
                message = f"Tool '{tool}' failed"
            meta = ResponseMeta.from_payload(body.get("metadata"))
            self._logger.info(
                "Hub tool call failed",
                extra={"tool": tool, "request_id": meta.request_id, "error": message},
            )
            raise ToolExecutionError(message, request_id=meta.request_id, details=response)

        meta = ResponseMeta.from_payload(body.get("metadata"))
        self._logger.debug(
            "Hub tool call completed",
            extra={
                "tool": tool,
                "resolved_tool": meta.tool,
                "request_id": meta.request_id,
                "attempt": meta.attempt,
            },
        )
        return ToolRunResult(
            data=body.get("data"),
            request_id=meta.request_id,
            attempt=meta.attempt,
            tool=meta.tool,
            requested_tool=meta.requested_tool,
            alias_used=meta.alias_used,
        )

    async def run_tool(
        self,
        request: ToolRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Any:
        """Execute a tool call and return only its data."""
        result = await self.run_tool_with_metadata(request, cancel_event)
        return result.data
