# -*- coding: utf-8 -*-
"""Cloud channel - direct ``/agent`` and ``/scrape`` endpoints."""

import asyncio
from typing import Any, Optional

from ..common.constants import CLOUD_TOKEN_PREFIX
from ..common.exceptions import AuthScopeError, ValidationError
from ..common.utils import has_text
from ..contracts import AgentRequest, ScrapeRequest
from ..transport import HttpClient


def ensure_cloud_scope(auth_token: str, operation: str) -> None:
    """Fail fast, before any network call, when the token lacks cloud scope."""
    if auth_token.startswith(CLOUD_TOKEN_PREFIX):
        return
    raise AuthScopeError(
        f"{operation} requires an rtrvr_ API key. "
        "mcp_at_ tokens are only supported for MCP/OAuth endpoints."
    )


def validate_scrape_urls(request: ScrapeRequest) -> None:
    if not request.urls:
        raise ValidationError("`urls` is required for scrape runs.")


class CloudClient:
    """Executes cloud agent and scrape runs."""

    def __init__(self, http: HttpClient, cloud_base_url: str, auth_token: str):
        self._http = http
        self._base_url = cloud_base_url
        self._auth_token = auth_token

    async def agent_run(
        self, request: AgentRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        ensure_cloud_scope(self._auth_token, "Cloud /agent")
        if not has_text(request.input):
            raise ValidationError("`input` is required for agent runs.")

        return await self._http.request_json(
            f"{self._base_url}/agent",
            method="POST",
            body=request.to_payload(),
            cancel_event=cancel_event,
        )

    async def scrape_run(
        self, request: ScrapeRequest, cancel_event: Optional[asyncio.Event] = None
    ) -> Any:
        ensure_cloud_scope(self._auth_token, "Cloud /scrape")
        validate_scrape_urls(request)

        # routing hints of a unified request are not part of the cloud body
        body = ScrapeRequest.to_payload(request)
        return await self._http.request_json(
            f"{self._base_url}/scrape",
            method="POST",
            body=body,
            cancel_event=cancel_event,
        )
