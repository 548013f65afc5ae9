# -*- coding: utf-8 -*-
"""Pluggable network primitive used by the transport and the event stream.

Everything that talks to the network goes through a ``Fetcher``: an async
callable returning a ``FetchResponse``. The default implementation wraps a
shared ``aiohttp.ClientSession``; tests inject in-memory fakes instead.
"""

import logging
from typing import AsyncIterator, Mapping, Optional, Protocol

import aiohttp

logger = logging.getLogger(__name__)


class FetchResponse(Protocol):
    """Minimal response surface the client relies on."""

    status: int
    reason: str
    headers: Mapping[str, str]

    async def text(self) -> str:
        """Read and decode the whole body."""
        ...

    def iter_chunks(self) -> AsyncIterator[bytes]:
        """Yield body bytes as they arrive."""
        ...

    async def release(self) -> None:
        """Close the underlying connection."""
        ...


class Fetcher(Protocol):
    """Fetch-like callable: one HTTP exchange per call."""

    async def __call__(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> FetchResponse:
        ...


class AiohttpResponse:
    """``FetchResponse`` backed by an ``aiohttp.ClientResponse``."""

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response
        self.status = response.status
        self.reason = response.reason or ""
        self.headers = response.headers

    async def text(self) -> str:
        return await self._response.text(errors="replace")

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        async for chunk in self._response.content.iter_any():
            yield chunk

    async def release(self) -> None:
        self._response.close()


class AiohttpFetcher:
    """Default ``Fetcher`` sharing one ``aiohttp.ClientSession``.

    The session is created lazily on first use when none is supplied, and is
    closed by ``close()`` only if this fetcher created it.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "AiohttpFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def __call__(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> AiohttpResponse:
        session = self._ensure_session()
        # total=None keeps long-lived event streams open
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        response = await session.request(
            method,
            url,
            headers=dict(headers),
            data=body,
            timeout=client_timeout,
        )
        return AiohttpResponse(response)

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            logger.debug("Closed aiohttp session")
        self._session = None
