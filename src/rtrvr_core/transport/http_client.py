# -*- coding: utf-8 -*-
"""JSON request execution with timeout, retry and exponential backoff."""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from ..common.constants import DEFAULT_TIMEOUT, JSON_CONTENT_TYPE, REQUEST_ID_HEADER
from ..common.exceptions import RtrvrError, TransportError
from ..common.utils import (
    is_finite_number,
    parse_json_safely,
    serialize_json,
    sleep_or_cancel,
    wait_or_cancel,
)
from ..contracts import RetryPolicy
from .fetch import Fetcher
from .retry import backoff_delay_ms, should_retry

logger = logging.getLogger(__name__)


def extract_error_message(payload: Any, status: int) -> str:
    """Pick the most specific message from an error body."""
    if isinstance(payload, str) and payload.strip():
        return payload
    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str) and message:
            return message

        error = payload.get("error")
        if isinstance(error, dict):
            nested = error.get("message")
            if isinstance(nested, str) and nested:
                return nested
        if isinstance(error, str) and error:
            return error

    return f"HTTP {status}"


def enrich_metadata(payload: Any, request_id: Optional[str], attempt: int) -> Any:
    """Attach ``requestId`` and ``attempt`` to ``payload["metadata"]``.

    Only JSON objects are enriched, and values the server already set are
    kept. Arrays and primitives are returned untouched.
    """
    if not isinstance(payload, dict):
        return payload

    existing = payload.get("metadata")
    metadata: Dict[str, Any] = dict(existing) if isinstance(existing, dict) else {}
    if request_id and not isinstance(metadata.get("requestId"), str):
        metadata["requestId"] = request_id
    if not is_finite_number(metadata.get("attempt")):
        metadata["attempt"] = attempt

    enriched = dict(payload)
    enriched["metadata"] = metadata
    return enriched


class HttpClient:
    """Executes authenticated JSON requests through a pluggable fetcher.

    One instance is shared by every call a client makes; it keeps no per-call
    state, so concurrent requests are independent.
    """

    def __init__(
        self,
        api_key: str,
        fetcher: Fetcher,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        retry_policy: Optional[RetryPolicy] = None,
        default_headers: Optional[Mapping[str, str]] = None,
    ):
        self._api_key = api_key
        self._fetcher = fetcher
        self._timeout = timeout
        self._retry_policy = (retry_policy or RetryPolicy()).normalized()
        self._default_headers = dict(default_headers or {})

    @property
    def fetcher(self) -> Fetcher:
        return self._fetcher

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def build_headers(
        self,
        headers: Optional[Mapping[str, str]] = None,
        *,
        content_type: Optional[str] = JSON_CONTENT_TYPE,
    ) -> Dict[str, str]:
        """Bearer auth, then default headers, then per-call headers."""
        request_headers: Dict[str, str] = {"Authorization": f"Bearer {self._api_key}"}
        if content_type:
            request_headers["Content-Type"] = content_type
        request_headers.update(self._default_headers)
        if headers:
            request_headers.update(headers)
        return request_headers

    async def request_json(
        self,
        url: str,
        method: str = "POST",
        body: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Any:
        """Execute a JSON request, retrying transient failures.

        Args:
            url: Absolute endpoint URL
            method: HTTP method
            body: JSON-serialisable body, omitted when None
            headers: Per-call headers, applied last
            cancel_event: Caller cancellation; stops the request and any
                further attempts once set

        Returns:
            Parsed response body. JSON objects carry ``metadata.requestId`` and
            ``metadata.attempt``.

        Raises:
            TransportError: After the last permitted attempt fails
            OperationCancelled: When ``cancel_event`` fires
        """
        policy = self._retry_policy
        attempt = 1
        while True:
            try:
                return await self._request_once(url, method, body, headers, attempt, cancel_event)
            except TransportError as error:
                if not should_retry(error, attempt, policy, cancel_event):
                    raise
                delay_ms = backoff_delay_ms(attempt, policy)
                logger.warning(
                    "Retrying request after transient failure",
                    extra={
                        "url": url,
                        "method": method,
                        "attempt": attempt,
                        "status": error.status,
                        "delay_ms": round(delay_ms),
                        "error": error.message,
                    },
                )
                await sleep_or_cancel(delay_ms / 1000.0, cancel_event)
                attempt += 1

    async def _request_once(
        self,
        url: str,
        method: str,
        body: Any,
        headers: Optional[Mapping[str, str]],
        attempt: int,
        cancel_event: Optional[asyncio.Event],
    ) -> Any:
        data = None if body is None else serialize_json(body).encode("utf-8")
        request_headers = self.build_headers(headers)

        try:
            status, request_id, text = await wait_or_cancel(
                asyncio.wait_for(
                    self._exchange(method, url, request_headers, data),
                    timeout=self._timeout,
                ),
                cancel_event,
            )
        except RtrvrError:
            raise
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"Request timed out after {self._timeout:g}s"
            ) from exc
        except Exception as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc

        payload = parse_json_safely(text) if text else None

        if not 200 <= status < 300:
            message = extract_error_message(payload, status)
            logger.debug(
                "Request failed",
                extra={"url": url, "status": status, "request_id": request_id, "attempt": attempt},
            )
            raise TransportError(
                message, status=status, request_id=request_id, details=payload
            )

        return enrich_metadata(payload, request_id, attempt)

    async def _exchange(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[bytes],
    ) -> Tuple[int, Optional[str], str]:
        response = await self._fetcher(
            method, url, headers=headers, body=data, timeout=self._timeout
        )
        try:
            request_id = response.headers.get(REQUEST_ID_HEADER)
            text = await response.text()
            return response.status, request_id, text
        finally:
            await response.release()
