# -*- coding: utf-8 -*-
"""Server-sent event consumer for execution progress streams."""

import asyncio
import codecs
import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional
from urllib.parse import quote, urlencode

from ..common.constants import (
    DEFAULT_EVENT_NAME,
    DEFAULT_PHASE,
    DEFAULT_STREAM_RETRY_INTERVAL,
    DEFAULT_STREAM_STARTUP_GRACE,
    EVENT_STREAM_CONTENT_TYPE,
    STREAM_NOT_READY_STATUSES,
)
from ..common.exceptions import OperationCancelled, StreamError
from ..common.utils import sleep_or_cancel, trim_trailing_slash, wait_or_cancel
from ..contracts import StreamEvent, StreamEventHandler
from ..transport.fetch import Fetcher, FetchResponse

logger = logging.getLogger(__name__)


def build_events_url(
    base_url: str,
    trajectory_id: str,
    phase: int = DEFAULT_PHASE,
    since: int = 0,
    include_output: bool = False,
) -> str:
    """Progress stream URL for one trajectory phase."""
    query: Dict[str, Any] = {"phase": phase, "since": since}
    if include_output:
        query["includeOutput"] = "1"
    return (
        f"{trim_trailing_slash(base_url)}/cli/executions/"
        f"{quote(trajectory_id, safe='')}/events?{urlencode(query)}"
    )


def parse_event_block(block: str) -> Optional[StreamEvent]:
    """Parse one blank-line-delimited SSE block.

    Returns None for blocks without any ``data:`` line (comments, keep-alives).
    """
    if not block.strip():
        return None

    event_name = DEFAULT_EVENT_NAME
    event_id: Optional[str] = None
    data_lines: List[str] = []

    for line in block.split("\n"):
        if not line or line.startswith(":"):
            continue
        field, separator, value = line.partition(":")
        if not separator:
            continue
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            event_name = value or DEFAULT_EVENT_NAME
        elif field == "id":
            event_id = value
        elif field == "data":
            data_lines.append(value)

    if not data_lines:
        return None

    raw = "\n".join(data_lines)
    try:
        data: Any = json.loads(raw)
    except ValueError:
        data = raw
    return StreamEvent(data=data, raw=raw, event=event_name, id=event_id)


class EventStreamParser:
    """Incremental SSE framer.

    Bytes are decoded as UTF-8 across chunk boundaries; every complete block is
    delivered to ``on_event`` as soon as its terminating blank line arrives.
    """

    def __init__(self, on_event: StreamEventHandler):
        self._on_event = on_event
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._closed = False

    def feed(self, chunk: bytes) -> None:
        self._buffer += self._decoder.decode(chunk)
        self._drain()

    def close(self) -> None:
        """Flush the decoder and deliver a trailing block with no blank line."""
        if self._closed:
            return
        self._closed = True
        self._buffer += self._decoder.decode(b"", final=True)
        self._drain()

        remainder, self._buffer = self._buffer, ""
        event = parse_event_block(remainder)
        if event is not None:
            self._on_event(event)

    def _drain(self) -> None:
        self._buffer = self._buffer.replace("\r\n", "\n")
        while True:
            boundary = self._buffer.find("\n\n")
            if boundary == -1:
                return
            block = self._buffer[:boundary]
            self._buffer = self._buffer[boundary + 2:]
            event = parse_event_block(block)
            if event is not None:
                self._on_event(event)


async def stream_execution_events(
    fetcher: Fetcher,
    base_url: str,
    token: str,
    trajectory_id: str,
    on_event: StreamEventHandler,
    *,
    phase: int = DEFAULT_PHASE,
    since: int = 0,
    include_output: bool = False,
    cancel_event: Optional[asyncio.Event] = None,
    startup_grace: float = DEFAULT_STREAM_STARTUP_GRACE,
    retry_interval: float = DEFAULT_STREAM_RETRY_INTERVAL,
    headers: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Consume the progress stream of one execution until it ends.

    While the startup grace window is open, "not ready" statuses (404, 409,
    425) cause a reconnect after ``retry_interval`` seconds. Reconnects reuse
    the same ``since`` cursor, so events may be delivered more than once.

    Setting ``cancel_event`` aborts the connection; the function then returns
    normally and no further callbacks fire.

    Raises:
        StreamError: On a fatal status or a broken connection
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + startup_grace
    url = build_events_url(base_url, trajectory_id, phase, since, include_output)
    request_headers = {
        "Accept": EVENT_STREAM_CONTENT_TYPE,
        "Authorization": f"Bearer {token}",
    }
    if headers:
        request_headers.update(headers)

    def is_cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    connects = 0
    while not is_cancelled():
        connects += 1
        try:
            response = await wait_or_cancel(
                fetcher("GET", url, headers=request_headers, timeout=None), cancel_event
            )
        except OperationCancelled:
            return
        except Exception as exc:
            raise StreamError(f"Event stream failed: {exc}") from exc

        if 200 <= response.status < 300:
            logger.debug(
                "Event stream connected",
                extra={"trajectory_id": trajectory_id, "phase": phase, "connects": connects},
            )
            try:
                await _consume(response, on_event, cancel_event, is_cancelled)
            finally:
                await response.release()
            return

        status = response.status
        if status in STREAM_NOT_READY_STATUSES and loop.time() < deadline:
            await response.release()
            logger.debug(
                "Event stream not ready, reconnecting",
                extra={"trajectory_id": trajectory_id, "status": status, "connects": connects},
            )
            try:
                await sleep_or_cancel(retry_interval, cancel_event)
            except OperationCancelled:
                return
            continue

        try:
            body = await response.text()
        finally:
            await response.release()
        raise StreamError(
            f"Event stream failed ({status}): {body or response.reason or 'unknown error'}",
            status=status,
        )


async def _next_chunk(chunks: AsyncIterator[bytes]) -> Optional[bytes]:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return None


async def _consume(
    response: FetchResponse,
    on_event: StreamEventHandler,
    cancel_event: Optional[asyncio.Event],
    is_cancelled: Callable[[], bool],
) -> None:
    def deliver(event: StreamEvent) -> None:
        if not is_cancelled():
            on_event(event)

    parser = EventStreamParser(deliver)
    chunks = response.iter_chunks().__aiter__()
    try:
        while True:
            if is_cancelled():
                return
            try:
                chunk = await wait_or_cancel(_next_chunk(chunks), cancel_event)
            except OperationCancelled:
                return
            except Exception as exc:
                raise StreamError(f"Event stream interrupted: {exc}") from exc
            if chunk is None:
                break
            parser.feed(chunk)
    finally:
        aclose = getattr(chunks, "aclose", None)
        if callable(aclose):
            await aclose()

    parser.close()
