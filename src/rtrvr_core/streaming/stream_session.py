# -*- coding: utf-8 -*-
"""Progress stream sessions running alongside one execution call."""

import asyncio
import dataclasses
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from ..common.constants import (
    DEFAULT_PHASE,
    DEFAULT_STREAM_RETRY_INTERVAL,
    DEFAULT_STREAM_STARTUP_GRACE,
)
from ..common.utils import ensure_record, generate_trajectory_id
from ..contracts import StreamEventHandler, UnifiedRunRequest, UnifiedScrapeRequest
from ..transport.fetch import Fetcher
from .event_stream import stream_execution_events

T = TypeVar("T")


def with_emit_events(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Copy ``options`` with ``ui.emitEvents`` switched on, keeping everything else."""
    merged = ensure_record(options)
    ui = ensure_record(merged.get("ui"))
    ui["emitEvents"] = True
    merged["ui"] = ui
    return merged


def _resolve_trajectory_id(value: Optional[str]) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return generate_trajectory_id()


def _resolve_phase(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_PHASE
    if not math.isfinite(value) or value <= 0:
        return DEFAULT_PHASE
    return max(DEFAULT_PHASE, math.floor(value))


def prepare_stream_request(request: UnifiedRunRequest) -> UnifiedRunRequest:
    """Return a copy of ``request`` correlated for progress streaming.

    The trajectory id is trimmed or generated, the phase is floored and
    defaults to 1, and ``options.ui.emitEvents`` is set.
    """
    return dataclasses.replace(
        request,
        trajectory_id=_resolve_trajectory_id(request.trajectory_id),
        phase=_resolve_phase(request.phase),
        options=with_emit_events(request.options),
    )


def prepare_scrape_stream_request(request: UnifiedScrapeRequest) -> UnifiedScrapeRequest:
    """Scrape variant of ``prepare_stream_request``; scrapes always stream phase 1."""
    return dataclasses.replace(
        request,
        trajectory_id=_resolve_trajectory_id(request.trajectory_id),
        options=with_emit_events(request.options),
    )


@dataclass
class StreamOutcome:
    """Execution result plus the stream warning, if the stream failed."""

    result: Any
    stream_warning: Optional[str] = None


class StreamSession:
    """
    One progress stream consumer running as a background task.

    The session owns its cancel event, independent of any caller cancellation.
    A failure of the stream is captured as ``warning`` and never raised.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        base_url: str,
        token: str,
        trajectory_id: str,
        on_event: StreamEventHandler,
        *,
        phase: int = DEFAULT_PHASE,
        include_output: bool = False,
        startup_grace: float = DEFAULT_STREAM_STARTUP_GRACE,
        retry_interval: float = DEFAULT_STREAM_RETRY_INTERVAL,
    ) -> None:
        self._logger = logging.getLogger(f"{__name__}.{trajectory_id}")
        self._fetcher = fetcher
        self._base_url = base_url
        self._token = token
        self._trajectory_id = trajectory_id
        self._on_event = on_event
        self._phase = phase
        self._include_output = include_output
        self._startup_grace = startup_grace
        self._retry_interval = retry_interval

        self._cancel_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._warning: Optional[str] = None
        self._closed = False
        self._close_lock = asyncio.Lock()

    @property
    def trajectory_id(self) -> str:
        return self._trajectory_id

    @property
    def warning(self) -> Optional[str]:
        return self._warning

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.ensure_future(self._run())
        self._logger.info(
            "Stream session started",
            extra={"trajectory_id": self._trajectory_id, "phase": self._phase},
        )

    async def _run(self) -> None:
        try:
            await stream_execution_events(
                self._fetcher,
                self._base_url,
                self._token,
                self._trajectory_id,
                self._on_event,
                phase=self._phase,
                include_output=self._include_output,
                cancel_event=self._cancel_event,
                startup_grace=self._startup_grace,
                retry_interval=self._retry_interval,
            )
        except Exception as exc:
            if self._cancel_event.is_set():
                return
            self._warning = str(exc) or type(exc).__name__

    async def close(self) -> None:
        """Cancel the stream and wait until the consumer has shut down."""
        async with self._close_lock:
            if self._closed:
                return
            self._closed = True

            self._cancel_event.set()
            if self._task is not None:
                await self._task
            self._logger.info(
                "Stream session closed",
                extra={"trajectory_id": self._trajectory_id, "warning": self._warning},
            )

    async def __aenter__(self) -> "StreamSession":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def execute_with_event_stream(
    execute: Callable[[], Awaitable[T]],
    session: StreamSession,
    *,
    label: str = "request",
) -> StreamOutcome:
    """
    Run ``execute`` while ``session`` streams progress.

    The stream is closed only after the execution settles, on success and on
    failure alike. The execution's own result or exception is what the caller
    sees; a stream failure is logged and returned as ``stream_warning``.
    """
    logger = logging.getLogger(__name__)
    session.start()
    try:
        result = await execute()
    finally:
        await session.close()
        if session.warning:
            logger.warning(
                f"Progress stream for {label} was unavailable ({session.warning}). "
                "Final response is still valid.",
                extra={"trajectory_id": session.trajectory_id},
            )
    return StreamOutcome(result=result, stream_warning=session.warning)
