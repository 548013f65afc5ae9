# -*- coding: utf-8 -*-
"""Execution progress streaming and its orchestration with routed calls."""

from .event_stream import (
    EventStreamParser,
    build_events_url,
    parse_event_block,
    stream_execution_events,
)
from .stream_session import (
    StreamOutcome,
    StreamSession,
    execute_with_event_stream,
    prepare_scrape_stream_request,
    prepare_stream_request,
    with_emit_events,
)

__all__ = [
    "EventStreamParser",
    "build_events_url",
    "parse_event_block",
    "stream_execution_events",
    "StreamSession",
    "StreamOutcome",
    "execute_with_event_stream",
    "prepare_stream_request",
    "prepare_scrape_stream_request",
    "with_emit_events",
]
