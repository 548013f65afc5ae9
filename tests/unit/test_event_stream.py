# -*- coding: utf-8 -*-
"""Unit tests for SSE framing and the progress stream consumer."""

import asyncio

import pytest

from rtrvr_core.common.exceptions import StreamError
from rtrvr_core.streaming import (
    EventStreamParser,
    build_events_url,
    parse_event_block,
    stream_execution_events,
)
from tests.fixtures.factories import MCP_URL, FakeResponse, RecordingFetcher, sse_response


class TestBuildEventsUrl:
    def test_defaults(self):
        assert build_events_url(MCP_URL, "traj-1") == (
            f"{MCP_URL}/cli/executions/traj-1/events?phase=1&since=0"
        )

    def test_encodes_trajectory_and_include_output(self):
        url = build_events_url(f"{MCP_URL}/", "a/b c", phase=3, since=12, include_output=True)
        assert url == f"{MCP_URL}/cli/executions/a%2Fb%20c/events?phase=3&since=12&includeOutput=1"


class TestParseEventBlock:
    def test_json_data_with_event_and_id(self):
        event = parse_event_block('event: step\nid: 7\ndata: {"n": 1}')

        assert event.event == "step"
        assert event.id == "7"
        assert event.data == {"n": 1}
        assert event.raw == '{"n": 1}'

    def test_multiline_data_is_joined(self):
        event = parse_event_block("data: first\ndata: second")

        assert event.event == "message"
        assert event.data == "first\nsecond"

    @pytest.mark.parametrize("block", ["", ": keep-alive", "event: ping\nid: 3"])
    def test_blocks_without_data_are_skipped(self, block):
        assert parse_event_block(block) is None


class TestEventStreamParser:
    def test_two_blocks_in_one_chunk(self):
        events = []
        parser = EventStreamParser(events.append)

        parser.feed(b'data: {"a": 1}\n\ndata: {"b": 2}\n\n')

        assert [event.data for event in events] == [{"a": 1}, {"b": 2}]

    def test_block_split_across_chunks_and_multibyte_boundary(self):
        events = []
        parser = EventStreamParser(events.append)
        encoded = 'data: "café"\r\n\r\n'.encode("utf-8")
        split = encoded.index(b"\xc3") + 1

        parser.feed(encoded[:split])
        assert events == []
        parser.feed(encoded[split:])

        assert [event.data for event in events] == ["café"]

    def test_comment_only_stream_produces_nothing(self):
        events = []
        parser = EventStreamParser(events.append)

        parser.feed(b": ping\n\n: ping\n\n")
        parser.close()

        assert events == []

    def test_trailing_block_is_flushed_once_on_close(self):
        events = []
        parser = EventStreamParser(events.append)

        parser.feed(b"data: done")
        assert events == []
        parser.close()
        parser.close()

        assert [event.data for event in events] == ["done"]


class TestStreamExecutionEvents:
    @pytest.mark.asyncio
    async def test_delivers_events_and_sends_stream_headers(self):
        fetcher = RecordingFetcher(sse_response('data: {"step": 1}\n\n', 'data: {"step": 2}\n\n'))
        events = []

        await stream_execution_events(fetcher, MCP_URL, "rtrvr_key", "traj-1", events.append)

        call = fetcher.calls[0]
        assert call.method == "GET"
        assert call.timeout is None
        assert call.headers["Accept"] == "text/event-stream"
        assert call.headers["Authorization"] == "Bearer rtrvr_key"
        assert [event.data for event in events] == [{"step": 1}, {"step": 2}]

    @pytest.mark.asyncio
    async def test_reconnects_while_stream_is_not_ready(self):
        fetcher = RecordingFetcher(
            FakeResponse(404, "not yet"),
            FakeResponse(425, "too early"),
            sse_response("data: ready\n\n"),
        )
        events = []

        await stream_execution_events(
            fetcher, MCP_URL, "k", "traj", events.append, startup_grace=5, retry_interval=0.001
        )

        assert len(fetcher.calls) == 3
        assert len({call.url for call in fetcher.calls}) == 1
        assert [event.data for event in events] == ["ready"]

    @pytest.mark.asyncio
    async def test_not_ready_after_grace_window_is_fatal(self):
        fetcher = RecordingFetcher(FakeResponse(404, "missing"))

        with pytest.raises(StreamError, match=r"Event stream failed \(404\): missing") as exc_info:
            await stream_execution_events(
                fetcher, MCP_URL, "k", "traj", lambda event: None, startup_grace=0
            )

        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_fatal_status_uses_reason_when_body_is_empty(self):
        fetcher = RecordingFetcher(FakeResponse(401, "", reason="Unauthorized"))

        with pytest.raises(StreamError, match=r"\(401\): Unauthorized"):
            await stream_execution_events(fetcher, MCP_URL, "k", "traj", lambda event: None)
        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_connection_error_raises_stream_error(self):
        fetcher = RecordingFetcher(ConnectionRefusedError("refused"))

        with pytest.raises(StreamError, match="refused"):
            await stream_execution_events(fetcher, MCP_URL, "k", "traj", lambda event: None)

    @pytest.mark.asyncio
    async def test_cancel_mid_read_stops_callbacks_without_raising(self):
        hold_open = asyncio.Event()
        response = sse_response("data: one\n\n", hold_open=hold_open)
        fetcher = RecordingFetcher(response)
        cancel_event = asyncio.Event()
        events = []

        def on_event(event):
            events.append(event.data)
            cancel_event.set()

        await asyncio.wait_for(
            stream_execution_events(
                fetcher, MCP_URL, "k", "traj", on_event, cancel_event=cancel_event
            ),
            timeout=2,
        )

        assert events == ["one"]
        assert response.released

    @pytest.mark.asyncio
    async def test_events_after_cancel_are_not_delivered(self):
        response = sse_response("data: one\n\ndata: two\n\n", "data: three\n\n")
        fetcher = RecordingFetcher(response)
        cancel_event = asyncio.Event()
        events = []

        def on_event(event):
            events.append(event.data)
            cancel_event.set()

        await stream_execution_events(
            fetcher, MCP_URL, "k", "traj", on_event, cancel_event=cancel_event
        )

        assert events == ["one"]

    @pytest.mark.asyncio
    async def test_already_cancelled_never_connects(self):
        fetcher = RecordingFetcher()
        cancel_event = asyncio.Event()
        cancel_event.set()

        await stream_execution_events(
            fetcher, MCP_URL, "k", "traj", lambda event: None, cancel_event=cancel_event
        )

        assert fetcher.calls == []
