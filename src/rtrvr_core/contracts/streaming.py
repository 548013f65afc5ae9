# -*- coding: utf-8 -*-
"""Streaming data structures for execution progress events."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from rtrvr_core.common.constants import DEFAULT_EVENT_NAME


@dataclass(frozen=True)
class StreamEvent:
    """One server-sent event from the execution progress stream.

    ``data`` is the JSON-decoded payload when the joined ``data:`` lines parse
    as JSON, otherwise the raw string. ``raw`` always holds the joined string.
    """

    data: Any
    raw: str
    event: str = DEFAULT_EVENT_NAME
    id: Optional[str] = None


# Callback invoked synchronously for every parsed event
StreamEventHandler = Callable[[StreamEvent], None]
