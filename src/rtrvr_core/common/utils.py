"""Common utility functions for rtrvr-core."""

import asyncio
import json
import math
import uuid
from typing import Any, Awaitable, Dict, List, Optional, TypeVar
from urllib.parse import unquote, urlparse

from rtrvr_core.common.exceptions import OperationCancelled

T = TypeVar("T")


def generate_trajectory_id() -> str:
    """Generate a unique trajectory ID."""
    return str(uuid.uuid4())


def trim_trailing_slash(value: str) -> str:
    """Drop a single trailing slash from a base URL."""
    return value[:-1] if value.endswith("/") else value


def is_record(value: Any) -> bool:
    """Check whether a decoded JSON value is an object (not array/primitive)."""
    return isinstance(value, dict)


def ensure_record(value: Any) -> Dict[str, Any]:
    """Return a shallow copy of a JSON object, or an empty dict for anything else."""
    if isinstance(value, dict):
        return dict(value)
    return {}


def read_str(record: Dict[str, Any], key: str) -> Optional[str]:
    value = record.get(key)
    return value if isinstance(value, str) else None


def is_finite_number(value: Any) -> bool:
    """Check for a JSON number that converts to int; bools, NaN and infinities do not."""
    # bool is an int subclass but never a valid count here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return isinstance(value, int) or math.isfinite(value)


def read_int(record: Dict[str, Any], key: str) -> Optional[int]:
    value = record.get(key)
    return int(value) if is_finite_number(value) else None


def read_bool(record: Dict[str, Any], key: str) -> Optional[bool]:
    value = record.get(key)
    return value if isinstance(value, bool) else None


def has_text(value: Optional[str]) -> bool:
    """Check that an optional string holds non-whitespace content."""
    return isinstance(value, str) and bool(value.strip())


def parse_json_safely(text: str) -> Any:
    """Parse JSON text, wrapping non-JSON bodies as ``{"raw": text}``."""
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


def serialize_json(obj: Any) -> str:
    """Serialize object to JSON string."""
    return json.dumps(obj, default=str, ensure_ascii=False)


def compact_dict(values: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is ``None``."""
    return {key: value for key, value in values.items() if value is not None}


def file_name_from_uri(uri: str) -> str:
    """Best-effort display name for a file URL."""
    try:
        path = urlparse(uri).path
    except ValueError:
        return "file"
    segments: List[str] = [segment for segment in path.split("/") if segment]
    if not segments:
        return "file"
    return unquote(segments[-1])


_MIME_TYPES = (
    (".pdf", "application/pdf"),
    (".csv", "text/csv"),
    (".json", "application/json"),
    (".txt", "text/plain"),
    (".png", "image/png"),
    (".jpg", "image/jpeg"),
    (".jpeg", "image/jpeg"),
    (".webp", "image/webp"),
)


def guess_mime_type(uri: str) -> str:
    """Guess a mime type from the URL suffix."""
    lower = uri.lower()
    for suffix, mime_type in _MIME_TYPES:
        if lower.endswith(suffix):
            return mime_type
    return "application/octet-stream"


async def wait_or_cancel(
    awaitable: Awaitable[T], cancel_event: Optional[asyncio.Event]
) -> T:
    """Await ``awaitable`` unless ``cancel_event`` fires first.

    Raises:
        OperationCancelled: When the event is set before the awaitable
            completes. The pending awaitable is cancelled.
    """
    if cancel_event is None:
        return await awaitable
    if cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise OperationCancelled()

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if work.done():
        return work.result()

    work.cancel()
    await asyncio.gather(work, return_exceptions=True)
    raise OperationCancelled()


async def sleep_or_cancel(delay: float, cancel_event: Optional[asyncio.Event]) -> None:
    """Sleep for ``delay`` seconds, stopping early with ``OperationCancelled``."""
    await wait_or_cancel(asyncio.sleep(delay), cancel_event)
