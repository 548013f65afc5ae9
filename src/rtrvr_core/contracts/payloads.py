# -*- coding: utf-8 -*-
"""Helpers for the server's payload size policy.

Payloads up to ``INLINE_PAYLOAD_LIMIT_BYTES`` are returned inline in
``output``/``result``. Larger payloads keep an inline preview and add a sibling
reference (``outputRef``, ``resultRef`` or ``responseRef``) that points at the
full content by URL or storage path.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from rtrvr_core.common.constants import INLINE_PAYLOAD_LIMIT_BYTES

REF_FIELDS = {
    "output": "outputRef",
    "result": "resultRef",
    "response": "responseRef",
}


@dataclass(frozen=True)
class PayloadRef:
    """Pointer to payload content stored outside the response body."""

    url: Optional[str] = None
    path: Optional[str] = None
    size_bytes: Optional[int] = None
    content_type: Optional[str] = None

    @property
    def location(self) -> Optional[str]:
        """URL when present, otherwise the storage path."""
        return self.url or self.path


def extract_payload_ref(record: Any, field_name: str) -> Optional[PayloadRef]:
    """Read the reference sibling of ``field_name`` from a response record.

    Args:
        record: Decoded response object; anything else yields ``None``
        field_name: ``output``, ``result`` or ``response`` (or the ref key itself)

    Returns:
        PayloadRef when the record carries a usable reference, else ``None``
    """
    if not isinstance(record, dict):
        return None

    ref_key = REF_FIELDS.get(field_name, field_name)
    raw = record.get(ref_key)
    if not isinstance(raw, dict):
        return None

    url = raw.get("url") if isinstance(raw.get("url"), str) else None
    path = raw.get("path") if isinstance(raw.get("path"), str) else None
    if not url and not path:
        return None

    size = raw.get("sizeBytes")
    if isinstance(size, bool) or not isinstance(size, int):
        size = None
    content_type = raw.get("contentType") if isinstance(raw.get("contentType"), str) else None
    return PayloadRef(url=url, path=path, size_bytes=size, content_type=content_type)


def is_inline_payload(record: Dict[str, Any], field_name: str) -> bool:
    """True when ``field_name`` holds the complete payload (no reference sibling)."""
    return extract_payload_ref(record, field_name) is None


__all__ = [
    "INLINE_PAYLOAD_LIMIT_BYTES",
    "PayloadRef",
    "REF_FIELDS",
    "extract_payload_ref",
    "is_inline_payload",
]
