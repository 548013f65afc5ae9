# -*- coding: utf-8 -*-
"""Device directory - which extension endpoints are currently reachable."""

import asyncio
import logging
from typing import Any, List, Optional

from ..common.utils import read_bool, read_int, read_str
from ..contracts import DeviceInfo, DeviceListResult, ToolRequest
from .hub import HubClient
from .names import TOOL_NAMES

logger = logging.getLogger(__name__)


def normalize_device_list(data: Any) -> DeviceListResult:
    """Build a ``DeviceListResult`` from an untyped ``list_devices`` payload.

    Missing or mistyped fields fall back to ``False``/``0``/``[]``. Device
    entries that are not objects or lack a string ``deviceId`` are dropped.
    """
    if not isinstance(data, dict):
        return DeviceListResult()

    raw_devices = data.get("devices")
    entries: List[Any] = raw_devices if isinstance(raw_devices, list) else []

    devices: List[DeviceInfo] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        device_id = read_str(entry, "deviceId")
        if not device_id:
            continue
        devices.append(
            DeviceInfo(
                device_id=device_id,
                name=read_str(entry, "deviceName"),
                last_seen=read_str(entry, "lastSeen"),
                has_capability_token=read_bool(entry, "hasFcmToken"),
            )
        )

    device_count = read_int(data, "deviceCount")
    return DeviceListResult(
        online=read_bool(data, "online") or False,
        device_count=device_count if device_count is not None else len(entries),
        devices=devices,
    )


class DeviceDirectory:
    """Queries the hub for online extension devices."""

    def __init__(self, hub: HubClient):
        self._hub = hub

    async def list_devices(self, cancel_event: Optional[asyncio.Event] = None) -> DeviceListResult:
        data = await self._hub.run_tool(
            ToolRequest(tool=TOOL_NAMES.LIST_DEVICES), cancel_event
        )
        result = normalize_device_list(data)
        logger.debug(
            "Listed extension devices",
            extra={"online": result.online, "device_count": result.device_count},
        )
        return result
