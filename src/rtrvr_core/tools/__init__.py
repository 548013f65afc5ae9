# -*- coding: utf-8 -*-
"""Hub tool calls, tool names and the device directory."""

from .devices import DeviceDirectory, normalize_device_list
from .hub import HubClient
from .names import TOOL_NAME_ALIASES, TOOL_NAMES, normalize_tool_name

__all__ = [
    "TOOL_NAMES",
    "TOOL_NAME_ALIASES",
    "normalize_tool_name",
    "HubClient",
    "DeviceDirectory",
    "normalize_device_list",
]
