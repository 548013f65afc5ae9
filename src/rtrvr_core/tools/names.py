# -*- coding: utf-8 -*-
"""Canonical hub tool names and their short aliases."""

from types import MappingProxyType, SimpleNamespace
from typing import Mapping

TOOL_NAMES = SimpleNamespace(
    PLANNER="planner",
    ACT="act_on_tab",
    EXTRACT="extract_from_tab",
    CRAWL="crawl_and_extract_from_tab",
    SCRAPE="scrape",
    GET_PAGE_DATA="get_page_data",
    REPLAY_WORKFLOW="replay_workflow",
    LIST_DEVICES="list_devices",
    GET_CURRENT_CREDITS="get_current_credits",
    CLOUD_AGENT="cloud_agent",
    CLOUD_SCRAPE="cloud_scrape",
)

TOOL_NAME_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "act": TOOL_NAMES.ACT,
        "extract": TOOL_NAMES.EXTRACT,
        "crawl": TOOL_NAMES.CRAWL,
        "getPageData": TOOL_NAMES.GET_PAGE_DATA,
        "listDevices": TOOL_NAMES.LIST_DEVICES,
        "getCurrentCredits": TOOL_NAMES.GET_CURRENT_CREDITS,
    }
)


def normalize_tool_name(name: str) -> str:
    """Map a convenience alias to its canonical name.

    Unknown names are returned unchanged; the hub validates them.
    """
    return TOOL_NAME_ALIASES.get(name, name)
