# -*- coding: utf-8 -*-
"""Execution - cloud client, payload translation and channel routing."""

from .cloud_client import CloudClient, ensure_cloud_scope
from .payload_builders import (
    build_extension_scrape_params,
    build_planner_params,
    ensure_cloud_agent_options,
    extract_response_meta,
    file_urls_to_cloud_files,
    to_agent_request,
    to_extension_planner_request,
)
from .task_router import ExtensionOutcome, TaskRouter

__all__ = [
    "CloudClient",
    "ensure_cloud_scope",
    "TaskRouter",
    "ExtensionOutcome",
    "to_agent_request",
    "to_extension_planner_request",
    "ensure_cloud_agent_options",
    "file_urls_to_cloud_files",
    "build_planner_params",
    "build_extension_scrape_params",
    "extract_response_meta",
]
