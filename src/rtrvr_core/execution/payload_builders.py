# -*- coding: utf-8 -*-
"""Translation of routed requests into cloud and extension payloads."""

from typing import Any, Dict, List, Optional

from ..common.utils import compact_dict, file_name_from_uri, guess_mime_type, is_record, read_int, read_str
from ..contracts import (
    AgentRequest,
    CloudFile,
    ExtensionPlannerRequest,
    ResponseMeta,
    UnifiedRunRequest,
    UnifiedScrapeRequest,
)


def file_urls_to_cloud_files(file_urls: Optional[List[str]]) -> Optional[List[CloudFile]]:
    """Turn bare file URLs into cloud file references."""
    if not file_urls:
        return None
    return [
        CloudFile(display_name=file_name_from_uri(uri), uri=uri, mime_type=guess_mime_type(uri))
        for uri in file_urls
    ]


def ensure_cloud_agent_options(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Copy ``options`` with a ``ui`` object whose ``emitEvents`` is boolean or absent."""
    normalized = dict(options) if is_record(options) else {}
    ui = dict(normalized["ui"]) if is_record(normalized.get("ui")) else {}
    if not isinstance(ui.get("emitEvents"), bool):
        ui.pop("emitEvents", None)
    normalized["ui"] = ui
    return normalized


def to_agent_request(request: UnifiedRunRequest) -> AgentRequest:
    """Cloud ``/agent`` request for a routed run."""
    files = request.files if request.files is not None else file_urls_to_cloud_files(request.file_urls)
    return AgentRequest(
        input=request.input,
        urls=request.urls,
        schema=request.schema,
        files=files,
        data_inputs=request.data_inputs,
        settings=request.settings,
        tools=request.tools,
        options=ensure_cloud_agent_options(request.options),
        response=request.response,
        webhooks=request.webhooks,
        trajectory_id=request.trajectory_id,
        phase=request.phase,
        recording_context=request.recording_context,
        auth_token=request.auth_token,
    )


def to_extension_planner_request(request: UnifiedRunRequest) -> ExtensionPlannerRequest:
    """Planner tool request for a routed run.

    Explicit ``file_urls`` win; otherwise the URIs of ``files`` are used.
    Correlation fields and options travel in the planner params on top of
    ``extension_params``.
    """
    file_urls = list(request.file_urls or [])
    if not file_urls and request.files:
        file_urls = [item.uri for item in request.files if item.uri]

    params: Dict[str, Any] = dict(request.extension_params or {})
    if request.trajectory_id:
        params["trajectoryId"] = request.trajectory_id
    if request.phase is not None:
        params["phase"] = request.phase
    if request.auth_token:
        params["authToken"] = request.auth_token
    if request.options:
        params["options"] = request.options
    if request.prefer_extension is not None:
        params["preferExtension"] = request.prefer_extension

    return ExtensionPlannerRequest(
        input=request.input,
        urls=request.urls,
        schema=request.schema,
        file_urls=file_urls or None,
        device_id=request.device_id,
        params=params or None,
    )


def build_planner_params(request: ExtensionPlannerRequest) -> Dict[str, Any]:
    """Params of the ``planner`` tool call."""
    params = compact_dict(
        {
            "user_input": request.input,
            "tab_urls": request.urls,
            "schema": request.schema,
            "file_urls": request.file_urls,
        }
    )
    params.update(request.params or {})
    return params


def build_extension_scrape_params(request: UnifiedScrapeRequest) -> Dict[str, Any]:
    """Params of the extension ``scrape`` tool call, routing hints included."""
    payload = request.to_payload()
    # the device travels at the top level of the hub call
    payload.pop("deviceId", None)
    return payload


def extract_response_meta(value: Any) -> ResponseMeta:
    """Request id and attempt of a cloud response.

    Reads ``metadata`` first and falls back to root-level ``requestId`` and
    ``attempt`` when the metadata carries neither.
    """
    if not is_record(value):
        return ResponseMeta()

    meta = ResponseMeta.from_payload(value.get("metadata"))
    if not meta.is_empty:
        return meta
    return ResponseMeta(request_id=read_str(value, "requestId"), attempt=read_int(value, "attempt"))
