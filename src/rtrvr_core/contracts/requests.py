# -*- coding: utf-8 -*-
"""Request data structures for rtrvr-core.

Requests are created per call by the caller and treated as immutable inputs.
``to_payload`` renders the camelCase wire body and omits unset fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .enums import ResponseVerbosity, RunMode


def _compact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


@dataclass(frozen=True)
class CloudFile:
    """File reference understood by the cloud agent endpoint."""

    display_name: str
    uri: str
    mime_type: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "displayName": self.display_name,
            "uri": self.uri,
            "mimeType": self.mime_type,
        }


@dataclass(frozen=True)
class BearerWebhookAuth:
    token: str

    def to_payload(self) -> Dict[str, Any]:
        return {"type": "bearer", "token": self.token}


@dataclass(frozen=True)
class BasicWebhookAuth:
    username: str
    password: str

    def to_payload(self) -> Dict[str, Any]:
        return {"type": "basic", "username": self.username, "password": self.password}


WebhookAuth = Union[BearerWebhookAuth, BasicWebhookAuth]


@dataclass(frozen=True)
class WebhookSubscription:
    """Webhook the server calls as the execution progresses."""

    url: str
    events: Optional[List[str]] = None
    auth: Optional[WebhookAuth] = None
    secret: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _compact(
            {
                "url": self.url,
                "events": list(self.events) if self.events is not None else None,
                "auth": self.auth.to_payload() if self.auth is not None else None,
                "secret": self.secret,
            }
        )


@dataclass(frozen=True)
class ResponseOptions:
    """Response verbosity and inline size limits."""

    verbosity: Optional[ResponseVerbosity] = None
    inline_output_max_bytes: Optional[int] = None

    def to_payload(self) -> Dict[str, Any]:
        return _compact(
            {
                "verbosity": _enum_value(self.verbosity),
                "inlineOutputMaxBytes": self.inline_output_max_bytes,
            }
        )


def _webhooks_payload(webhooks: Optional[List[WebhookSubscription]]) -> Optional[List[Dict[str, Any]]]:
    if webhooks is None:
        return None
    return [webhook.to_payload() for webhook in webhooks]


def _files_payload(files: Optional[List[CloudFile]]) -> Optional[List[Dict[str, Any]]]:
    if files is None:
        return None
    return [item.to_payload() for item in files]


@dataclass(frozen=True)
class AgentRequest:
    """Cloud ``/agent`` request."""

    input: str
    urls: Optional[List[str]] = None
    schema: Optional[Dict[str, Any]] = None
    files: Optional[List[CloudFile]] = None
    data_inputs: Optional[List[Any]] = None
    settings: Optional[Dict[str, Any]] = None
    tools: Optional[Dict[str, Any]] = None
    options: Optional[Dict[str, Any]] = None
    response: Optional[ResponseOptions] = None
    webhooks: Optional[List[WebhookSubscription]] = None
    trajectory_id: Optional[str] = None
    phase: Optional[int] = None
    recording_context: Optional[str] = None
    auth_token: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _compact(
            {
                "input": self.input,
                "urls": self.urls,
                "schema": self.schema,
                "files": _files_payload(self.files),
                "dataInputs": self.data_inputs,
                "settings": self.settings,
                "tools": self.tools,
                "options": self.options,
                "response": self.response.to_payload() if self.response else None,
                "webhooks": _webhooks_payload(self.webhooks),
                "trajectoryId": self.trajectory_id,
                "phase": self.phase,
                "recordingContext": self.recording_context,
                "authToken": self.auth_token,
            }
        )


@dataclass(frozen=True)
class ScrapeRequest:
    """Cloud ``/scrape`` request."""

    urls: List[str] = field(default_factory=list)
    settings: Optional[Dict[str, Any]] = None
    options: Optional[Dict[str, Any]] = None
    response: Optional[ResponseOptions] = None
    webhooks: Optional[List[WebhookSubscription]] = None
    trajectory_id: Optional[str] = None
    auth_token: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return _compact(
            {
                "urls": list(self.urls),
                "settings": self.settings,
                "options": self.options,
                "response": self.response.to_payload() if self.response else None,
                "webhooks": _webhooks_payload(self.webhooks),
                "trajectoryId": self.trajectory_id,
                "authToken": self.auth_token,
            }
        )


@dataclass(frozen=True)
class UnifiedScrapeRequest(ScrapeRequest):
    """Scrape request with routing hints."""

    target: Optional[RunMode] = None
    prefer_extension: Optional[bool] = None
    require_local_session: Optional[bool] = None
    device_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload.update(
            _compact(
                {
                    "target": _enum_value(self.target),
                    "preferExtension": self.prefer_extension,
                    "requireLocalSession": self.require_local_session,
                    "deviceId": self.device_id,
                }
            )
        )
        return payload


@dataclass(frozen=True)
class ExtensionPlannerRequest:
    """Planner run executed by the browser extension through the hub."""

    input: str
    urls: Optional[List[str]] = None
    schema: Optional[Dict[str, Any]] = None
    file_urls: Optional[List[str]] = None
    device_id: Optional[str] = None
    params: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class ToolRequest:
    """Raw hub tool call."""

    tool: str
    params: Dict[str, Any] = field(default_factory=dict)
    device_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"tool": self.tool, "params": dict(self.params or {})}
        if self.device_id:
            payload["deviceId"] = self.device_id
        return payload


@dataclass(frozen=True)
class UnifiedRunRequest:
    """Agent run with routing hints; routed to cloud ``/agent`` or the planner tool."""

    input: str
    urls: Optional[List[str]] = None
    schema: Optional[Dict[str, Any]] = None
    files: Optional[List[CloudFile]] = None
    file_urls: Optional[List[str]] = None
    data_inputs: Optional[List[Any]] = None
    settings: Optional[Dict[str, Any]] = None
    tools: Optional[Dict[str, Any]] = None
    options: Optional[Dict[str, Any]] = None
    response: Optional[ResponseOptions] = None
    webhooks: Optional[List[WebhookSubscription]] = None
    trajectory_id: Optional[str] = None
    phase: Optional[int] = None
    recording_context: Optional[str] = None
    auth_token: Optional[str] = None

    # Routing hints
    target: Optional[RunMode] = None
    prefer_extension: Optional[bool] = None
    require_local_session: Optional[bool] = None
    device_id: Optional[str] = None
    extension_params: Optional[Dict[str, Any]] = None
