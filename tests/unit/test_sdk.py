# -*- coding: utf-8 -*-
"""Unit tests for the grouped SDK facade."""

import pytest

from rtrvr_core import RtrvrClient, create_rtrvr_client
from rtrvr_core.contracts import (
    ExtensionPlannerRequest,
    RunMode,
    ScrapeRequest,
    SelectedMode,
    UnifiedRunRequest,
    UnifiedScrapeRequest,
)
from tests.fixtures.factories import (
    CLOUD_URL,
    CONTROL_URL,
    RecordingFetcher,
    devices_response,
    hub_success,
    json_response,
    make_config,
)


def make_sdk(fetcher):
    return create_rtrvr_client("rtrvr_sdk_key", make_config(), fetcher=fetcher)


@pytest.mark.asyncio
async def test_raw_exposes_underlying_client():
    sdk = make_sdk(RecordingFetcher())
    assert isinstance(sdk.raw, RtrvrClient)
    await sdk.close()


@pytest.mark.asyncio
async def test_agent_group_routes_and_runs_on_cloud():
    fetcher = RecordingFetcher(devices_response(), json_response({"a": 1}), json_response({"b": 2}))

    async with make_sdk(fetcher) as sdk:
        routed = await sdk.agent.run(UnifiedRunRequest(input="go"))
        direct = await sdk.agent.cloud(UnifiedRunRequest(input="go", file_urls=["https://f.test/x.pdf"]))

    assert routed.metadata.selected_mode is SelectedMode.CLOUD
    assert direct["b"] == 2
    assert fetcher.calls[2].url == f"{CLOUD_URL}/agent"
    assert fetcher.calls[2].body["files"][0]["mimeType"] == "application/pdf"


@pytest.mark.asyncio
async def test_scrape_group_direct_and_routed():
    fetcher = RecordingFetcher(json_response({"pages": 1}), json_response({"pages": 2}))
    sdk = make_sdk(fetcher)

    direct = await sdk.scrape.run(ScrapeRequest(urls=["https://a.test"]))
    routed = await sdk.scrape.route(UnifiedScrapeRequest(urls=["https://a.test"], target=RunMode.CLOUD))

    assert direct["pages"] == 1
    assert routed.data["pages"] == 2
    assert [call.url for call in fetcher.calls] == [f"{CLOUD_URL}/scrape", f"{CLOUD_URL}/scrape"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method_name, tool",
    [
        ("act", "act_on_tab"),
        ("extract", "extract_from_tab"),
        ("crawl", "crawl_and_extract_from_tab"),
        ("planner", "planner"),
    ],
)
async def test_tool_shortcuts(method_name, tool):
    fetcher = RecordingFetcher(hub_success({"ok": True}, tool=tool))
    sdk = make_sdk(fetcher)

    result = await getattr(sdk.tools, method_name)({"user_input": "x"}, device_id="d1")

    assert result == {"ok": True}
    assert fetcher.calls[0].body == {"tool": tool, "params": {"user_input": "x"}, "deviceId": "d1"}


@pytest.mark.asyncio
async def test_extension_devices_credits_and_profile_groups():
    fetcher = RecordingFetcher(
        hub_success({"plan": "done"}, tool="planner"),
        devices_response("d1"),
        hub_success({"credits": 5}),
        json_response({"email": "user@example.test"}),
        json_response({"tools": []}),
    )
    sdk = make_sdk(fetcher)

    assert await sdk.extension.run(ExtensionPlannerRequest(input="go")) == {"plan": "done"}
    assert (await sdk.devices.list()).device_count == 1
    assert await sdk.credits.get() == {"credits": 5}
    assert (await sdk.profile.get())["email"] == "user@example.test"
    assert (await sdk.profile.capabilities())["tools"] == []
    assert fetcher.calls[3].url == f"{CONTROL_URL}/cli/profile"
    assert fetcher.calls[4].url == f"{CONTROL_URL}/cli/capabilities"


@pytest.mark.asyncio
async def test_top_level_run_delegates_to_router():
    fetcher = RecordingFetcher(devices_response("d1"), hub_success({"ok": True}, tool="planner"))
    sdk = make_sdk(fetcher)

    response = await sdk.run(UnifiedRunRequest(input="go"))

    assert response.metadata.selected_mode is SelectedMode.EXTENSION
    assert response.metadata.device_id == "d1"
