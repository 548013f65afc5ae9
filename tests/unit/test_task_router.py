# -*- coding: utf-8 -*-
"""Unit tests for channel selection in TaskRouter."""

import pytest

from rtrvr_core.common.exceptions import (
    AuthScopeError,
    LocalSessionUnavailableError,
    NoDeviceError,
    ToolExecutionError,
    TransportError,
    ValidationError,
)
from rtrvr_core.contracts import RunMode, SelectedMode, UnifiedRunRequest, UnifiedScrapeRequest
from tests.fixtures.factories import (
    CLOUD_URL,
    HUB_TOKEN,
    MCP_URL,
    RecordingFetcher,
    devices_response,
    hub_failure,
    hub_success,
    json_response,
    make_client,
)

RUN = UnifiedRunRequest(input="Find pricing", urls=["https://shop.test"])
SCRAPE = UnifiedScrapeRequest(urls=["https://shop.test"])


def cloud_ok(payload=None, request_id="cloud-req"):
    return json_response(payload or {"result": "cloud"}, request_id=request_id)


class TestCloudMode:
    @pytest.mark.asyncio
    async def test_cloud_target_calls_agent_endpoint_only(self):
        fetcher = RecordingFetcher(cloud_ok())
        client = make_client(fetcher)

        response = await client.run(UnifiedRunRequest(input="go", target=RunMode.CLOUD))

        assert [call.url for call in fetcher.calls] == [f"{CLOUD_URL}/agent"]
        assert response.metadata.selected_mode is SelectedMode.CLOUD
        assert response.metadata.requested_mode is RunMode.CLOUD
        assert response.metadata.fallback_applied is False
        assert response.metadata.request_id == "cloud-req"
        assert response.metadata.attempt == 1
        assert response.data["result"] == "cloud"

    @pytest.mark.asyncio
    async def test_default_target_comes_from_routing_config(self):
        fetcher = RecordingFetcher(cloud_ok())
        client = make_client(fetcher, default_target=RunMode.CLOUD)

        response = await client.scrape(SCRAPE)

        assert fetcher.calls[0].url == f"{CLOUD_URL}/scrape"
        assert fetcher.calls[0].body == {"urls": ["https://shop.test"]}
        assert response.metadata.requested_mode is RunMode.CLOUD

    @pytest.mark.asyncio
    async def test_hub_token_is_rejected_for_cloud_before_network(self):
        fetcher = RecordingFetcher()
        client = make_client(fetcher, api_key=HUB_TOKEN)

        with pytest.raises(AuthScopeError, match="requires an rtrvr_ API key"):
            await client.run(UnifiedRunRequest(input="go", target=RunMode.CLOUD))
        assert fetcher.calls == []


class TestExtensionMode:
    @pytest.mark.asyncio
    async def test_extension_target_calls_planner_with_device(self):
        fetcher = RecordingFetcher(hub_success({"answer": 42}, tool="planner", request_id="hub-req"))
        client = make_client(fetcher)

        response = await client.run(
            UnifiedRunRequest(input="go", target=RunMode.EXTENSION, device_id="dev-9")
        )

        assert len(fetcher.calls) == 1
        call = fetcher.calls[0]
        assert call.url == MCP_URL
        assert call.tool == "planner"
        assert call.body["deviceId"] == "dev-9"
        assert call.body["params"]["user_input"] == "go"
        assert response.metadata.selected_mode is SelectedMode.EXTENSION
        assert response.metadata.device_id == "dev-9"
        assert response.metadata.request_id == "hub-req"
        assert response.data == {"answer": 42}

    @pytest.mark.asyncio
    async def test_extension_scrape_aliased_to_cloud_is_reported(self):
        fetcher = RecordingFetcher(
            hub_success({"pages": []}, tool="cloud_scrape", requested_tool="scrape")
        )
        client = make_client(fetcher)

        response = await client.scrape(
            UnifiedScrapeRequest(urls=["https://shop.test"], target=RunMode.EXTENSION)
        )

        assert len(fetcher.calls) == 1
        assert response.metadata.selected_mode is SelectedMode.CLOUD
        assert response.metadata.requested_mode is RunMode.EXTENSION
        assert response.metadata.fallback_applied is True
        assert response.metadata.fallback_reason == "Scrape request resolved to cloud_scrape."

    @pytest.mark.asyncio
    async def test_extension_mode_does_not_fall_back(self):
        fetcher = RecordingFetcher(hub_failure("No online extension available"))
        client = make_client(fetcher)

        with pytest.raises(ToolExecutionError):
            await client.run(UnifiedRunRequest(input="go", target=RunMode.EXTENSION))
        assert len(fetcher.calls) == 1


class TestAutoMode:
    @pytest.mark.asyncio
    async def test_no_devices_routes_to_cloud_without_fallback(self):
        fetcher = RecordingFetcher(devices_response(), cloud_ok())
        client = make_client(fetcher)

        response = await client.run(RUN)

        assert [call.tool for call in fetcher.calls_to(MCP_URL)] == ["list_devices"]
        assert fetcher.calls[1].url == f"{CLOUD_URL}/agent"
        assert response.metadata.selected_mode is SelectedMode.CLOUD
        assert response.metadata.requested_mode is RunMode.AUTO
        assert response.metadata.fallback_applied is False
        assert response.metadata.fallback_reason is None

    @pytest.mark.asyncio
    async def test_online_device_runs_planner(self):
        fetcher = RecordingFetcher(devices_response("dev-1"), hub_success({"ok": True}, tool="planner"))
        client = make_client(fetcher)

        response = await client.run(RUN)

        assert [call.tool for call in fetcher.calls] == ["list_devices", "planner"]
        assert response.metadata.selected_mode is SelectedMode.EXTENSION
        assert response.metadata.device_id == "dev-1"
        assert response.metadata.fallback_applied is False

    @pytest.mark.asyncio
    async def test_device_disappearing_mid_run_falls_back_to_cloud(self):
        fetcher = RecordingFetcher(
            devices_response("dev-1"),
            hub_failure("No online Chrome extension found for this user"),
            cloud_ok(),
        )
        client = make_client(fetcher)

        response = await client.run(RUN)

        assert len(fetcher.calls) == 3
        assert fetcher.calls[2].url == f"{CLOUD_URL}/agent"
        assert response.metadata.selected_mode is SelectedMode.CLOUD
        assert response.metadata.fallback_applied is True
        assert response.metadata.fallback_reason == (
            "Extension device became unavailable during execution. Routed to cloud /agent."
        )

    @pytest.mark.asyncio
    async def test_scrape_fallback_reason_names_scrape_endpoint(self):
        fetcher = RecordingFetcher(
            devices_response("dev-1"),
            hub_failure("Device dev-1 is not online"),
            cloud_ok(),
        )
        client = make_client(fetcher)

        response = await client.scrape(SCRAPE)

        assert fetcher.calls[2].url == f"{CLOUD_URL}/scrape"
        assert response.metadata.fallback_reason.endswith("Routed to cloud /scrape.")

    @pytest.mark.asyncio
    async def test_other_extension_errors_propagate(self):
        fetcher = RecordingFetcher(
            devices_response("dev-1"),
            json_response({"error": "Unknown tool: scrape"}, status=400),
        )
        client = make_client(fetcher)

        with pytest.raises(TransportError, match="Unknown tool: scrape"):
            await client.scrape(SCRAPE)
        assert len(fetcher.calls) == 2

    @pytest.mark.asyncio
    async def test_prefer_extension_is_advisory(self):
        fetcher = RecordingFetcher(devices_response(), cloud_ok())
        client = make_client(fetcher)

        response = await client.run(UnifiedRunRequest(input="go", prefer_extension=True))

        assert response.metadata.selected_mode is SelectedMode.CLOUD

    @pytest.mark.asyncio
    async def test_prefer_extension_default_is_sent_to_planner(self):
        fetcher = RecordingFetcher(devices_response("dev-1"), hub_success({"ok": True}, tool="planner"))
        client = make_client(fetcher, prefer_extension_by_default=True)

        await client.run(RUN)

        assert fetcher.calls[1].body["params"]["preferExtension"] is True

    @pytest.mark.asyncio
    async def test_request_prefer_extension_overrides_default(self):
        fetcher = RecordingFetcher(devices_response("dev-1"), hub_success({"ok": True}, tool="scrape"))
        client = make_client(fetcher, prefer_extension_by_default=True)

        await client.scrape(UnifiedScrapeRequest(urls=["https://shop.test"], prefer_extension=False))

        assert fetcher.calls[1].body["params"]["preferExtension"] is False

    @pytest.mark.asyncio
    async def test_prefer_extension_default_stays_off_the_cloud_body(self):
        fetcher = RecordingFetcher(devices_response(), cloud_ok())
        client = make_client(fetcher, prefer_extension_by_default=True)

        await client.scrape(SCRAPE)

        assert fetcher.calls[1].body == {"urls": ["https://shop.test"]}


class TestLocalSessionRequired:
    @pytest.mark.asyncio
    async def test_non_finite_attempt_from_hub_uses_transport_attempt(self):
        fetcher = RecordingFetcher(
            json_response(
                {"success": True, "data": {"ok": True}, "metadata": {"tool": "planner", "attempt": float("inf")}}
            )
        )
        client = make_client(fetcher)

        response = await client.run(UnifiedRunRequest(input="go", device_id="dev-1"))

        assert response.metadata.selected_mode is SelectedMode.EXTENSION
        assert response.metadata.attempt == 1

    @pytest.mark.asyncio
    async def test_explicit_device_skips_device_listing(self):
        fetcher = RecordingFetcher(hub_success({"ok": True}, tool="planner"))
        client = make_client(fetcher)

        response = await client.run(UnifiedRunRequest(input="go", device_id="dev-7"))

        assert [call.tool for call in fetcher.calls] == ["planner"]
        assert response.metadata.selected_mode is SelectedMode.EXTENSION
        assert response.metadata.device_id == "dev-7"

    @pytest.mark.asyncio
    async def test_required_session_without_devices_raises(self):
        fetcher = RecordingFetcher(devices_response())
        client = make_client(fetcher)

        with pytest.raises(NoDeviceError, match="requires local browser session"):
            await client.run(UnifiedRunRequest(input="go", require_local_session=True))
        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_required_session_uses_first_online_device(self):
        fetcher = RecordingFetcher(devices_response("dev-a", "dev-b"), hub_success({"ok": 1}, tool="scrape"))
        client = make_client(fetcher)

        response = await client.scrape(
            UnifiedScrapeRequest(urls=["https://shop.test"], require_local_session=True)
        )

        assert fetcher.calls[1].body["params"]["requireLocalSession"] is True
        assert response.metadata.device_id == "dev-a"

    @pytest.mark.asyncio
    async def test_alias_to_cloud_is_an_error_when_local_session_required(self):
        fetcher = RecordingFetcher(
            hub_success({"pages": []}, tool="cloud_scrape", requested_tool="scrape")
        )
        client = make_client(fetcher)

        with pytest.raises(LocalSessionUnavailableError, match="local browser session is required"):
            await client.scrape(UnifiedScrapeRequest(urls=["https://shop.test"], device_id="dev-1"))
        assert len(fetcher.calls) == 1

    @pytest.mark.asyncio
    async def test_required_session_does_not_fall_back(self):
        fetcher = RecordingFetcher(hub_failure("Requested device not found"))
        client = make_client(fetcher)

        with pytest.raises(ToolExecutionError):
            await client.run(UnifiedRunRequest(input="go", device_id="gone"))
        assert len(fetcher.calls) == 1


class TestValidation:
    @pytest.mark.asyncio
    async def test_empty_input_is_rejected_before_network(self):
        fetcher = RecordingFetcher()
        client = make_client(fetcher)

        with pytest.raises(ValidationError, match="`input` is required"):
            await client.run(UnifiedRunRequest(input="   "))
        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_empty_urls_are_rejected_before_network(self):
        fetcher = RecordingFetcher()
        client = make_client(fetcher)

        with pytest.raises(ValidationError, match="`urls` is required"):
            await client.scrape(UnifiedScrapeRequest(urls=[]))
        assert fetcher.calls == []


@pytest.mark.asyncio
async def test_routing_decision_is_logged(debug_logs):
    fetcher = RecordingFetcher(devices_response("dev-1"), hub_failure("No online extension available"), cloud_ok())

    await make_client(fetcher).run(RUN)

    messages = [record.getMessage() for record in debug_logs.records]
    assert "Extension device unavailable, falling back to cloud" in messages
    routed = [record for record in debug_logs.records if record.getMessage() == "Routed call"]
    assert routed[-1].selected_mode == "cloud"
    assert routed[-1].fallback_applied is True
