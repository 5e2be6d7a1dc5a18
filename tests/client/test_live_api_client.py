"""Tests for LiveApiClient."""

import httpx
import pytest

from app.client.live_api_client import LiveApiClient, LiveApiError


def make_client(handler) -> LiveApiClient:
    return LiveApiClient(
        "http://api.test/", "session-token", timeout=10, transport=httpx.MockTransport(handler)
    )


class TestLiveApiClient:
    async def test_create_live(self):
        """Should send the bearer token and parse the camelCase body."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "ingestUrl": "rtmp://x/live2",
                    "streamKey": "secret",
                    "broadcastId": "bc_1",
                    "streamId": "st_1",
                    "autoLiveEnabled": True,
                },
            )

        created = await make_client(handler).create_live(title="T")

        assert seen[0].url == "http://api.test/live/create"
        assert seen[0].headers["Authorization"] == "Bearer session-token"
        assert created.broadcast_id == "bc_1"
        assert created.auto_live_enabled is True

    async def test_error_envelope_raises(self):
        """Should raise LiveApiError carrying the server error code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                401,
                json={"success": False, "errcode": "E_BAD_TOKEN", "errmesg": "Invalid token"},
            )

        with pytest.raises(LiveApiError) as exc_info:
            await make_client(handler).get_status("bc_1")

        assert exc_info.value.status_code == 401
        assert exc_info.value.errcode == "E_BAD_TOKEN"
        assert exc_info.value.message == "Invalid token"

    async def test_timeout_raises(self):
        """Should report timeouts as LiveApiError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(LiveApiError) as exc_info:
            await make_client(handler).check_and_go_live("bc_1", budget_seconds=9)

        assert exc_info.value.timed_out is True

    async def test_unexpected_body_raises(self):
        """Should reject a 200 answer that does not match the expected shape."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"unexpected": True})

        with pytest.raises(LiveApiError):
            await make_client(handler).end_live("bc_1")
