"""Tests for YouTubeLiveClient request shapes and error classification."""

import httpx
import orjson
import pytest

from app.services.integrations.youtube.youtube_client import YouTubeLiveClient
from app.services.integrations.youtube.youtube_errors import (
    PlatformError,
    PlatformErrorKind,
    classify_error,
)

BASE_URL = "https://yt.test/youtube/v3"


def error_body(code: int, reason: str | None, message: str) -> dict:
    errors = [{"reason": reason, "message": message}] if reason else []
    return {"error": {"code": code, "message": message, "errors": errors}}


def make_client(handler) -> YouTubeLiveClient:
    return YouTubeLiveClient("token-abc", base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestRequests:
    async def test_transition_request_shape(self):
        """Should POST the transition with bearer auth and query parameters."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200, json={"id": "bc_1", "status": {"lifeCycleStatus": "live"}}
            )

        broadcast = await make_client(handler).transition_broadcast("bc_1", "live")

        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/youtube/v3/liveBroadcasts/transition"
        assert request.url.params["broadcastStatus"] == "live"
        assert request.url.params["id"] == "bc_1"
        assert request.headers["Authorization"] == "Bearer token-abc"
        assert broadcast.life_cycle_status == "live"

    async def test_insert_broadcast_body(self):
        """Should send snippet, status and contentDetails with camelCase keys."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "bc_9", "status": {"lifeCycleStatus": "created"}})

        broadcast = await make_client(handler).insert_broadcast(
            title="T",
            description="D",
            privacy_status="public",
            scheduled_start="2026-01-01T00:00:00.000Z",
        )

        body = orjson.loads(seen[0].content)
        assert seen[0].url.params["part"] == "snippet,status,contentDetails"
        assert body["snippet"]["scheduledStartTime"] == "2026-01-01T00:00:00.000Z"
        assert body["status"]["privacyStatus"] == "public"
        assert broadcast.id == "bc_9"

    async def test_get_stream_parses_ingestion(self):
        """Should parse ingestion info and stream status."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "id": "st_1",
                            "cdn": {
                                "ingestionInfo": {
                                    "ingestionAddress": "rtmp://x/live2",
                                    "streamName": "abcd",
                                }
                            },
                            "status": {
                                "streamStatus": "active",
                                "healthStatus": {"status": "good"},
                            },
                        }
                    ]
                },
            )

        stream = await make_client(handler).get_stream("st_1")

        assert stream.cdn.ingestion_info.ingestion_address == "rtmp://x/live2"
        assert stream.stream_status == "active"
        assert stream.health_status == "good"

    async def test_empty_items_is_not_found(self):
        """Should raise NOT_FOUND when the list response has no items."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": []})

        with pytest.raises(PlatformError) as exc_info:
            await make_client(handler).get_broadcast("bc_missing")

        assert exc_info.value.kind == PlatformErrorKind.NOT_FOUND

    async def test_delete_accepts_empty_body(self):
        """Should accept 204 responses."""

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "DELETE"
            return httpx.Response(204)

        assert await make_client(handler).delete_broadcast("bc_1") is None


class TestErrors:
    async def test_stream_inactive_is_retryable(self):
        """Should classify errorStreamInactive as retryable ingest-inactive."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json=error_body(403, "errorStreamInactive", "Stream is inactive"))

        with pytest.raises(PlatformError) as exc_info:
            await make_client(handler).transition_broadcast("bc_1", "live")

        assert exc_info.value.kind == PlatformErrorKind.INGEST_INACTIVE
        assert exc_info.value.retryable is True
        assert exc_info.value.reason == "errorStreamInactive"
        assert exc_info.value.http_status == 403

    async def test_timeout_is_transient(self):
        """Should report timeouts as transient."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(PlatformError) as exc_info:
            await make_client(handler).get_broadcast("bc_1")

        assert exc_info.value.kind == PlatformErrorKind.TRANSIENT
        assert exc_info.value.retryable is True

    async def test_connection_error_is_transient(self):
        """Should report connection failures as transient."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(PlatformError) as exc_info:
            await make_client(handler).get_broadcast("bc_1")

        assert exc_info.value.kind == PlatformErrorKind.TRANSIENT


class TestClassifyError:
    @pytest.mark.parametrize(
        ("status", "reason", "kind"),
        [
            (403, "errorStreamInactive", PlatformErrorKind.INGEST_INACTIVE),
            (400, "redundantTransition", PlatformErrorKind.REDUNDANT),
            (403, "invalidTransition", PlatformErrorKind.INVALID_STATE),
            (404, "liveBroadcastNotFound", PlatformErrorKind.NOT_FOUND),
            (401, "authError", PlatformErrorKind.AUTH),
            (403, "quotaExceeded", PlatformErrorKind.PERMANENT),
            (403, "rateLimitExceeded", PlatformErrorKind.RATE_LIMITED),
            (403, "userRateLimitExceeded", PlatformErrorKind.RATE_LIMITED),
            (403, "liveStreamingNotEnabled", PlatformErrorKind.PERMANENT),
            (503, "backendError", PlatformErrorKind.TRANSIENT),
        ],
    )
    def test_reason_wins(self, status, reason, kind):
        """Should classify by the structured reason first."""
        assert classify_error(status, error_body(status, reason, "msg"))[0] == kind

    @pytest.mark.parametrize(
        ("status", "kind"),
        [
            (401, PlatformErrorKind.AUTH),
            (404, PlatformErrorKind.NOT_FOUND),
            (429, PlatformErrorKind.RATE_LIMITED),
            (500, PlatformErrorKind.TRANSIENT),
            (400, PlatformErrorKind.INVALID_STATE),
            (403, PlatformErrorKind.PERMANENT),
        ],
    )
    def test_status_fallback(self, status, kind):
        """Should fall back to the HTTP status when no known reason is present."""
        assert classify_error(status, None)[0] == kind

    def test_message_fallback_only_without_reason(self):
        """Should only match the inactive message when the response has no reason."""
        no_reason = classify_error(403, error_body(403, None, "Stream is inactive"))
        other_reason = classify_error(403, error_body(403, "forbidden", "Stream is inactive"))

        assert no_reason[0] == PlatformErrorKind.INGEST_INACTIVE
        assert other_reason[0] == PlatformErrorKind.PERMANENT
