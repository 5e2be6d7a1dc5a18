"""Async client for the YouTube Data API v3 live endpoints.

Usage:
    from app.services.integrations.youtube.youtube_client import YouTubeLiveClient

    client = YouTubeLiveClient(access_token)
    broadcast = await client.insert_broadcast(title="My stream", ...)
    stream = await client.insert_stream(title="My stream")
    await client.bind_broadcast(broadcast.id, stream.id)
    await client.transition_broadcast(broadcast.id, "live")

Every method raises `PlatformError` on failure; transport errors and timeouts
are reported as `PlatformErrorKind.TRANSIENT`.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from app.app_config import get_app_environ_config

from .youtube_errors import PlatformError, PlatformErrorKind, classify_error
from .youtube_schemas import LiveBroadcast, LiveStream

BROADCAST_PARTS = "snippet,status,contentDetails"
STREAM_PARTS = "snippet,cdn,status"


class YouTubeLiveClient:
    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        cfg = get_app_environ_config()
        self.base_url = (base_url or cfg.YOUTUBE_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else cfg.YOUTUBE_REQUEST_TIMEOUT_SECONDS
        self._access_token = access_token
        self._transport = transport

    def _build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Accept": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._build_headers(),
                )
        except httpx.TimeoutException as e:
            logger.warning("YouTube {} {} timed out after {}s", method, path, self.timeout)
            raise PlatformError(
                PlatformErrorKind.TRANSIENT, f"Request to platform timed out: {type(e).__name__}"
            ) from e
        except httpx.TransportError as e:
            logger.warning("YouTube {} {} transport error: {}", method, path, e)
            raise PlatformError(
                PlatformErrorKind.TRANSIENT, f"Platform unreachable: {type(e).__name__}"
            ) from e

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()

        try:
            payload = response.json()
        except ValueError:
            payload = None

        kind, reason, message = classify_error(response.status_code, payload)
        logger.debug(
            "YouTube {} {} failed: status={} kind={} reason={} message={}",
            method,
            path,
            response.status_code,
            kind,
            reason,
            message,
        )
        raise PlatformError(kind, message, reason=reason, http_status=response.status_code)

    async def insert_broadcast(
        self,
        *,
        title: str,
        description: str,
        privacy_status: str,
        scheduled_start: str,
        scheduled_end: str | None = None,
    ) -> LiveBroadcast:
        """Create a liveBroadcast resource."""
        snippet: dict[str, Any] = {
            "title": title,
            "description": description,
            "scheduledStartTime": scheduled_start,
        }
        if scheduled_end:
            snippet["scheduledEndTime"] = scheduled_end

        body = {
            "snippet": snippet,
            "status": {"privacyStatus": privacy_status, "selfDeclaredMadeForKids": False},
            "contentDetails": {"enableAutoStart": False, "enableAutoStop": True},
        }
        data = await self._request(
            "POST", "/liveBroadcasts", params={"part": BROADCAST_PARTS}, json=body
        )
        return LiveBroadcast.model_validate(data)

    async def insert_stream(
        self,
        *,
        title: str,
        resolution: str = "720p",
        frame_rate: str = "30fps",
    ) -> LiveStream:
        """Create a liveStream (RTMP ingest endpoint) resource."""
        body = {
            "snippet": {"title": title},
            "cdn": {
                "ingestionType": "rtmp",
                "resolution": resolution,
                "frameRate": frame_rate,
            },
        }
        data = await self._request("POST", "/liveStreams", params={"part": STREAM_PARTS}, json=body)
        return LiveStream.model_validate(data)

    async def bind_broadcast(self, broadcast_id: str, stream_id: str) -> LiveBroadcast:
        data = await self._request(
            "POST",
            "/liveBroadcasts/bind",
            params={"id": broadcast_id, "streamId": stream_id, "part": "id,contentDetails"},
        )
        return LiveBroadcast.model_validate(data)

    async def transition_broadcast(self, broadcast_id: str, status: str) -> LiveBroadcast:
        """Request a lifecycle transition (`testing`, `live` or `complete`)."""
        data = await self._request(
            "POST",
            "/liveBroadcasts/transition",
            params={"broadcastStatus": status, "id": broadcast_id, "part": "id,status"},
        )
        return LiveBroadcast.model_validate(data)

    async def get_broadcast(self, broadcast_id: str) -> LiveBroadcast:
        """Read a broadcast. Raises NOT_FOUND when the platform returns no item."""
        data = await self._request(
            "GET", "/liveBroadcasts", params={"id": broadcast_id, "part": BROADCAST_PARTS}
        )
        items = (data or {}).get("items") or []
        if not items:
            raise PlatformError(
                PlatformErrorKind.NOT_FOUND,
                f"Broadcast {broadcast_id} not found",
                reason="liveBroadcastNotFound",
                http_status=404,
            )
        return LiveBroadcast.model_validate(items[0])

    async def get_stream(self, stream_id: str) -> LiveStream:
        data = await self._request(
            "GET", "/liveStreams", params={"id": stream_id, "part": STREAM_PARTS}
        )
        items = (data or {}).get("items") or []
        if not items:
            raise PlatformError(
                PlatformErrorKind.NOT_FOUND,
                f"Stream {stream_id} not found",
                reason="liveStreamNotFound",
                http_status=404,
            )
        return LiveStream.model_validate(items[0])

    async def delete_broadcast(self, broadcast_id: str) -> None:
        await self._request("DELETE", "/liveBroadcasts", params={"id": broadcast_id})

    async def delete_stream(self, stream_id: str) -> None:
        await self._request("DELETE", "/liveStreams", params={"id": stream_id})
