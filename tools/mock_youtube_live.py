"""
Mock implementation of the YouTube Data API v3 live endpoints.

This FastAPI app keeps broadcasts and streams in memory so the backend can run
the whole create -> go-live -> end flow locally without a Google account:

* POST   /liveBroadcasts              - insert
* POST   /liveBroadcasts/bind         - bind to a stream
* POST   /liveBroadcasts/transition   - transition (rejects with errorStreamInactive
                                        MOCK_INACTIVE_REJECTIONS times first)
* GET    /liveBroadcasts              - list by id
* DELETE /liveBroadcasts              - delete
* POST   /liveStreams, GET /liveStreams, DELETE /liveStreams

Run with granian:
    granian --interface ASGI --host 127.0.0.1 --port 18082 tools.mock_youtube_live:app

Then point YOUTUBE_API_BASE_URL to http://127.0.0.1:18082 (e.g. in env.local) and set
YOUTUBE_ACCESS_TOKEN to any non-empty value.
"""

from __future__ import annotations

import os
import uuid
from typing import Any

from fastapi import FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger

app = FastAPI(title="youtube-live mock", version="0.1.0")

INACTIVE_REJECTIONS = int(os.environ.get("MOCK_INACTIVE_REJECTIONS", "2"))

_broadcasts: dict[str, dict[str, Any]] = {}
_streams: dict[str, dict[str, Any]] = {}
_rejections: dict[str, int] = {}


def _error(status_code: int, reason: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": status_code,
                "message": message,
                "errors": [{"reason": reason, "message": message, "domain": "youtube.liveBroadcast"}],
            }
        },
    )


def _check_auth(authorization: str | None) -> JSONResponse | None:
    if not authorization or not authorization.lower().startswith("bearer "):
        return _error(401, "authError", "Request had invalid authentication credentials.")
    return None


@app.get("/health")
async def health():
    """Health check endpoint for container orchestration."""
    return {"status": "ok", "service": "mock-youtube-live"}


@app.post("/liveBroadcasts")
async def insert_broadcast(request: Request, authorization: str | None = Header(None)):
    if failure := _check_auth(authorization):
        return failure

    body = await request.json()
    broadcast_id = f"bc_{uuid.uuid4().hex[:11]}"
    broadcast = {
        "kind": "youtube#liveBroadcast",
        "id": broadcast_id,
        "snippet": body.get("snippet", {}),
        "status": {**body.get("status", {}), "lifeCycleStatus": "created", "recordingStatus": "notRecording"},
        "contentDetails": {**body.get("contentDetails", {})},
    }
    _broadcasts[broadcast_id] = broadcast
    _rejections[broadcast_id] = INACTIVE_REJECTIONS
    logger.info("mock: inserted broadcast {}", broadcast_id)
    return broadcast


@app.post("/liveStreams")
async def insert_stream(request: Request, authorization: str | None = Header(None)):
    if failure := _check_auth(authorization):
        return failure

    body = await request.json()
    stream_id = f"st_{uuid.uuid4().hex[:11]}"
    stream = {
        "kind": "youtube#liveStream",
        "id": stream_id,
        "snippet": body.get("snippet", {}),
        "cdn": {
            **body.get("cdn", {}),
            "ingestionInfo": {
                "ingestionAddress": "rtmp://127.0.0.1/live2",
                "backupIngestionAddress": "rtmp://127.0.0.1/live2?backup=1",
                "streamName": uuid.uuid4().hex[:16],
            },
        },
        "status": {"streamStatus": "ready", "healthStatus": {"status": "noData"}},
    }
    _streams[stream_id] = stream
    logger.info("mock: inserted stream {}", stream_id)
    return stream


@app.post("/liveBroadcasts/bind")
async def bind_broadcast(
    id: str = Query(...),
    stream_id: str = Query(..., alias="streamId"),
    authorization: str | None = Header(None),
):
    if failure := _check_auth(authorization):
        return failure
    if id not in _broadcasts:
        return _error(404, "liveBroadcastNotFound", "Broadcast not found")
    if stream_id not in _streams:
        return _error(404, "liveStreamNotFound", "Stream not found")

    broadcast = _broadcasts[id]
    broadcast["contentDetails"]["boundStreamId"] = stream_id
    broadcast["status"]["lifeCycleStatus"] = "ready"
    return broadcast


@app.post("/liveBroadcasts/transition")
async def transition_broadcast(
    id: str = Query(...),
    broadcast_status: str = Query(..., alias="broadcastStatus"),
    authorization: str | None = Header(None),
):
    if failure := _check_auth(authorization):
        return failure
    broadcast = _broadcasts.get(id)
    if broadcast is None:
        return _error(404, "liveBroadcastNotFound", "Broadcast not found")

    current = broadcast["status"]["lifeCycleStatus"]
    if current == broadcast_status:
        return _error(400, "redundantTransition", "Broadcast is already in the requested status")

    if broadcast_status == "live":
        if current not in {"ready", "testing"}:
            return _error(403, "invalidTransition", f"Cannot transition from {current} to live")
        if _rejections.get(id, 0) > 0:
            _rejections[id] -= 1
            return _error(403, "errorStreamInactive", "Stream is inactive")
        stream = _streams.get(broadcast["contentDetails"].get("boundStreamId", ""))
        if stream:
            stream["status"] = {"streamStatus": "active", "healthStatus": {"status": "good"}}
    elif broadcast_status == "complete":
        if current not in {"live", "liveStarting", "testing"}:
            return _error(403, "invalidTransition", f"Cannot transition from {current} to complete")
    else:
        return _error(400, "invalidValue", f"Unsupported broadcastStatus {broadcast_status}")

    broadcast["status"]["lifeCycleStatus"] = broadcast_status
    logger.info("mock: broadcast {} {} -> {}", id, current, broadcast_status)
    return broadcast


@app.get("/liveBroadcasts")
async def list_broadcasts(id: str = Query(...), authorization: str | None = Header(None)):
    if failure := _check_auth(authorization):
        return failure
    items = [_broadcasts[i] for i in id.split(",") if i in _broadcasts]
    return {"kind": "youtube#liveBroadcastListResponse", "items": items}


@app.get("/liveStreams")
async def list_streams(id: str = Query(...), authorization: str | None = Header(None)):
    if failure := _check_auth(authorization):
        return failure
    items = [_streams[i] for i in id.split(",") if i in _streams]
    return {"kind": "youtube#liveStreamListResponse", "items": items}


@app.delete("/liveBroadcasts")
async def delete_broadcast(id: str = Query(...), authorization: str | None = Header(None)):
    if failure := _check_auth(authorization):
        return failure
    if _broadcasts.pop(id, None) is None:
        return _error(404, "liveBroadcastNotFound", "Broadcast not found")
    _rejections.pop(id, None)
    return Response(status_code=204)


@app.delete("/liveStreams")
async def delete_stream(id: str = Query(...), authorization: str | None = Header(None)):
    if failure := _check_auth(authorization):
        return failure
    if _streams.pop(id, None) is None:
        return _error(404, "liveStreamNotFound", "Stream not found")
    return Response(status_code=204)


__all__ = ["app"]
