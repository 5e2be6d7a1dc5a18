"""Read-only broadcast status operations."""

from loguru import logger

from app.schemas import BroadcastLifecycle, IngestStatus
from app.services.integrations.youtube.youtube_errors import PlatformError
from app.services.integrations.youtube.youtube_schemas import LiveStream

from .broadcast_models import BroadcastStatusResponse, LivePlatform


def status_message(lifecycle: str | None, stream: LiveStream | None) -> str:
    """Human-readable summary of lifecycle + ingest state."""
    if lifecycle == BroadcastLifecycle.LIVE:
        return "Broadcast is currently live"
    if lifecycle == BroadcastLifecycle.COMPLETE:
        return "Broadcast has ended"
    if lifecycle == BroadcastLifecycle.READY:
        if stream is None:
            return "Broadcast is ready, but stream details unavailable"
        if stream.stream_status == IngestStatus.ACTIVE:
            return "Stream is active and ready to go live"
        if stream.stream_status == IngestStatus.INACTIVE:
            return "Stream is inactive. Please start streaming video to the RTMP endpoint"
        return f"Stream status: {stream.stream_status}"
    return f"Broadcast status: {lifecycle}"


class StatusOperations:
    async def get_status(self, platform: LivePlatform, broadcast_id: str) -> BroadcastStatusResponse:
        """Read broadcast lifecycle and bound-stream health.

        Never requests a transition. Raises PlatformError (NOT_FOUND etc.) when
        the broadcast itself cannot be read; a failed stream read is logged and
        reported as unknown stream status.
        """
        broadcast = await platform.get_broadcast(broadcast_id)
        lifecycle = broadcast.life_cycle_status

        stream: LiveStream | None = None
        if broadcast.bound_stream_id:
            try:
                stream = await platform.get_stream(broadcast.bound_stream_id)
            except PlatformError as e:
                logger.warning(
                    "Could not fetch stream {} for broadcast {}: {} {}",
                    broadcast.bound_stream_id,
                    broadcast_id,
                    e.kind,
                    e.errmesg,
                )

        ingest_active = bool(stream and stream.stream_status == IngestStatus.ACTIVE)
        transitionable = {s.value for s in BroadcastLifecycle.transitionable_states()}

        return BroadcastStatusResponse(
            broadcast_id=broadcast.id,
            title=broadcast.snippet.title if broadcast.snippet else None,
            lifecycle_status=lifecycle,
            privacy_status=broadcast.status.privacy_status if broadcast.status else None,
            recording_status=broadcast.status.recording_status if broadcast.status else None,
            stream_id=stream.id if stream else broadcast.bound_stream_id,
            stream_status=stream.stream_status if stream else None,
            health_status=stream.health_status if stream else None,
            ingest_active=ingest_active,
            can_transition_to_live=lifecycle in transitionable and ingest_active,
            message=status_message(lifecycle, stream),
        )
