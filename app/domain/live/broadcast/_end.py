"""Broadcast ending operations."""

from loguru import logger

from app.schemas import BroadcastLifecycle
from app.services.integrations.youtube.youtube_errors import PlatformError

from ._registry import CoordinatorRegistry
from .broadcast_models import EndBroadcastResponse, LivePlatform

_NEVER_LIVE = {
    BroadcastLifecycle.CREATED.value,
    BroadcastLifecycle.READY.value,
    BroadcastLifecycle.TEST_STARTING.value,
    BroadcastLifecycle.TESTING.value,
}


class EndOperations:
    def __init__(self, registry: CoordinatorRegistry):
        self._registry = registry

    async def end_broadcast(self, platform: LivePlatform, broadcast_id: str) -> EndBroadcastResponse:
        """End a session.

        Stops the go-live coordinator first so no transition fires after this
        point, then tears the broadcast down remotely on a best-effort basis:
        - complete/revoked: nothing to do
        - live/liveStarting: transition to complete
        - created/ready/testing: delete the broadcast (it never went live)

        Remote failures are logged and never raised.
        """
        self._registry.discard(broadcast_id)

        try:
            broadcast = await platform.get_broadcast(broadcast_id)
            lifecycle = broadcast.life_cycle_status
            logger.info("Ending broadcast {} (current status: {})", broadcast_id, lifecycle)

            if lifecycle in {s.value for s in BroadcastLifecycle.ended_states()}:
                return EndBroadcastResponse(
                    broadcast_id=broadcast_id,
                    message="Live stream is already ended",
                    remote_ended=True,
                )

            if lifecycle in _NEVER_LIVE:
                await platform.delete_broadcast(broadcast_id)
                logger.info("Deleted broadcast {} that never went live", broadcast_id)
                return EndBroadcastResponse(
                    broadcast_id=broadcast_id,
                    message="Live stream ended before going live",
                    remote_ended=True,
                )

            await platform.transition_broadcast(broadcast_id, BroadcastLifecycle.COMPLETE.value)
            logger.info("🛑 Broadcast {} transitioned to complete", broadcast_id)
            return EndBroadcastResponse(
                broadcast_id=broadcast_id,
                message="Live stream ended successfully",
                remote_ended=True,
            )

        except PlatformError as e:
            logger.warning(
                "Ending broadcast {} on the platform failed, proceeding: {} {}",
                broadcast_id,
                e.kind,
                e.errmesg,
            )
            return EndBroadcastResponse(
                broadcast_id=broadcast_id,
                message="Live stream stopped; the platform could not be updated",
                remote_ended=False,
            )
