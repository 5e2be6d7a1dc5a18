"""Broadcast domain service."""

from loguru import logger

from app.app_config import get_app_environ_config
from app.schemas import BroadcastLifecycle, GoLiveOutcome
from app.services.integrations.youtube.youtube_errors import PlatformError
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from ._end import EndOperations
from ._provisioner import BroadcastProvisioner, provision_error_status
from ._registry import CoordinatorRegistry
from ._status import StatusOperations
from .broadcast_models import (
    BroadcastHandle,
    BroadcastStatusResponse,
    EndBroadcastResponse,
    LivePlatform,
    ProvisionParams,
    TransitionResult,
)


class BroadcastService:
    """Entry point for the live endpoints.

    Every operation takes the platform client bound to the caller's
    credential; coordinator state lives in the shared registry.
    """

    def __init__(self, registry: CoordinatorRegistry | None = None):
        self.registry = registry or CoordinatorRegistry(
            finished_capacity=get_app_environ_config().GO_LIVE_FINISHED_CACHE_SIZE
        )
        self._provisioner = BroadcastProvisioner()
        self._status = StatusOperations()
        self._end = EndOperations(self.registry)

    async def create_broadcast(
        self, platform: LivePlatform, params: ProvisionParams | None = None
    ) -> BroadcastHandle:
        """Provision a bound broadcast + ingest endpoint.

        Raises AppError with a client-facing status on any platform failure.
        """
        try:
            return await self._provisioner.provision(platform, params)
        except PlatformError as e:
            errcode, status_code, message = provision_error_status(e)
            logger.error("Create live stream failed: kind={} message={}", e.kind, e.errmesg)
            raise AppError(errcode=errcode, errmesg=message, status_code=status_code) from e

    async def check_and_go_live(
        self,
        platform: LivePlatform,
        broadcast_id: str,
        budget: float | None = None,
    ) -> TransitionResult:
        """Run (or resume) the go-live round for a broadcast."""
        return await self.registry.request_go_live(platform, broadcast_id, budget)

    async def get_status(self, platform: LivePlatform, broadcast_id: str) -> BroadcastStatusResponse:
        return await self._status.get_status(platform, broadcast_id)

    async def end_broadcast(self, platform: LivePlatform, broadcast_id: str) -> EndBroadcastResponse:
        return await self._end.end_broadcast(platform, broadcast_id)

    async def transition(
        self,
        platform: LivePlatform,
        broadcast_id: str,
        broadcast_status: str,
    ) -> TransitionResult | None:
        """Manual transition.

        `live` runs a full coordinator round and raises E_STREAM_INACTIVE if the
        broadcast is not live at the end of it. `complete` is issued directly.
        """
        if broadcast_status == BroadcastLifecycle.LIVE:
            result = await self.check_and_go_live(platform, broadcast_id)
            if result.outcome in {GoLiveOutcome.PENDING, GoLiveOutcome.PARTIALLY_LIVE}:
                raise AppError(
                    errcode=AppErrorCode.E_STREAM_INACTIVE,
                    errmesg=(
                        "Stream is inactive. Please ensure you are streaming video to the "
                        "RTMP endpoint before going live."
                    ),
                    status_code=HttpStatusCode.BAD_REQUEST,
                )
            if result.outcome != GoLiveOutcome.LIVE:
                raise AppError(
                    errcode=AppErrorCode.E_INVALID_TRANSITION,
                    errmesg=result.message,
                    status_code=HttpStatusCode.BAD_REQUEST,
                )
            return result

        if broadcast_status == BroadcastLifecycle.COMPLETE:
            self.registry.discard(broadcast_id)
            await platform.transition_broadcast(broadcast_id, BroadcastLifecycle.COMPLETE.value)
            logger.info("Broadcast {} transitioned to complete", broadcast_id)
            return None

        raise AppError(
            errcode=AppErrorCode.E_INVALID_REQUEST,
            errmesg=f"Invalid broadcast status: {broadcast_status}",
            status_code=HttpStatusCode.BAD_REQUEST,
        )
