from fastapi import APIRouter, Body, Depends
from loguru import logger

from app.api.live.dependency import CurrentUser, Platform
from app.api.live.schemas.live import (
    CheckAndGoLiveIn,
    CheckAndGoLiveOut,
    CreateLiveIn,
    CreateLiveOut,
    EndLiveIn,
    EndLiveOut,
    StatusOut,
    TransitionIn,
    TransitionOut,
)
from app.app_config import get_app_environ_config
from app.domain.live.broadcast.broadcast_domain import BroadcastService
from app.domain.live.broadcast.broadcast_models import ProvisionParams

router = APIRouter(prefix="/live")

# Singleton instance
_broadcast_service = BroadcastService()


def get_broadcast_service() -> BroadcastService:
    """Get the singleton BroadcastService instance."""
    return _broadcast_service


@router.post("/create")
async def create_live(
    user: CurrentUser,
    platform: Platform,
    body: CreateLiveIn | None = Body(default=None),
    service: BroadcastService = Depends(get_broadcast_service),
) -> CreateLiveOut:
    """Create a broadcast bound to a fresh ingest endpoint."""
    body = body or CreateLiveIn()
    handle = await service.create_broadcast(
        platform,
        ProvisionParams(
            title=body.title,
            description=body.description,
            privacy_status=body.privacy,
        ),
    )

    logger.info(
        "✅ Live stream created for user {}: broadcast={} stream={}",
        user.user_id,
        handle.broadcast_id,
        handle.stream_id,
    )

    return CreateLiveOut(
        ingest_url=handle.ingest_url,
        stream_key=handle.stream_key.get_secret_value(),
        broadcast_id=handle.broadcast_id,
        stream_id=handle.stream_id,
        auto_live_enabled=get_app_environ_config().AUTO_LIVE_ENABLED,
    )


@router.post("/check-and-go-live")
async def check_and_go_live(
    body: CheckAndGoLiveIn,
    user: CurrentUser,
    platform: Platform,
    service: BroadcastService = Depends(get_broadcast_service),
) -> CheckAndGoLiveOut:
    """Try to move the broadcast to live, absorbing ingest-inactive refusals.

    Never raises for platform refusals: the outcome, `canRetry` and the
    current lifecycle are reported in the body.
    """
    logger.info("Check-and-go-live for broadcast {} by {}", body.broadcast_id, user.user_id)

    result = await service.check_and_go_live(platform, body.broadcast_id, body.budget_seconds)

    return CheckAndGoLiveOut.from_result(result)


@router.get("/status/{broadcast_id}")
async def get_live_status(
    broadcast_id: str,
    user: CurrentUser,
    platform: Platform,
    service: BroadcastService = Depends(get_broadcast_service),
) -> StatusOut:
    """Read-only lifecycle and ingest health."""
    response = await service.get_status(platform, broadcast_id)
    return StatusOut.from_response(response)


@router.post("/end")
async def end_live(
    body: EndLiveIn,
    user: CurrentUser,
    platform: Platform,
    service: BroadcastService = Depends(get_broadcast_service),
) -> EndLiveOut:
    """End the session. Remote teardown is best-effort and never fails the call."""
    response = await service.end_broadcast(platform, body.broadcast_id)

    logger.info("🛑 Live stream {} ended by {}", body.broadcast_id, user.user_id)

    return EndLiveOut.from_response(response)


@router.post("/transition")
async def transition_live(
    body: TransitionIn,
    user: CurrentUser,
    platform: Platform,
    service: BroadcastService = Depends(get_broadcast_service),
) -> TransitionOut:
    """Manually transition a broadcast to live or complete."""
    result = await service.transition(platform, body.broadcast_id, body.broadcast_status)

    return TransitionOut(
        broadcast_id=body.broadcast_id,
        status=body.broadcast_status,
        message=result.message if result else f"Broadcast transitioned to {body.broadcast_status}",
    )
