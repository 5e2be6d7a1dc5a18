"""Broadcast provisioning: create broadcast + ingest endpoint and bind them."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from loguru import logger
from pydantic import SecretStr

from app.app_config import get_app_environ_config
from app.services.integrations.youtube.youtube_errors import PlatformError, PlatformErrorKind
from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .broadcast_models import BroadcastHandle, LivePlatform, ProvisionParams


def _isoformat(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BroadcastProvisioner:
    """Creates a bound broadcast/stream pair on the platform.

    A failure after the first resource exists removes whatever was created
    (best-effort) so no unbound stream is left behind, then re-raises.
    """

    async def provision(
        self, platform: LivePlatform, params: ProvisionParams | None = None
    ) -> BroadcastHandle:
        params = params or ProvisionParams()
        cfg = get_app_environ_config()

        now = datetime.now(timezone.utc)
        title = params.title or f"{cfg.BROADCAST_DEFAULT_TITLE} - {_isoformat(now)}"
        description = params.description or cfg.BROADCAST_DEFAULT_DESCRIPTION
        privacy_status = params.privacy_status or cfg.BROADCAST_PRIVACY_STATUS

        broadcast = await platform.insert_broadcast(
            title=title,
            description=description,
            privacy_status=privacy_status,
            scheduled_start=_isoformat(now),
            scheduled_end=_isoformat(now + timedelta(hours=cfg.BROADCAST_SCHEDULED_HOURS)),
        )
        logger.info("📡 Created broadcast {}", broadcast.id)

        stream_id: str | None = None
        try:
            stream = await platform.insert_stream(
                title=title,
                resolution=cfg.STREAM_RESOLUTION,
                frame_rate=cfg.STREAM_FRAME_RATE,
            )
            stream_id = stream.id
            logger.info("📡 Created ingest stream {} for broadcast {}", stream_id, broadcast.id)

            ingestion = stream.cdn.ingestion_info if stream.cdn else None
            if not ingestion or not ingestion.ingestion_address or not ingestion.stream_name:
                raise AppError(
                    errcode=AppErrorCode.E_PROVISION_FAILED,
                    errmesg=f"Stream {stream_id} returned no ingestion info",
                    status_code=HttpStatusCode.BAD_GATEWAY,
                )

            await platform.bind_broadcast(broadcast.id, stream_id)
            logger.info("🔗 Bound broadcast {} to stream {}", broadcast.id, stream_id)

        except Exception:
            await self._cleanup(platform, broadcast.id, stream_id)
            raise

        return BroadcastHandle(
            broadcast_id=broadcast.id,
            stream_id=stream_id,
            ingest_url=ingestion.ingestion_address,
            stream_key=SecretStr(ingestion.stream_name),
        )

    async def _cleanup(
        self, platform: LivePlatform, broadcast_id: str, stream_id: str | None
    ) -> None:
        if stream_id:
            try:
                await platform.delete_stream(stream_id)
                logger.info("Removed unbound stream {}", stream_id)
            except PlatformError as e:
                logger.error("Failed to remove unbound stream {}: {} {}", stream_id, e.kind, e.errmesg)

        try:
            await platform.delete_broadcast(broadcast_id)
            logger.info("Removed broadcast {} after failed provisioning", broadcast_id)
        except PlatformError as e:
            logger.error("Failed to remove broadcast {}: {} {}", broadcast_id, e.kind, e.errmesg)


def provision_error_status(error: PlatformError) -> tuple[AppErrorCode, int, str]:
    """Client-facing code/status/message for a provisioning failure."""
    if error.kind == PlatformErrorKind.AUTH:
        return (
            AppErrorCode.E_PLATFORM_AUTH,
            HttpStatusCode.UNAUTHORIZED,
            "YouTube authentication invalid, please reconnect",
        )
    if error.kind == PlatformErrorKind.PERMANENT:
        return (
            AppErrorCode.E_PLATFORM_REJECTED,
            HttpStatusCode.FORBIDDEN,
            "YouTube live streaming not enabled for this account",
        )
    if error.kind == PlatformErrorKind.RATE_LIMITED:
        return (
            AppErrorCode.E_PLATFORM_RATE_LIMITED,
            HttpStatusCode.TOO_MANY_REQUESTS,
            "Too many requests, please wait and try again",
        )
    if error.kind == PlatformErrorKind.TRANSIENT:
        return (
            AppErrorCode.E_PLATFORM_UNAVAILABLE,
            HttpStatusCode.BAD_GATEWAY,
            "YouTube is not reachable right now, please try again",
        )
    return (
        AppErrorCode.E_PROVISION_FAILED,
        HttpStatusCode.BAD_GATEWAY,
        f"Failed to create live stream: {error.errmesg}",
    )
