"""Broadcast domain models."""

from typing import Protocol

from pydantic import BaseModel, Field, SecretStr

from app.schemas import AttemptOutcome, GoLiveOutcome, TransitionState
from app.services.integrations.youtube.youtube_errors import PlatformErrorKind
from app.services.integrations.youtube.youtube_schemas import LiveBroadcast, LiveStream


class LivePlatform(Protocol):
    """Operations the go-live flow needs from the live-video platform."""

    async def insert_broadcast(
        self,
        *,
        title: str,
        description: str,
        privacy_status: str,
        scheduled_start: str,
        scheduled_end: str | None = None,
    ) -> LiveBroadcast: ...

    async def insert_stream(
        self, *, title: str, resolution: str = "720p", frame_rate: str = "30fps"
    ) -> LiveStream: ...

    async def bind_broadcast(self, broadcast_id: str, stream_id: str) -> LiveBroadcast: ...

    async def transition_broadcast(self, broadcast_id: str, status: str) -> LiveBroadcast: ...

    async def get_broadcast(self, broadcast_id: str) -> LiveBroadcast: ...

    async def get_stream(self, stream_id: str) -> LiveStream: ...

    async def delete_broadcast(self, broadcast_id: str) -> None: ...

    async def delete_stream(self, stream_id: str) -> None: ...


class BroadcastHandle(BaseModel, frozen=True):
    """One provisioned live session: broadcast bound to an ingest endpoint.

    `stream_key` is a secret; `repr()` and logs only ever show it masked.
    """

    broadcast_id: str
    stream_id: str
    ingest_url: str
    stream_key: SecretStr

    @property
    def ingest_address(self) -> str:
        """Full RTMP address the media uplink publishes to."""
        return f"{self.ingest_url.rstrip('/')}/{self.stream_key.get_secret_value()}"


class ProvisionParams(BaseModel):
    title: str | None = None
    description: str | None = None
    privacy_status: str | None = None


class TransitionAttempt(BaseModel):
    """One try at moving a broadcast to live."""

    attempt_number: int = Field(ge=1)
    outcome: AttemptOutcome
    delay_before_next_attempt: float | None = None
    error_kind: PlatformErrorKind | None = None
    message: str | None = None


class TransitionResult(BaseModel):
    """Outcome of one check-and-go-live call."""

    broadcast_id: str
    outcome: GoLiveOutcome
    state: TransitionState
    lifecycle_status: str | None = None
    can_retry: bool
    message: str
    attempts: list[TransitionAttempt] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome == GoLiveOutcome.LIVE


class BroadcastStatusResponse(BaseModel):
    """Read-only view of a broadcast and its ingest health."""

    broadcast_id: str
    title: str | None = None
    lifecycle_status: str | None = None
    privacy_status: str | None = None
    recording_status: str | None = None
    stream_id: str | None = None
    stream_status: str | None = None
    health_status: str | None = None
    ingest_active: bool = False
    can_transition_to_live: bool = False
    message: str


class EndBroadcastResponse(BaseModel):
    broadcast_id: str
    message: str
    remote_ended: bool
