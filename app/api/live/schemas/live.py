from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.domain.live.broadcast.broadcast_models import (
    BroadcastStatusResponse,
    EndBroadcastResponse,
    TransitionResult,
)
from app.schemas import GoLiveOutcome


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class CreateLiveIn(_CamelModel):
    title: str | None = Field(default=None, max_length=100, description="Broadcast title")
    description: str | None = Field(default=None, max_length=5000)
    privacy: str | None = Field(
        default=None,
        pattern="^(public|unlisted|private)$",
        description="Broadcast privacy status, defaults to the configured value",
    )


class CreateLiveOut(_CamelModel):
    success: bool = True
    ingest_url: str
    stream_key: str
    broadcast_id: str
    stream_id: str
    auto_live_enabled: bool


class CheckAndGoLiveIn(_CamelModel):
    broadcast_id: str = Field(min_length=1)
    budget_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Wall-clock seconds the server may spend on this call",
    )


class CheckAndGoLiveOut(_CamelModel):
    success: bool
    status: str
    message: str
    can_retry: bool
    outcome: str
    attempts: int
    broadcast_id: str

    @classmethod
    def from_result(cls, result: TransitionResult) -> "CheckAndGoLiveOut":
        if result.outcome == GoLiveOutcome.LIVE:
            status = "live"
        elif result.outcome == GoLiveOutcome.CANCELLED:
            status = "cancelled"
        elif result.outcome == GoLiveOutcome.FAILED:
            status = result.lifecycle_status or "error"
        else:
            status = result.lifecycle_status or "unknown"

        return cls(
            success=result.success,
            status=status,
            message=result.message,
            can_retry=result.can_retry,
            outcome=result.outcome.value,
            attempts=len(result.attempts),
            broadcast_id=result.broadcast_id,
        )


class StatusOut(_CamelModel):
    success: bool = True
    broadcast_id: str
    title: str | None = None
    lifecycle_status: str | None = None
    privacy_status: str | None = None
    stream_id: str | None = None
    stream_status: str | None = None
    health_status: str | None = None
    ingest_active: bool
    can_transition_to_live: bool
    message: str

    @classmethod
    def from_response(cls, response: BroadcastStatusResponse) -> "StatusOut":
        return cls(
            broadcast_id=response.broadcast_id,
            title=response.title,
            lifecycle_status=response.lifecycle_status,
            privacy_status=response.privacy_status,
            stream_id=response.stream_id,
            stream_status=response.stream_status,
            health_status=response.health_status,
            ingest_active=response.ingest_active,
            can_transition_to_live=response.can_transition_to_live,
            message=response.message,
        )


class EndLiveIn(_CamelModel):
    broadcast_id: str = Field(min_length=1)


class EndLiveOut(_CamelModel):
    success: bool = True
    broadcast_id: str
    message: str
    remote_ended: bool

    @classmethod
    def from_response(cls, response: EndBroadcastResponse) -> "EndLiveOut":
        return cls(
            broadcast_id=response.broadcast_id,
            message=response.message,
            remote_ended=response.remote_ended,
        )


class TransitionIn(_CamelModel):
    broadcast_id: str = Field(min_length=1)
    broadcast_status: str = Field(description="Target status: live or complete")


class TransitionOut(_CamelModel):
    success: bool = True
    broadcast_id: str
    status: str
    message: str
