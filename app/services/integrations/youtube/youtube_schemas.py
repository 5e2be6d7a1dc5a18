"""Pydantic models for the YouTube Data API v3 live resources.

Only the parts of `liveBroadcast` and `liveStream` the go-live flow reads are
modelled; unknown fields are ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _YouTubeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True, extra="ignore")


class BroadcastSnippet(_YouTubeModel):
    title: str | None = None
    description: str | None = None
    scheduled_start_time: str | None = Field(default=None, alias="scheduledStartTime")
    scheduled_end_time: str | None = Field(default=None, alias="scheduledEndTime")
    actual_start_time: str | None = Field(default=None, alias="actualStartTime")
    actual_end_time: str | None = Field(default=None, alias="actualEndTime")


class BroadcastStatus(_YouTubeModel):
    life_cycle_status: str | None = Field(default=None, alias="lifeCycleStatus")
    privacy_status: str | None = Field(default=None, alias="privacyStatus")
    recording_status: str | None = Field(default=None, alias="recordingStatus")
    self_declared_made_for_kids: bool | None = Field(
        default=None, alias="selfDeclaredMadeForKids"
    )


class BroadcastContentDetails(_YouTubeModel):
    bound_stream_id: str | None = Field(default=None, alias="boundStreamId")
    enable_auto_start: bool | None = Field(default=None, alias="enableAutoStart")
    enable_auto_stop: bool | None = Field(default=None, alias="enableAutoStop")


class LiveBroadcast(_YouTubeModel):
    id: str
    snippet: BroadcastSnippet | None = None
    status: BroadcastStatus | None = None
    content_details: BroadcastContentDetails | None = Field(default=None, alias="contentDetails")

    @property
    def life_cycle_status(self) -> str | None:
        return self.status.life_cycle_status if self.status else None

    @property
    def bound_stream_id(self) -> str | None:
        return self.content_details.bound_stream_id if self.content_details else None


class IngestionInfo(_YouTubeModel):
    ingestion_address: str | None = Field(default=None, alias="ingestionAddress")
    backup_ingestion_address: str | None = Field(default=None, alias="backupIngestionAddress")
    stream_name: str | None = Field(default=None, alias="streamName")


class StreamCdn(_YouTubeModel):
    ingestion_type: str | None = Field(default=None, alias="ingestionType")
    resolution: str | None = None
    frame_rate: str | None = Field(default=None, alias="frameRate")
    ingestion_info: IngestionInfo | None = Field(default=None, alias="ingestionInfo")


class StreamHealth(_YouTubeModel):
    status: str | None = None


class StreamStatus(_YouTubeModel):
    stream_status: str | None = Field(default=None, alias="streamStatus")
    health_status: StreamHealth | None = Field(default=None, alias="healthStatus")


class StreamSnippet(_YouTubeModel):
    title: str | None = None


class LiveStream(_YouTubeModel):
    id: str
    snippet: StreamSnippet | None = None
    cdn: StreamCdn | None = None
    status: StreamStatus | None = None

    @property
    def stream_status(self) -> str | None:
        return self.status.stream_status if self.status else None

    @property
    def health_status(self) -> str | None:
        if self.status and self.status.health_status:
            return self.status.health_status.status
        return None


class YouTubeErrorItem(_YouTubeModel):
    reason: str | None = None
    domain: str | None = None
    message: str | None = None


class YouTubeErrorBody(_YouTubeModel):
    code: int | None = None
    message: str | None = None
    errors: list[YouTubeErrorItem] = Field(default_factory=list)


class YouTubeErrorEnvelope(_YouTubeModel):
    error: YouTubeErrorBody
