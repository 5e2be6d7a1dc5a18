"""Platform error classification for the YouTube live endpoints."""

from __future__ import annotations

import re
from enum import Enum

from app.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

from .youtube_schemas import YouTubeErrorEnvelope


class PlatformErrorKind(str, Enum):
    INGEST_INACTIVE = "ingest_inactive"
    TRANSIENT = "transient"
    RATE_LIMITED = "rate_limited"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    REDUNDANT = "redundant"
    PERMANENT = "permanent"

    def __str__(self) -> str:
        return self.value

    @property
    def retryable(self) -> bool:
        return self in {
            PlatformErrorKind.INGEST_INACTIVE,
            PlatformErrorKind.TRANSIENT,
            PlatformErrorKind.RATE_LIMITED,
        }


_REASON_KINDS: dict[str, PlatformErrorKind] = {
    "errorStreamInactive": PlatformErrorKind.INGEST_INACTIVE,
    "redundantTransition": PlatformErrorKind.REDUNDANT,
    "invalidTransition": PlatformErrorKind.INVALID_STATE,
    "liveBroadcastNotFound": PlatformErrorKind.NOT_FOUND,
    "liveStreamNotFound": PlatformErrorKind.NOT_FOUND,
    "authError": PlatformErrorKind.AUTH,
    "insufficientPermissions": PlatformErrorKind.AUTH,
    "rateLimitExceeded": PlatformErrorKind.RATE_LIMITED,
    "userRateLimitExceeded": PlatformErrorKind.RATE_LIMITED,
    # Daily quota; does not recover within a go-live round
    "quotaExceeded": PlatformErrorKind.PERMANENT,
    "backendError": PlatformErrorKind.TRANSIENT,
    "liveStreamingNotEnabled": PlatformErrorKind.PERMANENT,
}

# Only consulted when the response carries no structured reason
_INGEST_INACTIVE_MESSAGE = re.compile(r"stream is inactive|not receiving data", re.IGNORECASE)

_KIND_STATUS: dict[PlatformErrorKind, HttpStatusCode] = {
    PlatformErrorKind.INGEST_INACTIVE: HttpStatusCode.BAD_REQUEST,
    PlatformErrorKind.TRANSIENT: HttpStatusCode.BAD_GATEWAY,
    PlatformErrorKind.RATE_LIMITED: HttpStatusCode.TOO_MANY_REQUESTS,
    PlatformErrorKind.AUTH: HttpStatusCode.UNAUTHORIZED,
    PlatformErrorKind.NOT_FOUND: HttpStatusCode.NOT_FOUND,
    PlatformErrorKind.INVALID_STATE: HttpStatusCode.BAD_REQUEST,
    PlatformErrorKind.REDUNDANT: HttpStatusCode.CONFLICT,
    PlatformErrorKind.PERMANENT: HttpStatusCode.FORBIDDEN,
}

_KIND_ERRCODE: dict[PlatformErrorKind, AppErrorCode] = {
    PlatformErrorKind.INGEST_INACTIVE: AppErrorCode.E_STREAM_INACTIVE,
    PlatformErrorKind.TRANSIENT: AppErrorCode.E_PLATFORM_UNAVAILABLE,
    PlatformErrorKind.RATE_LIMITED: AppErrorCode.E_PLATFORM_RATE_LIMITED,
    PlatformErrorKind.AUTH: AppErrorCode.E_PLATFORM_AUTH,
    PlatformErrorKind.NOT_FOUND: AppErrorCode.E_BROADCAST_NOT_FOUND,
    PlatformErrorKind.INVALID_STATE: AppErrorCode.E_INVALID_TRANSITION,
    PlatformErrorKind.REDUNDANT: AppErrorCode.E_INVALID_TRANSITION,
    PlatformErrorKind.PERMANENT: AppErrorCode.E_PLATFORM_REJECTED,
}


class PlatformError(AppError):
    """A failed call to the live-video platform."""

    def __init__(
        self,
        kind: PlatformErrorKind,
        message: str,
        *,
        reason: str | None = None,
        http_status: int | None = None,
    ):
        super().__init__(
            errcode=_KIND_ERRCODE[kind],
            errmesg=message,
            status_code=_KIND_STATUS[kind],
        )
        self.kind = kind
        self.reason = reason
        self.http_status = http_status

    @property
    def retryable(self) -> bool:
        return self.kind.retryable


def classify_error(http_status: int, payload: object) -> tuple[PlatformErrorKind, str | None, str]:
    """Map an error response to (kind, reason, message).

    Structured `errors[].reason` values win; the HTTP status decides when no
    known reason is present.
    """
    reasons: list[str] = []
    message = f"HTTP {http_status}"

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        envelope = YouTubeErrorEnvelope.model_validate(payload)
        message = envelope.error.message or message
        reasons = [item.reason for item in envelope.error.errors if item.reason]

    for reason in reasons:
        if reason in _REASON_KINDS:
            return _REASON_KINDS[reason], reason, message

    reason = reasons[0] if reasons else None

    if not reasons and _INGEST_INACTIVE_MESSAGE.search(message):
        return PlatformErrorKind.INGEST_INACTIVE, None, message
    if http_status == 401:
        return PlatformErrorKind.AUTH, reason, message
    if http_status == 404:
        return PlatformErrorKind.NOT_FOUND, reason, message
    if http_status == 429:
        return PlatformErrorKind.RATE_LIMITED, reason, message
    if http_status >= 500:
        return PlatformErrorKind.TRANSIENT, reason, message
    if http_status == 400:
        return PlatformErrorKind.INVALID_STATE, reason, message

    return PlatformErrorKind.PERMANENT, reason, message
