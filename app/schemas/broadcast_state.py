"""Common enums used across broadcast schemas."""

from enum import Enum


class BroadcastLifecycle(str, Enum):
    """Broadcast lifecycle status as reported by the platform.

    ready -> testStarting -> testing -> liveStarting -> live -> complete
    `revoked` is set by the platform when the broadcast is taken down.
    """

    CREATED = "created"
    READY = "ready"
    TEST_STARTING = "testStarting"
    TESTING = "testing"
    LIVE_STARTING = "liveStarting"
    LIVE = "live"
    COMPLETE = "complete"
    REVOKED = "revoked"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def transitionable_states(cls) -> set["BroadcastLifecycle"]:
        """States the platform accepts a transition to live from."""
        return {cls.READY, cls.TESTING}

    @classmethod
    def ended_states(cls) -> set["BroadcastLifecycle"]:
        return {cls.COMPLETE, cls.REVOKED}


class IngestStatus(str, Enum):
    """Ingest endpoint (liveStream) status as reported by the platform."""

    CREATED = "created"
    READY = "ready"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class TransitionState(str, Enum):
    """Go-live coordinator states for one broadcast.

    IDLE -> ATTEMPTING -> LIVE | FAILED | BACKOFF | CANCELLED
    BACKOFF -> ATTEMPTING | PARTIALLY_LIVE | LIVE | CANCELLED

    LIVE, FAILED, PARTIALLY_LIVE and CANCELLED are terminal for a round.
    """

    IDLE = "idle"
    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    LIVE = "live"
    FAILED = "failed"
    PARTIALLY_LIVE = "partially_live"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class AttemptOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    RETRYABLE_FAILURE = "retryable-failure"
    PERMANENT_FAILURE = "permanent-failure"

    def __str__(self) -> str:
        return self.value


class GoLiveOutcome(str, Enum):
    """Result of one check-and-go-live call."""

    LIVE = "live"
    PENDING = "pending"
    PARTIALLY_LIVE = "partially_live"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class PollResult(str, Enum):
    """Result of one client poll cycle."""

    CONFIRMED_LIVE = "confirmed-live"
    STILL_PENDING = "still-pending"
    GIVE_UP_DECLARE_LIVE = "give-up-declare-live"
    HARD_ERROR = "hard-error"

    def __str__(self) -> str:
        return self.value


class PlatformState(str, Enum):
    """What the platform has confirmed, independent of what the UI shows."""

    CONFIRMED = "confirmed"
    ASSUMED = "assumed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class UiState(str, Enum):
    PREPARING = "preparing"
    LIVE = "live"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value


__all__ = [
    "AttemptOutcome",
    "BroadcastLifecycle",
    "GoLiveOutcome",
    "IngestStatus",
    "PlatformState",
    "PollResult",
    "TransitionState",
    "UiState",
]
