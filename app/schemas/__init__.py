"""Shared schema enums."""

from .broadcast_state import (
    AttemptOutcome,
    BroadcastLifecycle,
    GoLiveOutcome,
    IngestStatus,
    PlatformState,
    PollResult,
    TransitionState,
    UiState,
)

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
