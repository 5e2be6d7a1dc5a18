"""State machine for the go-live coordinator of a single broadcast."""

from app.schemas import TransitionState


class TransitionStateMachine:
    """State machine for go-live transition rounds.

    State flow with triggers:
    - IDLE -> ATTEMPTING (check-and-go-live requested) | CANCELLED
    - ATTEMPTING -> LIVE (platform accepted the transition, or already live)
                  | BACKOFF (retryable failure: ingest inactive, timeout, rate limit)
                  | FAILED (any other platform error)
                  | CANCELLED
    - BACKOFF -> ATTEMPTING (delay elapsed, attempts remain)
               | LIVE (final status check found the broadcast live)
               | PARTIALLY_LIVE (attempts exhausted, platform may still flip asynchronously)
               | CANCELLED (session stopped during the wait)
    - PARTIALLY_LIVE -> ATTEMPTING (a later call opens a fresh round) | CANCELLED
    - LIVE, FAILED, CANCELLED are final for the session
    """

    TRANSITIONS: dict[TransitionState, set[TransitionState]] = {
        TransitionState.IDLE: {
            TransitionState.ATTEMPTING,
            TransitionState.CANCELLED,
        },
        TransitionState.ATTEMPTING: {
            TransitionState.LIVE,
            TransitionState.BACKOFF,
            TransitionState.FAILED,
            TransitionState.CANCELLED,
        },
        TransitionState.BACKOFF: {
            TransitionState.ATTEMPTING,
            TransitionState.LIVE,
            TransitionState.PARTIALLY_LIVE,
            TransitionState.CANCELLED,
        },
        TransitionState.PARTIALLY_LIVE: {
            TransitionState.ATTEMPTING,
            TransitionState.CANCELLED,
        },
        TransitionState.LIVE: set(),
        TransitionState.FAILED: set(),
        TransitionState.CANCELLED: set(),
    }

    # Round is over; no attempt is in progress
    TERMINAL_STATES: set[TransitionState] = {
        TransitionState.LIVE,
        TransitionState.FAILED,
        TransitionState.PARTIALLY_LIVE,
        TransitionState.CANCELLED,
    }

    # No further attempt for this broadcast without a new session
    FINAL_STATES: set[TransitionState] = {
        TransitionState.LIVE,
        TransitionState.FAILED,
        TransitionState.CANCELLED,
    }

    @classmethod
    def can_transition(cls, current: TransitionState, new: TransitionState) -> bool:
        """Check if state transition is valid.

        Args:
            current: Current coordinator state
            new: Target state to transition to

        Returns:
            True if transition is valid, False otherwise
        """
        return new in cls.TRANSITIONS.get(current, set())

    @classmethod
    def is_terminal(cls, state: TransitionState) -> bool:
        return state in cls.TERMINAL_STATES

    @classmethod
    def is_final(cls, state: TransitionState) -> bool:
        return state in cls.FINAL_STATES

    @classmethod
    def get_valid_transitions(cls, state: TransitionState) -> set[TransitionState]:
        return cls.TRANSITIONS.get(state, set())
