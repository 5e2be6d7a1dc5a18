"""Go-live transition coordinator.

Drives one broadcast from ready/testing to live. The platform refuses the
transition until media is flowing into the bound ingest endpoint, so
retryable refusals (ingest inactive, timeouts, rate limits) are absorbed by a
bounded backoff loop; every other refusal is final.

A round is at most `max_attempts` transition attempts. After the last failed
attempt the coordinator waits the final delay, reads the broadcast once more
(the platform may flip it asynchronously) and ends the round LIVE or
PARTIALLY_LIVE. A later call after PARTIALLY_LIVE opens a fresh round.

When the caller passes a time budget, the coordinator never starts a wait it
cannot finish inside that budget. It answers PENDING instead and keeps the
attempt counter and the next-attempt deadline, so the next call resumes the
same round.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from loguru import logger

from app.schemas import AttemptOutcome, BroadcastLifecycle, GoLiveOutcome, TransitionState
from app.services.integrations.youtube.youtube_errors import PlatformError, PlatformErrorKind

from ._backoff import BackoffSchedule
from .broadcast_models import LivePlatform, TransitionAttempt, TransitionResult
from .transition_state_machine import TransitionStateMachine

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]

# Lifecycle values that mean the platform has accepted the go-live
_LIVE_LIFECYCLES = {BroadcastLifecycle.LIVE.value, BroadcastLifecycle.LIVE_STARTING.value}
_ENDED_LIFECYCLES = {s.value for s in BroadcastLifecycle.ended_states()}


class TransitionCoordinator:
    """Per-broadcast go-live state machine. One instance per active stream."""

    def __init__(
        self,
        broadcast_id: str,
        schedule: BackoffSchedule | None = None,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self.broadcast_id = broadcast_id
        self.schedule = schedule or BackoffSchedule()
        self.state = TransitionState.IDLE
        self.rounds = 0
        self.attempts: list[TransitionAttempt] = []
        self.history: list[TransitionAttempt] = []
        self.lifecycle_status: str | None = None

        self._clock = clock
        self._sleep = sleep
        self._next_attempt_at: float | None = None
        self._final_message = ""
        self._lock = asyncio.Lock()
        self._cancelled = asyncio.Event()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def _set_state(self, new_state: TransitionState) -> None:
        if self.state == new_state:
            return
        if not TransitionStateMachine.can_transition(self.state, new_state):
            raise ValueError(f"Invalid transition state change: {self.state} -> {new_state}")
        logger.debug("Broadcast {} go-live state {} -> {}", self.broadcast_id, self.state, new_state)
        self.state = new_state

    def cancel(self) -> None:
        """Stop all further attempts. Any pending wait wakes up and any in-flight
        platform response is discarded."""
        self._cancelled.set()
        if not TransitionStateMachine.is_final(self.state):
            self._set_state(TransitionState.CANCELLED)
            self._next_attempt_at = None
            self._final_message = "Go-live cancelled: session stopped"
            logger.info("Broadcast {} go-live cancelled", self.broadcast_id)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def request_go_live(
        self, platform: LivePlatform, budget: float | None = None
    ) -> TransitionResult:
        """Try to move the broadcast to live.

        Args:
            platform: Platform client bound to the caller's credential
            budget: Wall-clock seconds this call may spend, None for unbounded

        Returns:
            TransitionResult describing where the round stands
        """
        if TransitionStateMachine.is_final(self.state):
            return self._result_for_final_state()

        if self._lock.locked():
            return self._result(
                GoLiveOutcome.PENDING,
                can_retry=True,
                message="Transition attempt already in progress",
            )

        async with self._lock:
            return await self._run(platform, budget)

    async def _run(self, platform: LivePlatform, budget: float | None) -> TransitionResult:
        deadline = None if budget is None else self._clock() + budget

        if self.state in {TransitionState.IDLE, TransitionState.PARTIALLY_LIVE}:
            self._begin_round()

        while True:
            if self.state == TransitionState.BACKOFF:
                remaining = (self._next_attempt_at or 0.0) - self._clock()
                if remaining > 0:
                    if deadline is not None and self._clock() + remaining > deadline:
                        return self._result(
                            GoLiveOutcome.PENDING,
                            can_retry=True,
                            message=(
                                "Waiting for video on the ingest endpoint; "
                                f"next check in {remaining:.0f}s"
                            ),
                        )
                    if not await self._wait(remaining):
                        return self._result_for_final_state()

                self._next_attempt_at = None
                if len(self.attempts) >= self.schedule.max_attempts:
                    return await self._finish_round(platform)
                self._set_state(TransitionState.ATTEMPTING)

            if deadline is not None and self._clock() >= deadline:
                return self._result(
                    GoLiveOutcome.PENDING, can_retry=True, message="Time budget exhausted"
                )

            attempt = await self._attempt(platform, len(self.attempts) + 1)
            if self.cancelled:
                return self._result_for_final_state()

            self.attempts.append(attempt)
            self.history.append(attempt)

            if attempt.outcome == AttemptOutcome.SUCCEEDED:
                self._set_state(TransitionState.LIVE)
                self._final_message = attempt.message or "Broadcast is live"
                logger.info(
                    "✅ Broadcast {} is live after {} attempt(s)",
                    self.broadcast_id,
                    attempt.attempt_number,
                )
                return self._result_for_final_state()

            if attempt.outcome == AttemptOutcome.PERMANENT_FAILURE:
                self._set_state(TransitionState.FAILED)
                self._final_message = attempt.message or "Broadcast cannot go live"
                logger.warning(
                    "Broadcast {} go-live failed on attempt {}: kind={} message={}",
                    self.broadcast_id,
                    attempt.attempt_number,
                    attempt.error_kind,
                    attempt.message,
                )
                return self._result_for_final_state()

            self._next_attempt_at = self._clock() + (attempt.delay_before_next_attempt or 0.0)
            self._set_state(TransitionState.BACKOFF)
            logger.info(
                "Broadcast {} not live yet ({}), attempt {}/{}, waiting {}s",
                self.broadcast_id,
                attempt.error_kind,
                attempt.attempt_number,
                self.schedule.max_attempts,
                attempt.delay_before_next_attempt,
            )

    def _begin_round(self) -> None:
        self.rounds += 1
        self.attempts = []
        self._next_attempt_at = None
        self._set_state(TransitionState.ATTEMPTING)
        logger.info("Broadcast {} go-live round {} started", self.broadcast_id, self.rounds)

    async def _attempt(self, platform: LivePlatform, attempt_number: int) -> TransitionAttempt:
        try:
            broadcast = await platform.get_broadcast(self.broadcast_id)
            self.lifecycle_status = broadcast.life_cycle_status

            if self.lifecycle_status in _LIVE_LIFECYCLES:
                self.lifecycle_status = BroadcastLifecycle.LIVE.value
                return TransitionAttempt(
                    attempt_number=attempt_number,
                    outcome=AttemptOutcome.SUCCEEDED,
                    message="Broadcast is already live",
                )

            if self.lifecycle_status in _ENDED_LIFECYCLES:
                return TransitionAttempt(
                    attempt_number=attempt_number,
                    outcome=AttemptOutcome.PERMANENT_FAILURE,
                    error_kind=PlatformErrorKind.INVALID_STATE,
                    message=f"Broadcast has already ended ({self.lifecycle_status})",
                )

            await platform.transition_broadcast(self.broadcast_id, BroadcastLifecycle.LIVE.value)
            self.lifecycle_status = BroadcastLifecycle.LIVE.value
            return TransitionAttempt(
                attempt_number=attempt_number,
                outcome=AttemptOutcome.SUCCEEDED,
                message="Broadcast transitioned to live successfully",
            )

        except PlatformError as e:
            if e.kind == PlatformErrorKind.REDUNDANT:
                self.lifecycle_status = BroadcastLifecycle.LIVE.value
                return TransitionAttempt(
                    attempt_number=attempt_number,
                    outcome=AttemptOutcome.SUCCEEDED,
                    message="Broadcast is already live",
                )

            if e.retryable:
                return TransitionAttempt(
                    attempt_number=attempt_number,
                    outcome=AttemptOutcome.RETRYABLE_FAILURE,
                    delay_before_next_attempt=self.schedule.delay(attempt_number),
                    error_kind=e.kind,
                    message=_retry_message(e.kind),
                )

            return TransitionAttempt(
                attempt_number=attempt_number,
                outcome=AttemptOutcome.PERMANENT_FAILURE,
                error_kind=e.kind,
                message=e.errmesg,
            )

    async def _finish_round(self, platform: LivePlatform) -> TransitionResult:
        """Final read-only check after the last backoff wait."""
        try:
            broadcast = await platform.get_broadcast(self.broadcast_id)
            self.lifecycle_status = broadcast.life_cycle_status
        except PlatformError as e:
            logger.warning(
                "Broadcast {} final status check failed: kind={} message={}",
                self.broadcast_id,
                e.kind,
                e.errmesg,
            )

        if self.cancelled:
            return self._result_for_final_state()

        if self.lifecycle_status in _LIVE_LIFECYCLES:
            self.lifecycle_status = BroadcastLifecycle.LIVE.value
            self._set_state(TransitionState.LIVE)
            self._final_message = "Broadcast went live"
            logger.info("✅ Broadcast {} went live during backoff", self.broadcast_id)
            return self._result_for_final_state()

        self._set_state(TransitionState.PARTIALLY_LIVE)
        logger.warning(
            "Broadcast {} still not live after {} attempts; treating as partially live",
            self.broadcast_id,
            len(self.attempts),
        )
        return self._result(
            GoLiveOutcome.PARTIALLY_LIVE,
            can_retry=True,
            message=(
                "No video detected at the ingest endpoint yet. The broadcast will go live "
                "once the platform receives the stream."
            ),
        )

    async def _wait(self, seconds: float) -> bool:
        """Sleep for `seconds` unless cancelled first. Returns False on cancel."""
        if self.cancelled:
            return False

        sleeper = asyncio.ensure_future(self._sleep(seconds))
        canceller = asyncio.ensure_future(self._cancelled.wait())
        try:
            await asyncio.wait({sleeper, canceller}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, canceller):
                if not task.done():
                    task.cancel()
        return not self.cancelled

    def _result_for_final_state(self) -> TransitionResult:
        if self.state == TransitionState.LIVE:
            return self._result(GoLiveOutcome.LIVE, can_retry=False, message=self._final_message)
        if self.state == TransitionState.CANCELLED:
            return self._result(
                GoLiveOutcome.CANCELLED, can_retry=False, message=self._final_message
            )
        return self._result(GoLiveOutcome.FAILED, can_retry=False, message=self._final_message)

    def _result(self, outcome: GoLiveOutcome, *, can_retry: bool, message: str) -> TransitionResult:
        return TransitionResult(
            broadcast_id=self.broadcast_id,
            outcome=outcome,
            state=self.state,
            lifecycle_status=self.lifecycle_status,
            can_retry=can_retry,
            message=message,
            attempts=list(self.attempts),
        )


def _retry_message(kind: PlatformErrorKind) -> str:
    if kind == PlatformErrorKind.INGEST_INACTIVE:
        return "Stream is inactive: no video data detected at the ingest endpoint yet"
    if kind == PlatformErrorKind.RATE_LIMITED:
        return "Platform rate limit reached"
    return "Platform did not respond in time"
