"""Client-side go-live poller.

Calls check-and-go-live on a fixed cadence until the broadcast is live, the
server says retrying is pointless, or the cycle cap is reached. Every stop
condition flips the UI to live (fail-open); `platform_state` records whether
the platform actually confirmed it.

Timeline with the defaults (interval 5s, 10 cycles):
    t=0   cycle 1
    t=5   cycle 2 (scheduled after cycle 1 settled)
    ...
    t=45+ cycle 10, then declare live
"""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger
from pydantic import BaseModel, Field

from app.app_config import get_app_environ_config
from app.schemas import BroadcastLifecycle, PlatformState, PollResult, UiState

from .live_api_client import LiveApiClient, LiveApiError

Sleep = Callable[[float], Awaitable[None]]


class PollCycle(BaseModel):
    cycle_number: int = Field(ge=1)
    broadcast_id: str
    result: PollResult
    status: str | None = None
    message: str | None = None


class GoLiveOutcome(BaseModel):
    """Where polling ended.

    `ui_state` is what the user sees; `platform_state` is what the platform
    said (None once stopped before any conclusion).
    """

    ui_state: UiState
    platform_state: PlatformState | None = None
    cycles: int = 0
    message: str = ""

    @property
    def confirmed(self) -> bool:
        return self.platform_state == PlatformState.CONFIRMED


class GoLivePoller:
    def __init__(
        self,
        client: LiveApiClient,
        broadcast_id: str,
        interval: float | None = None,
        max_cycles: int | None = None,
        request_budget: float | None = None,
        sleep: Sleep = asyncio.sleep,
        on_update: Callable[[GoLiveOutcome], None] | None = None,
        confirm_cycles: int = 0,
    ):
        cfg = get_app_environ_config()
        self.client = client
        self.broadcast_id = broadcast_id
        self.interval = interval if interval is not None else cfg.POLL_INTERVAL_SECONDS
        self.max_cycles = max_cycles if max_cycles is not None else cfg.POLL_MAX_CYCLES
        if self.max_cycles < 1:
            raise ValueError("max_cycles must be at least 1")
        # Leave room for the response to travel back before the client times out
        self.request_budget = (
            request_budget if request_budget is not None else max(client.timeout - 1.0, 1.0)
        )
        self.confirm_cycles = confirm_cycles

        self.cycles: list[PollCycle] = []
        self.outcome: GoLiveOutcome | None = None

        self._sleep = sleep
        self._on_update = on_update
        self._task: asyncio.Task[GoLiveOutcome] | None = None
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self) -> asyncio.Future[GoLiveOutcome]:
        """Spawn the polling task. The first cycle fires immediately.

        Once stopped, no task is spawned and the returned future already holds
        the STOPPED outcome.
        """
        if self._task is not None:
            return self._task
        if self._stopped:
            done: asyncio.Future[GoLiveOutcome] = asyncio.get_running_loop().create_future()
            done.set_result(self.outcome)  # type: ignore[arg-type]
            return done
        self._task = asyncio.create_task(self.run(), name=f"go-live-poller:{self.broadcast_id}")
        return self._task

    async def wait(self) -> GoLiveOutcome:
        """Start if needed and wait for the outcome."""
        task = self.start()
        try:
            return await task
        except asyncio.CancelledError:
            if self._stopped and self.outcome is not None:
                return self.outcome
            raise

    def stop(self) -> GoLiveOutcome:
        """Stop polling now. No cycle fires afterwards and an in-flight answer is discarded."""
        if self.outcome is None or self.outcome.ui_state != UiState.STOPPED:
            self._stopped = True
            self.outcome = GoLiveOutcome(
                ui_state=UiState.STOPPED,
                platform_state=self.outcome.platform_state if self.outcome else None,
                cycles=len(self.cycles),
                message="Go-live polling stopped",
            )
            logger.info(
                "Go-live polling for {} stopped after {} cycle(s)",
                self.broadcast_id,
                len(self.cycles),
            )
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return self.outcome

    async def run(self) -> GoLiveOutcome:
        if self._stopped:
            return self.outcome  # type: ignore[return-value]

        outcome: GoLiveOutcome | None = None
        self._publish(GoLiveOutcome(ui_state=UiState.PREPARING, message="Starting live stream"))

        for cycle_number in range(1, self.max_cycles + 1):
            if cycle_number > 1:
                await self._sleep(self.interval)
                if self._stopped:
                    return self.outcome  # type: ignore[return-value]

            cycle = await self._poll_once(cycle_number)
            if self._stopped:
                return self.outcome  # type: ignore[return-value]
            self.cycles.append(cycle)

            if cycle.result == PollResult.CONFIRMED_LIVE:
                outcome = GoLiveOutcome(
                    ui_state=UiState.LIVE,
                    platform_state=PlatformState.CONFIRMED,
                    cycles=cycle_number,
                    message=cycle.message or "Broadcast is live",
                )
                break

            if cycle.result == PollResult.GIVE_UP_DECLARE_LIVE:
                outcome = GoLiveOutcome(
                    ui_state=UiState.LIVE,
                    platform_state=PlatformState.FAILED,
                    cycles=cycle_number,
                    message=cycle.message or "Platform refused the go-live",
                )
                break

            self._publish(
                GoLiveOutcome(
                    ui_state=UiState.PREPARING,
                    cycles=cycle_number,
                    message=cycle.message or "Waiting for the broadcast to go live",
                )
            )

        if outcome is None:
            outcome = GoLiveOutcome(
                ui_state=UiState.LIVE,
                platform_state=PlatformState.ASSUMED,
                cycles=len(self.cycles),
                message=f"No confirmation after {self.max_cycles} checks; assuming live",
            )

        self._publish(outcome)
        logger.info(
            "Go-live polling for {} finished: ui={} platform={} cycles={}",
            self.broadcast_id,
            outcome.ui_state,
            outcome.platform_state,
            outcome.cycles,
        )

        if outcome.platform_state == PlatformState.ASSUMED and self.confirm_cycles > 0:
            await self._confirm()

        return self.outcome  # type: ignore[return-value]

    async def _poll_once(self, cycle_number: int) -> PollCycle:
        try:
            response = await self.client.check_and_go_live(
                self.broadcast_id, budget_seconds=self.request_budget
            )
        except LiveApiError as e:
            logger.warning(
                "Go-live check {}/{} for {} failed: {}",
                cycle_number,
                self.max_cycles,
                self.broadcast_id,
                e.message,
            )
            return PollCycle(
                cycle_number=cycle_number,
                broadcast_id=self.broadcast_id,
                result=PollResult.HARD_ERROR,
                message=e.message,
            )

        if response.success:
            result = PollResult.CONFIRMED_LIVE
        elif not response.can_retry:
            result = PollResult.GIVE_UP_DECLARE_LIVE
        else:
            result = PollResult.STILL_PENDING

        logger.debug(
            "Go-live check {}/{} for {}: {} ({})",
            cycle_number,
            self.max_cycles,
            self.broadcast_id,
            result,
            response.status,
        )
        return PollCycle(
            cycle_number=cycle_number,
            broadcast_id=self.broadcast_id,
            result=result,
            status=response.status,
            message=response.message,
        )

    async def _confirm(self) -> None:
        """Watch the read-only status endpoint after an assumed go-live."""
        for _ in range(self.confirm_cycles):
            await self._sleep(self.interval)
            try:
                status = await self.client.get_status(self.broadcast_id)
            except LiveApiError as e:
                logger.debug("Status check for {} failed: {}", self.broadcast_id, e.message)
                continue

            if self._stopped:
                return

            if status.lifecycle_status == BroadcastLifecycle.LIVE:
                self._publish(
                    self.outcome.model_copy(  # type: ignore[union-attr]
                        update={
                            "platform_state": PlatformState.CONFIRMED,
                            "message": "Broadcast confirmed live",
                        }
                    )
                )
                logger.info("✅ Broadcast {} confirmed live in background", self.broadcast_id)
                return

    def _publish(self, outcome: GoLiveOutcome) -> None:
        if self._stopped:
            return
        self.outcome = outcome
        if self._on_update is not None:
            self._on_update(outcome)
