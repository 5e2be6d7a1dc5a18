"""Process-wide registry of go-live coordinators, keyed by broadcast id."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict

from loguru import logger

from app.schemas import TransitionState

from ._backoff import BackoffSchedule
from ._coordinator import Clock, Sleep, TransitionCoordinator
from .broadcast_models import LivePlatform, TransitionResult

DEFAULT_FINISHED_CAPACITY = 1024

# Results replayed to later callers once the coordinator is gone
_REMEMBERED_STATES = {TransitionState.LIVE, TransitionState.FAILED}


class CoordinatorRegistry:
    """Holds one TransitionCoordinator per active broadcast.

    Coordinators are created on first use. A coordinator that reaches LIVE or
    FAILED is dropped and only its final result is kept, in a bounded
    most-recently-used cache, so later calls get the same answer without
    touching the platform. Ending the session forgets both.

    The registry is per process: run the API with a single worker.
    """

    def __init__(
        self,
        schedule: BackoffSchedule | None = None,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        finished_capacity: int = DEFAULT_FINISHED_CAPACITY,
    ):
        if finished_capacity < 1:
            raise ValueError(f"finished_capacity must be >= 1, got {finished_capacity}")
        self._schedule = schedule
        self._clock = clock
        self._sleep = sleep
        self._coordinators: dict[str, TransitionCoordinator] = {}
        self._finished: OrderedDict[str, TransitionResult] = OrderedDict()
        self._finished_capacity = finished_capacity

    @property
    def schedule(self) -> BackoffSchedule:
        if self._schedule is None:
            self._schedule = BackoffSchedule.from_config()
        return self._schedule

    def get(self, broadcast_id: str) -> TransitionCoordinator | None:
        return self._coordinators.get(broadcast_id)

    def get_or_create(self, broadcast_id: str) -> TransitionCoordinator:
        coordinator = self._coordinators.get(broadcast_id)
        if coordinator is None:
            coordinator = TransitionCoordinator(
                broadcast_id, self.schedule, clock=self._clock, sleep=self._sleep
            )
            self._coordinators[broadcast_id] = coordinator
            logger.debug("Created go-live coordinator for broadcast {}", broadcast_id)
        return coordinator

    def finished(self, broadcast_id: str) -> TransitionResult | None:
        return self._finished.get(broadcast_id)

    async def request_go_live(
        self, platform: LivePlatform, broadcast_id: str, budget: float | None = None
    ) -> TransitionResult:
        """Run or resume the broadcast's go-live round, replaying a final result."""
        result = self._finished.get(broadcast_id)
        if result is not None:
            self._finished.move_to_end(broadcast_id)
            return result

        coordinator = self.get_or_create(broadcast_id)
        result = await coordinator.request_go_live(platform, budget)

        if (
            coordinator.state in _REMEMBERED_STATES
            and self._coordinators.get(broadcast_id) is coordinator
        ):
            del self._coordinators[broadcast_id]
            self._remember(broadcast_id, result)
            logger.debug(
                "Go-live coordinator for broadcast {} finished ({})",
                broadcast_id,
                coordinator.state,
            )
        return result

    def _remember(self, broadcast_id: str, result: TransitionResult) -> None:
        self._finished[broadcast_id] = result
        self._finished.move_to_end(broadcast_id)
        while len(self._finished) > self._finished_capacity:
            self._finished.popitem(last=False)

    def discard(self, broadcast_id: str) -> TransitionCoordinator | None:
        """Cancel and forget the coordinator for a broadcast, if any."""
        self._finished.pop(broadcast_id, None)
        coordinator = self._coordinators.pop(broadcast_id, None)
        if coordinator is not None:
            coordinator.cancel()
            logger.debug("Discarded go-live coordinator for broadcast {}", broadcast_id)
        return coordinator

    def cancel_all(self) -> None:
        for broadcast_id in list(self._coordinators):
            self.discard(broadcast_id)
        self._finished.clear()

    def __contains__(self, broadcast_id: str) -> bool:
        return broadcast_id in self._coordinators

    def __len__(self) -> int:
        return len(self._coordinators)
