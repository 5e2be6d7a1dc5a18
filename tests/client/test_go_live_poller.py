"""Tests for GoLivePoller against a scripted /live API."""

import asyncio

import httpx
import orjson
import pytest

from app.client.go_live_poller import GoLiveOutcome, GoLivePoller
from app.client.live_api_client import LiveApiClient
from app.schemas import PlatformState, PollResult, UiState
from tests.fakes import FakeClock, settle


def check_body(success: bool, can_retry: bool, status: str = "ready") -> dict:
    return {
        "success": success,
        "status": "live" if success else status,
        "message": "ok" if success else "Waiting for video",
        "canRetry": can_retry,
        "outcome": "live" if success else "pending",
        "attempts": 1,
        "broadcastId": "bc_1",
    }


class ScriptedApi:
    """Answers check-and-go-live from a script; the last entry repeats."""

    def __init__(self, script: list):
        self.script = script
        self.requests: list[httpx.Request] = []
        self.status_lifecycles: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.startswith("/live/status/"):
            lifecycle = self.status_lifecycles.pop(0) if self.status_lifecycles else "ready"
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "broadcastId": "bc_1",
                    "lifecycleStatus": lifecycle,
                    "ingestActive": lifecycle == "live",
                    "canTransitionToLive": False,
                    "message": "status",
                },
            )

        entry = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, int):
            return httpx.Response(entry, json={"success": False, "errcode": "E_X", "errmesg": "no"})
        return httpx.Response(200, json=entry)

    @property
    def checks(self) -> int:
        return sum(1 for r in self.requests if r.url.path == "/live/check-and-go-live")


def make_poller(api: ScriptedApi, clock: FakeClock, **kwargs) -> GoLivePoller:
    client = LiveApiClient(
        "http://api.test", "session-token", timeout=10, transport=httpx.MockTransport(api)
    )
    kwargs.setdefault("interval", 5)
    kwargs.setdefault("max_cycles", 10)
    return GoLivePoller(client, "bc_1", sleep=clock.sleep, **kwargs)


class TestGoLivePoller:
    async def test_confirmed_on_first_cycle(self, clock):
        """Should poll immediately and stop on the first success."""
        api = ScriptedApi([check_body(True, False)])
        poller = make_poller(api, clock)

        outcome = await poller.wait()

        assert outcome.ui_state == UiState.LIVE
        assert outcome.platform_state == PlatformState.CONFIRMED
        assert outcome.cycles == 1
        assert clock.sleeps == []
        assert api.checks == 1

    async def test_confirmed_after_pending_cycles(self, clock):
        """Should keep polling every interval while the server says retry."""
        api = ScriptedApi(
            [check_body(False, True), check_body(False, True), check_body(True, False)]
        )
        poller = make_poller(api, clock)

        outcome = await poller.wait()

        assert outcome.platform_state == PlatformState.CONFIRMED
        assert outcome.cycles == 3
        assert clock.sleeps == [5, 5]
        assert [c.result for c in poller.cycles] == [
            PollResult.STILL_PENDING,
            PollResult.STILL_PENDING,
            PollResult.CONFIRMED_LIVE,
        ]

    async def test_cycle_cap_declares_live(self, clock):
        """Should stop after max_cycles and declare live with an assumed platform state."""
        api = ScriptedApi([check_body(False, True)])
        poller = make_poller(api, clock)

        outcome = await poller.wait()

        assert api.checks == 10
        assert outcome.ui_state == UiState.LIVE
        assert outcome.platform_state == PlatformState.ASSUMED
        assert outcome.cycles == 10
        assert len(clock.sleeps) == 9

    async def test_cannot_retry_declares_live_with_failed_platform(self, clock):
        """Should flip the UI to live but record the platform refusal."""
        api = ScriptedApi([check_body(False, False, status="complete")])
        poller = make_poller(api, clock)

        outcome = await poller.wait()

        assert outcome.ui_state == UiState.LIVE
        assert outcome.platform_state == PlatformState.FAILED
        assert poller.cycles[0].result == PollResult.GIVE_UP_DECLARE_LIVE
        assert api.checks == 1

    async def test_hard_errors_consume_cycles(self, clock):
        """Should count transport errors and 5xx answers as cycles and keep polling."""
        api = ScriptedApi(
            [
                httpx.ConnectError("refused"),
                500,
                check_body(True, False),
            ]
        )
        poller = make_poller(api, clock)

        outcome = await poller.wait()

        assert [c.result for c in poller.cycles] == [
            PollResult.HARD_ERROR,
            PollResult.HARD_ERROR,
            PollResult.CONFIRMED_LIVE,
        ]
        assert outcome.platform_state == PlatformState.CONFIRMED

    async def test_sends_budget_below_request_timeout(self, clock):
        """Should send a budget that fits inside the client timeout."""
        api = ScriptedApi([check_body(True, False)])
        poller = make_poller(api, clock)

        await poller.wait()

        body = orjson.loads(api.requests[0].content)
        assert body["broadcastId"] == "bc_1"
        assert 0 < body["budgetSeconds"] < 10

    async def test_stop_prevents_further_cycles(self, blocking_clock):
        """Should fire no cycle after stop, even when time moves on."""
        api = ScriptedApi([check_body(False, True)])
        poller = make_poller(api, blocking_clock)

        poller.start()
        await settle()
        assert api.checks == 1

        outcome = poller.stop()
        await blocking_clock.advance(60)

        assert outcome.ui_state == UiState.STOPPED
        assert api.checks == 1
        assert (await poller.wait()).ui_state == UiState.STOPPED

    async def test_stop_before_start_never_polls(self, clock):
        """Should not poll or publish when stopped before the task was spawned."""
        updates: list[GoLiveOutcome] = []
        api = ScriptedApi([check_body(True, False)])
        poller = make_poller(api, clock, on_update=updates.append)

        poller.stop()
        outcome = await poller.wait()
        started = await poller.start()

        assert api.checks == 0
        assert outcome.ui_state == UiState.STOPPED
        assert started.ui_state == UiState.STOPPED
        assert poller.outcome.ui_state == UiState.STOPPED
        assert updates == []

    async def test_run_after_stop_returns_stopped(self, clock):
        """Should return the stopped outcome from run() without any request."""
        api = ScriptedApi([check_body(True, False)])
        poller = make_poller(api, clock)

        poller.stop()
        outcome = await poller.run()

        assert outcome.ui_state == UiState.STOPPED
        assert api.checks == 0

    async def test_on_update_reports_progress(self, clock):
        """Should report preparing first and the final outcome last."""
        updates: list[GoLiveOutcome] = []
        api = ScriptedApi([check_body(False, True), check_body(True, False)])
        poller = make_poller(api, clock, on_update=updates.append)

        await poller.wait()

        assert updates[0].ui_state == UiState.PREPARING
        assert updates[-1].ui_state == UiState.LIVE
        assert updates[-1].platform_state == PlatformState.CONFIRMED

    async def test_background_confirmation_upgrades_assumed(self, clock):
        """Should upgrade an assumed go-live once the status endpoint shows live."""
        api = ScriptedApi([check_body(False, True)])
        api.status_lifecycles = ["ready", "live"]
        poller = make_poller(api, clock, max_cycles=2, confirm_cycles=5)

        outcome = await poller.wait()

        assert outcome.platform_state == PlatformState.CONFIRMED
        assert api.checks == 2
        status_reads = [r for r in api.requests if r.url.path.startswith("/live/status/")]
        assert len(status_reads) == 2

    def test_rejects_zero_cycles(self, clock):
        """Should require at least one cycle."""
        client = LiveApiClient("http://api.test", "t", timeout=10)
        with pytest.raises(ValueError):
            GoLivePoller(client, "bc_1", max_cycles=0)


async def test_stop_while_request_in_flight_discards_answer():
    """Should discard a check-and-go-live answer that arrives after stop."""
    gate = asyncio.Event()

    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await gate.wait()
        return httpx.Response(200, json=check_body(True, False))

    client = LiveApiClient(
        "http://api.test", "t", timeout=10, transport=httpx.MockTransport(slow_handler)
    )
    poller = GoLivePoller(client, "bc_1", interval=5, max_cycles=10)

    poller.start()
    await settle()
    poller.stop()
    gate.set()
    outcome = await poller.wait()

    assert outcome.ui_state == UiState.STOPPED
    assert poller.cycles == []
