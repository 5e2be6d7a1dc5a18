"""Backoff schedule for go-live transition attempts."""

from collections.abc import Sequence

# First retry must come quickly enough for a responsive "going live" screen
MAX_FIRST_DELAY_SECONDS = 10.0
# Last wait must cover a normal RTMP handshake + first keyframe
MIN_FINAL_DELAY_SECONDS = 30.0

DEFAULT_DELAYS = (5.0, 20.0, 60.0)
DEFAULT_MAX_ATTEMPTS = 3


class BackoffSchedule:
    """Monotonic per-attempt delays: `delay(n)` is the wait after attempt n fails."""

    def __init__(
        self,
        delays: Sequence[float] = DEFAULT_DELAYS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        if not delays:
            raise ValueError("backoff schedule needs at least one delay")

        values = [float(d) for d in delays]
        if any(d <= 0 for d in values):
            raise ValueError(f"backoff delays must be positive: {values}")
        if any(later < earlier for earlier, later in zip(values, values[1:])):
            raise ValueError(f"backoff delays must be non-decreasing: {values}")

        # Pad with the last delay so every attempt has a delay
        if len(values) < max_attempts:
            values.extend([values[-1]] * (max_attempts - len(values)))
        values = values[:max_attempts]

        if values[0] > MAX_FIRST_DELAY_SECONDS:
            raise ValueError(
                f"first backoff delay {values[0]}s exceeds {MAX_FIRST_DELAY_SECONDS}s"
            )
        if values[-1] < MIN_FINAL_DELAY_SECONDS:
            raise ValueError(
                f"final backoff delay {values[-1]}s is below {MIN_FINAL_DELAY_SECONDS}s"
            )

        self.max_attempts = max_attempts
        self.delays: tuple[float, ...] = tuple(values)

    def delay(self, attempt_number: int) -> float:
        if attempt_number < 1:
            raise ValueError(f"attempt_number is 1-based, got {attempt_number}")
        return self.delays[min(attempt_number, self.max_attempts) - 1]

    @property
    def total_seconds(self) -> float:
        return sum(self.delays)

    @classmethod
    def from_config(cls) -> "BackoffSchedule":
        from app.app_config import get_app_environ_config

        cfg = get_app_environ_config()
        return cls(cfg.GO_LIVE_BACKOFF_SECONDS, cfg.GO_LIVE_MAX_ATTEMPTS)

    def __repr__(self) -> str:
        return f"BackoffSchedule(delays={list(self.delays)}, max_attempts={self.max_attempts})"
