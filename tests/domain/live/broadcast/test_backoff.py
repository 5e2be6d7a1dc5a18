"""Tests for BackoffSchedule."""

import pytest

from app.domain.live.broadcast._backoff import BackoffSchedule


class TestBackoffSchedule:
    def test_default_schedule(self):
        """Should default to 5s, 20s, 60s over three attempts."""
        schedule = BackoffSchedule()

        assert schedule.delays == (5.0, 20.0, 60.0)
        assert schedule.max_attempts == 3
        assert [schedule.delay(n) for n in (1, 2, 3)] == [5.0, 20.0, 60.0]
        assert schedule.total_seconds == 85.0

    def test_short_schedule_is_padded_with_last_delay(self):
        """Should repeat the last delay when fewer delays than attempts are given."""
        schedule = BackoffSchedule((5, 30), max_attempts=4)

        assert schedule.delays == (5.0, 30.0, 30.0, 30.0)

    def test_long_schedule_is_truncated(self):
        """Should keep only max_attempts delays."""
        schedule = BackoffSchedule((5, 20, 60, 120), max_attempts=3)

        assert schedule.delays == (5.0, 20.0, 60.0)

    def test_delay_beyond_max_attempts_uses_last(self):
        """Should clamp attempt numbers above max_attempts."""
        assert BackoffSchedule().delay(7) == 60.0

    @pytest.mark.parametrize(
        "delays",
        [
            (0, 20, 60),
            (5, -1, 60),
            (20, 5, 60),
            (15, 20, 60),
            (5, 10, 20),
        ],
    )
    def test_invalid_schedules_rejected(self, delays):
        """Should reject non-positive, decreasing, slow-start or short-tail schedules."""
        with pytest.raises(ValueError):
            BackoffSchedule(delays, max_attempts=3)

    def test_zero_attempts_rejected(self):
        """Should require at least one attempt."""
        with pytest.raises(ValueError):
            BackoffSchedule((5, 60), max_attempts=0)

    def test_attempt_number_is_one_based(self):
        """Should reject attempt number 0."""
        with pytest.raises(ValueError):
            BackoffSchedule().delay(0)
