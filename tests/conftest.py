import sys
import warnings
from pathlib import Path

import pytest

# Ignore warnings from app.shared
warnings.filterwarnings("ignore", category=DeprecationWarning, module="app.shared.*")

# Ensure the project root is on sys.path so `app` and `tests` packages resolve
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

from app.domain.live.broadcast._backoff import BackoffSchedule  # noqa: E402
from tests.fakes import FakeClock, FakeLivePlatform  # noqa: E402


@pytest.fixture
def platform() -> FakeLivePlatform:
    """In-memory platform with one ready broadcast `bc_1` bound to inactive stream `st_1`."""
    fake = FakeLivePlatform()
    fake.add_broadcast()
    return fake


@pytest.fixture
def clock() -> FakeClock:
    """Clock whose sleeps return immediately and advance time."""
    return FakeClock()


@pytest.fixture
def blocking_clock() -> FakeClock:
    """Clock whose sleeps block until the test advances time."""
    return FakeClock(auto_advance=False)


@pytest.fixture
def schedule() -> BackoffSchedule:
    return BackoffSchedule((5, 20, 60), max_attempts=3)
