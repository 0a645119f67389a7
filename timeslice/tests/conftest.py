"""Shared test fixtures."""

import threading
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from timeslice.config.schema import EngineConfig
from timeslice.schedule.events import RecordingEventSink
from timeslice.venue.dry_run import DryRunVenue


class VirtualWaiter:
    """Records requested waits instead of sleeping.

    With ``stop_after=n`` it sets the stop event during the n-th wait,
    which simulates a cancellation arriving mid-sleep.
    """

    def __init__(self, stop_after: int | None = None):
        self.waits: list[float] = []
        self.stop_after = stop_after

    @property
    def elapsed(self) -> float:
        return sum(self.waits)

    def wait(self, seconds: float, stop_event: threading.Event) -> bool:
        self.waits.append(seconds)
        if self.stop_after is not None and len(self.waits) >= self.stop_after:
            stop_event.set()
        return stop_event.is_set()


@pytest.fixture
def waiter() -> VirtualWaiter:
    return VirtualWaiter()


@pytest.fixture
def cancelling_waiter() -> VirtualWaiter:
    """Waiter that requests a stop during the second wait."""
    return VirtualWaiter(stop_after=2)


@pytest.fixture
def sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def venue() -> DryRunVenue:
    return DryRunVenue(
        price=Decimal("50000"),
        balances={"USDT": Decimal("1000"), "BTC": Decimal("0.01")},
    )


@pytest.fixture
def default_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "venue": {"quote_asset": "USDT", "timeout_seconds": 5},
        "schedule": {"quantum": "1"},
        "execution": {"mode": "dry-run"},
        "dry_run": {"price": "100", "balances": {"USDT": "250", "ETH": "2"}},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
