from __future__ import annotations

import queue

import pytest

from diffusionsim.controller.ticker import TickGovernor
from diffusionsim.controller.workers import ManagerWorker, ModelManager

from factories import FakeClock


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def worker() -> ManagerWorker:
    """A worker driven by hand through tick(), without starting its thread."""
    return ManagerWorker(commands=queue.Queue(), governor=TickGovernor(min_tick_duration=0.0))


@pytest.fixture
def manager():
    manager = ModelManager(min_tick_time=0.001)
    yield manager
    manager.close()
