import random

import pytest

from engine import PollingScheduler, Stepper


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return PollingScheduler(clock=clock)


@pytest.fixture
def stepper(scheduler):
    return Stepper(scheduler, base_interval=1.0)


@pytest.fixture
def app(clock):
    from main import create_app

    return create_app({"TESTING": True, "CLOCK": clock})


@pytest.fixture
def client(app):
    return app.test_client()
