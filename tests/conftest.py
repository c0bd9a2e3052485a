"""Pytest configuration and shared fixtures."""

import pytest

from rendezvous.store import PairingStore


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_logging_state():
    """Reset logging state before each test."""
    from rendezvous.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Create a store with default bounds on the fake clock."""
    return PairingStore(clock=clock)
