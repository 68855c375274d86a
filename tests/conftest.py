import pytest


class FakeClock:
    """Deterministic time source: each call advances by ``step`` seconds."""

    def __init__(self, start: float = 1000.0, step: float = 1.0) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def clock():
    return FakeClock()
