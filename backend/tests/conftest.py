import pytest

from builders import FakeClock
from formcoach.cv.events import EventCollector
from formcoach.cv.workout_session import WorkoutSession


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def collector() -> EventCollector:
    return EventCollector()


@pytest.fixture
def make_session(clock, collector):
    """Factory for sessions on the fake clock, reporting into collector."""
    def _make(mode, **kwargs) -> WorkoutSession:
        session = WorkoutSession(mode, clock=clock, **kwargs)
        session.add_listener(collector)
        return session
    return _make
