"""Shared test fixtures and utilities."""

import asyncio

import pytest

from playwait.event_manager import EventManager
from playwait.logger import init_root_logging
from playwait.media import MediaElement, ReadyState, TimeRanges
from playwait.waiter import Waiter


@pytest.fixture(scope="session")
def log_buffer():
    return init_root_logging()


@pytest.fixture
def logs(log_buffer):
    log_buffer.clear()
    yield log_buffer
    log_buffer.clear()


@pytest.fixture
def event_manager():
    manager = EventManager()
    yield manager
    manager.release()


@pytest.fixture
def waiter(event_manager):
    return Waiter(event_manager)


@pytest.fixture
def media():
    """A playing 10 second element, parked at 2 seconds."""

    element = MediaElement(
        current_time=2.0,
        duration=10.0,
        ready_state=ReadyState.HAVE_ENOUGH_DATA,
        buffered=TimeRanges([(0.0, 6.0)]),
    )
    element.play()
    return element


def later(delay: float, callback, *args) -> asyncio.TimerHandle:
    """Run `callback(*args)` on the running loop after `delay` seconds."""

    return asyncio.get_running_loop().call_later(delay, callback, *args)
