"""
Shared fixtures for tracker-core tests
"""

import pytest

from tracker_core import (
    ContextInvocationStack,
    create_invocation_tracker,
    hold_promises,
    track_promises,
    vault_promises,
)
from tracker_core.utils.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; every test starts from the environment"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def stack():
    stack = ContextInvocationStack()
    yield stack
    stack.close()


@pytest.fixture
def tracker(stack):
    tracker = create_invocation_tracker(stack=stack)
    yield tracker
    tracker.close()


@pytest.fixture
def events(tracker):
    """Every invocation emitted by `tracker`, in order"""
    received = []
    tracker.on_invoked(received.append)
    return received


@pytest.fixture
def promises():
    return track_promises()


@pytest.fixture
def holder():
    return hold_promises()


@pytest.fixture
def vault():
    return vault_promises(forget_on_rejection=False)
