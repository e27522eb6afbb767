# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from unittest.mock import MagicMock

import pytest

from fsmhooks.core.observer import Observer
from fsmhooks.core.state_machine import StateMachine
from fsmhooks.core.transitions import Transition


@pytest.fixture
def mock_machine():
    """A machine stand-in with states green/yellow/red and events slow/stop."""
    m = MagicMock()
    m.state_names = {"green", "yellow", "red"}
    m.event_names = {"slow", "stop"}
    return m


@pytest.fixture
def observer(mock_machine):
    """An Observer attached to the mock machine."""
    return Observer(mock_machine)


@pytest.fixture
def traffic_light():
    """A real machine: green -slow-> yellow -stop-> red -go-> green."""
    return StateMachine(
        initial="green",
        events=[
            Transition("slow", "green", "yellow"),
            Transition("stop", "yellow", "red"),
            Transition("go", "red", "green"),
        ],
    )


@pytest.fixture
def recorder():
    """Returns a factory for callbacks that append (tag, event, data) to a shared list."""
    calls = []

    def _make(tag):
        def _callback(event, *data):
            calls.append((tag, event, data))

        return _callback

    _make.calls = calls
    return _make


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive():
            thread.join(timeout=1.0)
