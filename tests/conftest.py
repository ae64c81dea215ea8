# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading
from unittest.mock import MagicMock

import pytest

from flatstate.core.automaton import AutomatonBuilder
from flatstate.core.states import StateBuilder
from flatstate.core.transitions import TransitionBuilder


class RecordingExecutor:
    """
    Collects submitted work without running it, so tests can control when
    and in which order units run.
    """

    def __init__(self):
        self.work = []

    def execute(self, work):
        self.work.append(work)

    def run_next(self):
        self.work.pop(0)()

    def run_all(self):
        while self.work:
            self.run_next()


@pytest.fixture
def trace():
    """A list that actions append to, for checking call order."""
    return []


@pytest.fixture
def traced_state(trace):
    """Factory for states whose entry and exit actions append to trace."""

    def _factory(name):
        return (
            StateBuilder()
            .when_entered(lambda: trace.append(f"ENTER:{name}"))
            .when_exited(lambda: trace.append(f"EXIT:{name}"))
            .build()
        )

    return _factory


@pytest.fixture
def dummy_state():
    """A state with no entry/exit actions."""
    return StateBuilder().build()


@pytest.fixture
def another_state():
    return StateBuilder().build()


@pytest.fixture
def dummy_action():
    return MagicMock()


@pytest.fixture
def recording_executor():
    return RecordingExecutor()


@pytest.fixture
def light_switch():
    """
    OFF -> ON on "on", ON -> OFF on "off". Returns (automaton, off, on, entered).
    """
    entered = MagicMock()
    off = StateBuilder().when_entered(lambda: entered("OFF")).build()
    on = StateBuilder().when_entered(lambda: entered("ON")).build()
    automaton = (
        AutomatonBuilder()
        .add_states(off, on)
        .add_transition(TransitionBuilder().from_(off).to(on).on(str).check(lambda e: e == "on").build())
        .add_transition(TransitionBuilder().from_(on).to(off).on(str).check(lambda e: e == "off").build())
        .initial_state(off)
        .build()
    )
    return automaton, off, on, entered


@pytest.fixture(autouse=True)
def cleanup_threads():
    yield
    # Cleanup any remaining threads after each test
    for thread in threading.enumerate():
        if thread != threading.current_thread() and thread.is_alive() and not thread.daemon:
            thread.join(timeout=1.0)
