# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import threading

import pytest

from flatstate.core.automaton import AutomatonBuilder
from flatstate.core.errors import DispatchError
from flatstate.core.states import StateBuilder
from flatstate.core.transitions import TransitionBuilder
from flatstate.runtime.executor import ImmediateExecutor, SerialExecutor


class ReentrantExecutor:
    """
    Runs work immediately, including work submitted while other work is still
    running. This breaks the serialization an automaton relies on.
    """

    def execute(self, work):
        work()


def test_non_serializing_executor_surfaces_dispatch_error():
    holder = {}
    a, b = StateBuilder().build(), StateBuilder().build()
    # Posting from inside the transition action starts a second dispatch while
    # the current state is undefined.
    t = TransitionBuilder().from_(a).to(b).on(str).execute(lambda e: holder["automaton"].post(1)).build()
    holder["automaton"] = automaton = (
        AutomatonBuilder().add_states(a, b).add_transition(t).initial_state(a).executor(ReentrantExecutor()).build()
    )
    automaton.enable()
    with pytest.raises(DispatchError):
        automaton.post("go")


def test_serial_executor_defers_nested_post():
    holder = {}
    errors = []
    a, b = StateBuilder().build(), StateBuilder().build()
    t1 = TransitionBuilder().from_(a).to(b).on(str).execute(lambda e: holder["automaton"].post(1)).build()
    t2 = TransitionBuilder().from_(b).to(a).on(int).build()
    with SerialExecutor(error_handler=errors.append) as executor:
        holder["automaton"] = automaton = (
            AutomatonBuilder().add_states(a, b).add_transitions(t1, t2).initial_state(a).executor(executor).build()
        )
        automaton.enable()
        automaton.post("go")
        # The nested post is queued behind the running unit.
        assert executor.join(timeout=5.0)
    assert errors == []
    assert automaton.current_state is a


def test_dispatch_error_reported_through_error_handler():
    holder = {}
    errors = []
    a, b = StateBuilder().build(), StateBuilder().build()
    t = TransitionBuilder().from_(a).to(b).build()
    with SerialExecutor(error_handler=errors.append) as executor:
        holder["automaton"] = automaton = (
            AutomatonBuilder().add_states(a, b).add_transition(t).initial_state(a).executor(executor).build()
        )
        automaton.enable()
        assert executor.join(timeout=5.0)
        automaton._current_state = None
        automaton.post("go")
        assert executor.join(timeout=5.0)
    assert len(errors) == 1
    assert isinstance(errors[0], DispatchError)


@pytest.mark.stress
def test_concurrent_posters_with_serial_executor():
    counter = []
    s = StateBuilder().build()
    t = TransitionBuilder().from_(s).to(s).on(int).execute(counter.append).build()
    errors = []
    with SerialExecutor(error_handler=errors.append) as executor:
        automaton = AutomatonBuilder().add_state(s).add_transition(t).initial_state(s).executor(executor).build()
        automaton.enable()

        def poster(offset):
            for i in range(100):
                automaton.post(offset + i)

        threads = [threading.Thread(target=poster, args=(n * 1000,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)
        assert executor.join(timeout=10.0)
    assert errors == []
    assert len(counter) == 800
    # Each poster's events keep their relative order.
    for n in range(8):
        own = [v for v in counter if n * 1000 <= v < n * 1000 + 100]
        assert own == sorted(own)


@pytest.mark.stress
def test_ping_pong_under_concurrent_posting():
    a, b = StateBuilder().build(), StateBuilder().build()
    flips = []
    errors = []
    ab = TransitionBuilder().from_(a).to(b).execute(lambda e: flips.append("ab")).build()
    ba = TransitionBuilder().from_(b).to(a).execute(lambda e: flips.append("ba")).build()
    with SerialExecutor(error_handler=errors.append) as executor:
        automaton = AutomatonBuilder().add_states(a, b).add_transitions(ab, ba).initial_state(a).executor(executor).build()
        automaton.enable()
        threads = [
            threading.Thread(target=lambda: [automaton.post("flip") for _ in range(50)]) for _ in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)
        assert executor.join(timeout=10.0)
    assert errors == []
    assert len(flips) == 200
    assert flips == ["ab", "ba"] * 100
    assert automaton.current_state is a


def test_immediate_executor_is_synchronous():
    s = StateBuilder().build()
    seen = []
    t = TransitionBuilder().from_(s).to(s).execute(seen.append).build()
    automaton = AutomatonBuilder().add_state(s).add_transition(t).initial_state(s).executor(ImmediateExecutor()).build()
    automaton.enable()
    automaton.post("now")
    assert seen == ["now"]
