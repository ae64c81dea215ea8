# flatstate/core/automaton.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import Any, FrozenSet, Iterable, List, Optional, Set, Tuple, Union

from flatstate.core.errors import (
    AlreadyEnabledError,
    DispatchError,
    FieldAlreadySetError,
    InvalidArgumentError,
    MissingFieldError,
    NotEnabledError,
)
from flatstate.core.states import State, StateBuilder
from flatstate.core.transitions import Transition, TransitionBuilder
from flatstate.core.validations import Validator
from flatstate.interfaces.protocols import Executor
from flatstate.interfaces.types import Work
from flatstate.runtime.executor import ImmediateExecutor, as_executor

logger = logging.getLogger(__name__)


class Automaton:
    """
    A finite state automaton with a frozen set of states, an ordered sequence
    of transitions and a single initial state.

    The automaton is driven by posting events. Each posted event is handed to
    the executor as one unit of work which, when run, takes at most one
    transition out of the current state.

    Runtime Invariants:
    - current_state is None before enable() and while a transition between
      two distinct states is in flight (between exit of the source and entry
      of the destination).
    - enabled changes from False to True exactly once.
    - States, transitions and the initial state never change after build.

    Concurrency:
    - No locks are held. The executor must run submitted units one at a time
      in submission order; SerialExecutor and ImmediateExecutor do.
    """

    def __init__(
        self,
        states: Iterable[State],
        transitions: Iterable[Transition[Any]],
        initial_state: State,
        executor: Optional[Executor] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        """
        Most callers should use AutomatonBuilder instead.

        :param states: States of the automaton.
        :param transitions: Transitions in the order they are considered.
        :param initial_state: State entered by enable().
        :param executor: Runs entry actions and event dispatch. Defaults to
            ImmediateExecutor.
        :param validator: Structure validator. Defaults to Validator().
        :raises ValidationError: If any transition or the initial state refers
            to a state outside the state set.
        """
        self._validator = validator or Validator()
        self._states: FrozenSet[State] = frozenset(states)
        self._transitions: Tuple[Transition[Any], ...] = tuple(_unique(transitions))
        self._validator.validate_automaton(initial_state, self._states, self._transitions)
        self._initial_state = initial_state
        self._executor: Executor = executor if executor is not None else ImmediateExecutor()
        self._current_state: Optional[State] = None
        self._enabled = False

    @property
    def initial_state(self) -> State:
        return self._initial_state

    @property
    def current_state(self) -> Optional[State]:
        """
        The state the automaton is in, or None if it is not enabled yet or a
        transition is currently being taken.
        """
        return self._current_state

    @property
    def states(self) -> FrozenSet[State]:
        return self._states

    @property
    def transitions(self) -> Tuple[Transition[Any], ...]:
        return self._transitions

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def executor(self) -> Executor:
        return self._executor

    def enable(self) -> None:
        """
        Put the automaton into its initial state and schedule the initial
        state's entry action on the executor.

        :raises AlreadyEnabledError: If the automaton was enabled before.
        :raises ValidationError: If the initial state is not one of the states.
        :raises ExecutorError: If the executor rejects the entry action
            (QueueFullError, ExecutorShutdownError). The automaton is already
            enabled and in its initial state at that point, the entry action is
            not run and enable() cannot be retried.
        """
        if self._enabled:
            raise AlreadyEnabledError("Automaton already enabled")
        self._validator.validate_state(self._initial_state, self._states, "Initial state")
        self._current_state = self._initial_state
        self._enabled = True
        logger.debug("Enabling automaton in %r", self._initial_state)
        self._executor.execute(self._initial_state.on_enter)

    def post(self, event: Any) -> None:
        """
        Schedule processing of an event. Returns without waiting for the event
        to be processed.

        :param event: Any value except None.
        :raises NotEnabledError: If enable() was not called yet.
        :raises InvalidArgumentError: If event is None.
        """
        if not self._enabled:
            raise NotEnabledError("Automaton must be enabled first")
        if event is None:
            raise InvalidArgumentError("Event must not be None")
        logger.debug("Scheduling dispatch of %r", event)
        self._executor.execute(self._dispatch_unit(event))

    def _dispatch_unit(self, event: Any) -> Work:
        def work() -> None:
            self._dispatch(event)

        return work

    def _dispatch(self, event: Any) -> None:
        current = self._current_state
        if current is None:
            raise DispatchError(
                "Current state is undefined, automaton cannot process events right now",
                {"event": event},
            )
        for transition in self._transitions:
            if transition.source is not current:
                continue
            if transition.accepts(event):
                self._take(transition, current, event)
                return
        logger.debug("No transition from %r accepts %r, discarding", current, event)

    def _take(self, transition: Transition[Any], current: State, event: Any) -> None:
        destination = transition.destination
        logger.debug("Taking %r from %r to %r", transition, current, destination)
        if destination is current:
            transition.execute_action(event)
            return
        current.on_exit()
        self._current_state = None
        transition.execute_action(event)
        self._validator.validate_state(destination, self._states, "Destination state")
        self._current_state = destination
        destination.on_enter()

    def __repr__(self) -> str:
        return (
            f"<Automaton states={len(self._states)} transitions={len(self._transitions)} "
            f"enabled={self._enabled} current={self._current_state!r}>"
        )


class AutomatonBuilder:
    """
    Collects states and transitions and freezes them into an Automaton.

    States must be added before the transitions that refer to them. Adding the
    same state or transition instance twice has no effect; transitions keep
    the order in which they were first added.
    """

    def __init__(self, validator: Optional[Validator] = None) -> None:
        self._validator = validator or Validator()
        self._states: Set[State] = set()
        self._transitions: List[Transition[Any]] = []
        self._initial_state: Optional[State] = None
        self._executor: Optional[Executor] = None

    def add_state(self, state: State) -> AutomatonBuilder:
        """
        Register a state.

        :raises InvalidArgumentError: If state is None.
        """
        if state is None:
            raise InvalidArgumentError("State must not be None")
        self._states.add(state)
        return self

    def add_states(self, *states: Union[State, Iterable[State]]) -> AutomatonBuilder:
        """
        Register several states, given either as arguments or as a single
        iterable (an Enum class whose members are states works too).
        """
        for state in _flatten(states, State):
            self.add_state(state)
        return self

    def new_state(self) -> StateBuilder:
        """Return a StateBuilder whose built state is registered here."""
        return StateBuilder(on_build=self.add_state)

    def add_transition(self, transition: Transition[Any]) -> AutomatonBuilder:
        """
        Register a transition. Its source and destination must already be
        registered.

        :raises InvalidArgumentError: If transition is None.
        :raises ValidationError: If source or destination is not registered.
        """
        self._validator.validate_transition(transition, self._states)
        if not any(t is transition for t in self._transitions):
            self._transitions.append(transition)
        return self

    def add_transitions(self, *transitions: Union[Transition[Any], Iterable[Transition[Any]]]) -> AutomatonBuilder:
        for transition in _flatten(transitions, Transition):
            self.add_transition(transition)
        return self

    def new_transition(self) -> TransitionBuilder[Any]:
        """Return a TransitionBuilder whose built transition is registered here."""
        return TransitionBuilder(on_build=self.add_transition)

    def initial_state(self, state: State) -> AutomatonBuilder:
        """
        Set the initial state. May only be called once, with a registered state.

        :raises FieldAlreadySetError: If the initial state was already set.
        :raises ValidationError: If state is not registered.
        """
        if self._initial_state is not None:
            raise FieldAlreadySetError("Initial state")
        self._validator.validate_state(state, self._states, "Initial state")
        self._initial_state = state
        return self

    def executor(self, executor: Any) -> AutomatonBuilder:
        """
        Set the executor used for entry actions and event dispatch. Accepts an
        Executor, a concurrent.futures.Executor or a callable taking a unit of
        work.

        :raises FieldAlreadySetError: If the executor was already set.
        """
        if self._executor is not None:
            raise FieldAlreadySetError("Executor")
        self._executor = as_executor(executor)
        return self

    def build(self) -> Automaton:
        """
        :raises MissingFieldError: If no initial state was set.
        """
        if self._initial_state is None:
            raise MissingFieldError("Initial state")
        return Automaton(
            self._states,
            self._transitions,
            self._initial_state,
            executor=self._executor,
            validator=self._validator,
        )


def _unique(transitions: Iterable[Transition[Any]]) -> List[Transition[Any]]:
    seen: Set[int] = set()
    result = []
    for transition in transitions:
        if id(transition) not in seen:
            seen.add(id(transition))
            result.append(transition)
    return result


def _flatten(items: Tuple[Any, ...], kind: type) -> Iterable[Any]:
    for item in items:
        if item is None or isinstance(item, kind):
            yield item
        else:
            yield from item
