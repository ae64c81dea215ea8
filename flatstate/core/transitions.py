# flatstate/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Optional, TypeVar, cast

from flatstate.core.errors import FieldAlreadySetError, InvalidArgumentError, MissingFieldError
from flatstate.core.states import State
from flatstate.core.validations import require_callable
from flatstate.interfaces.types import Action, EventType, Guard

T = TypeVar("T")
X = TypeVar("X")


class Transition(ABC, Generic[T]):
    """
    Defines a possible path from one state to another. A transition may only
    be taken when the automaton is in its source state, the event is an
    instance of its event type and its guard (if any) accepts the event.

    Transitions are compared by identity.
    """

    @property
    @abstractmethod
    def source(self) -> State:
        """The state the automaton must be in for this transition to be taken."""

    @property
    @abstractmethod
    def destination(self) -> State:
        """The state the automaton will be in after this transition."""

    @property
    def event_type(self) -> EventType:
        """Events that are instances of this type may trigger the transition."""
        return object

    @property
    def guard(self) -> Optional[Guard[T]]:
        """Optional predicate the event must satisfy."""
        return None

    @property
    def action(self) -> Optional[Action[T]]:
        """
        Optional action run when the transition is taken. For transitions
        between distinct states it runs after the source is left and before
        the destination is entered, so the current state is undefined while
        it executes.
        """
        return None

    def accepts(self, event: Any) -> bool:
        """
        Check event type and guard against the given event.

        :param event: The posted event.
        :return: True if the event is of the right type and the guard passes.
        """
        if not isinstance(event, self.event_type):
            return False
        guard = self.guard
        return guard is None or bool(guard(event))

    def execute_action(self, event: T) -> None:
        """Run the transition action with the triggering event, if any."""
        action = self.action
        if action is not None:
            action(event)


class ImmutableTransition(Transition[T]):
    """
    Transition whose fields are fixed at construction. Instances are created
    through TransitionBuilder.
    """

    def __init__(
        self,
        source: State,
        destination: State,
        event_type: EventType = object,
        guard: Optional[Guard[T]] = None,
        action: Optional[Action[T]] = None,
    ) -> None:
        self._source = source
        self._destination = destination
        self._event_type = event_type
        self._guard = guard
        self._action = action

    @property
    def source(self) -> State:
        return self._source

    @property
    def destination(self) -> State:
        return self._destination

    @property
    def event_type(self) -> EventType:
        return self._event_type

    @property
    def guard(self) -> Optional[Guard[T]]:
        return self._guard

    @property
    def action(self) -> Optional[Action[T]]:
        return self._action

    def __repr__(self) -> str:
        type_name = getattr(self._event_type, "__name__", repr(self._event_type))
        return f"<ImmutableTransition on {type_name} at {id(self):#x}>"


class TransitionBuilder(Generic[T]):
    """
    Accumulates the fields of a transition. Every field may be assigned at
    most once. Source and destination are required; the event type defaults
    to object, matching every event.
    """

    def __init__(self, on_build: Optional[Callable[[ImmutableTransition], None]] = None) -> None:
        """
        :param on_build: Internal hook invoked with every transition this
            builder produces. AutomatonBuilder uses it to register the transition.
        """
        self._source: Optional[State] = None
        self._destination: Optional[State] = None
        self._event_type: Optional[EventType] = None
        self._guard: Optional[Guard[T]] = None
        self._action: Optional[Action[T]] = None
        self._on_build = on_build

    def from_(self, state: State) -> TransitionBuilder[T]:
        """
        Set the source state. May only be called once.

        :raises FieldAlreadySetError: If the source state was already set.
        :raises InvalidArgumentError: If state is None.
        """
        if self._source is not None:
            raise FieldAlreadySetError("Source state")
        if state is None:
            raise InvalidArgumentError("Source state must not be None")
        self._source = state
        return self

    def to(self, state: State) -> TransitionBuilder[T]:
        """
        Set the destination state. May only be called once.

        :raises FieldAlreadySetError: If the destination state was already set.
        :raises InvalidArgumentError: If state is None.
        """
        if self._destination is not None:
            raise FieldAlreadySetError("Destination state")
        if state is None:
            raise InvalidArgumentError("Destination state must not be None")
        self._destination = state
        return self

    def on(self, event_type: EventType) -> TransitionBuilder[X]:
        """
        Restrict the transition to events that are instances of event_type.
        May only be called once.

        :param event_type: A class, or a tuple of classes, accepted by isinstance.
        :raises FieldAlreadySetError: If the event type was already set.
        :raises InvalidArgumentError: If event_type is None or not a type.
        """
        if self._event_type is not None:
            raise FieldAlreadySetError("Event type")
        if event_type is None:
            raise InvalidArgumentError("Event type must not be None")
        if not _is_type_filter(event_type):
            raise InvalidArgumentError("Event type must be a class or a tuple of classes")
        self._event_type = event_type
        return cast("TransitionBuilder[X]", self)

    def check(self, guard: Guard[T]) -> TransitionBuilder[T]:
        """
        Set the guard. May only be called once.

        :param guard: Predicate over the event.
        :raises FieldAlreadySetError: If a guard was already set.
        """
        if self._guard is not None:
            raise FieldAlreadySetError("Guard")
        self._guard = require_callable(guard, "Guard")
        return self

    def execute(self, action: Action[T]) -> TransitionBuilder[T]:
        """
        Set the action. May only be called once.

        :param action: Callable receiving the triggering event.
        :raises FieldAlreadySetError: If an action was already set.
        """
        if self._action is not None:
            raise FieldAlreadySetError("Action")
        self._action = require_callable(action, "Action")
        return self

    def build(self) -> ImmutableTransition[T]:
        """
        Freeze the collected fields into a new transition.

        :raises MissingFieldError: If source or destination state is unset.
        """
        if self._source is None:
            raise MissingFieldError("Source state")
        if self._destination is None:
            raise MissingFieldError("Destination state")
        event_type = self._event_type if self._event_type is not None else object
        transition: ImmutableTransition[T] = ImmutableTransition(
            self._source, self._destination, event_type, self._guard, self._action
        )
        if self._on_build is not None:
            self._on_build(transition)
        return transition


class Guards:
    """
    Provides constant guards.
    """

    @staticmethod
    def always(result: bool) -> Guard[Any]:
        """Return a guard that answers result for every event."""
        return lambda event: result

    @staticmethod
    def pass_() -> Guard[Any]:
        """Return a guard that always passes."""
        return Guards.always(True)

    @staticmethod
    def fail() -> Guard[Any]:
        """Return a guard that always fails."""
        return Guards.always(False)


def _is_type_filter(value: Any) -> bool:
    if isinstance(value, type):
        return True
    return isinstance(value, tuple) and len(value) > 0 and all(isinstance(v, type) for v in value)
