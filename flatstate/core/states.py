# flatstate/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Callable, Optional

from flatstate.core.errors import FieldAlreadySetError
from flatstate.core.validations import require_callable
from flatstate.interfaces.types import StateAction


class State:
    """
    A node of an automaton. A state carries at most one entry action and at
    most one exit action; both default to None.

    States are compared by identity. Subclasses must not override __eq__ or
    __hash__ with value semantics, otherwise two distinct states could be
    confused by the automaton. Enumerations may mix in this class so that
    their members act as states:

        class Light(State, Enum):
            OFF = "off"
            ON = "on"
    """

    @property
    def entry_action(self) -> Optional[StateAction]:
        """Action executed when an automaton enters this state."""
        return None

    @property
    def exit_action(self) -> Optional[StateAction]:
        """Action executed when an automaton leaves this state."""
        return None

    def on_enter(self) -> None:
        """Execute the entry action, if any."""
        action = self.entry_action
        if action is not None:
            action()

    def on_exit(self) -> None:
        """Execute the exit action, if any."""
        action = self.exit_action
        if action is not None:
            action()


class ImmutableState(State):
    """
    State whose actions are fixed at construction. Instances are created
    through StateBuilder.
    """

    def __init__(self, entry_action: Optional[StateAction] = None, exit_action: Optional[StateAction] = None) -> None:
        self._entry_action = entry_action
        self._exit_action = exit_action

    @property
    def entry_action(self) -> Optional[StateAction]:
        return self._entry_action

    @property
    def exit_action(self) -> Optional[StateAction]:
        return self._exit_action

    def __repr__(self) -> str:
        return f"<ImmutableState at {id(self):#x}>"


class StateBuilder:
    """
    Accumulates the optional entry and exit actions of a state, each of which
    may be set at most once, and builds an ImmutableState from them.
    """

    def __init__(self, on_build: Optional[Callable[[ImmutableState], None]] = None) -> None:
        """
        :param on_build: Internal hook invoked with every state this builder
            produces. AutomatonBuilder uses it to register the state.
        """
        self._entry_action: Optional[StateAction] = None
        self._exit_action: Optional[StateAction] = None
        self._on_build = on_build

    def when_entered(self, action: StateAction) -> StateBuilder:
        """
        Set the entry action. May only be called once.

        :param action: Zero-argument callable run upon entry.
        :raises FieldAlreadySetError: If an entry action was already set.
        """
        if self._entry_action is not None:
            raise FieldAlreadySetError("Entry action")
        self._entry_action = require_callable(action, "Entry action")
        return self

    def when_exited(self, action: StateAction) -> StateBuilder:
        """
        Set the exit action. May only be called once.

        :param action: Zero-argument callable run upon exit.
        :raises FieldAlreadySetError: If an exit action was already set.
        """
        if self._exit_action is not None:
            raise FieldAlreadySetError("Exit action")
        self._exit_action = require_callable(action, "Exit action")
        return self

    def build(self) -> ImmutableState:
        """Freeze the collected actions into a new state."""
        state = ImmutableState(self._entry_action, self._exit_action)
        if self._on_build is not None:
            self._on_build(state)
        return state
