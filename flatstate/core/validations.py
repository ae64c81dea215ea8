# flatstate/core/validations.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import TYPE_CHECKING, AbstractSet, Any, Iterable

from flatstate.core.errors import InvalidArgumentError, ValidationError

if TYPE_CHECKING:
    from flatstate.core.states import State
    from flatstate.core.transitions import Transition


class Validator:
    """
    Performs construction-time and runtime validation of automaton structure,
    ensuring states and transitions reference each other consistently.
    """

    def validate_state(self, state: "State", states: AbstractSet["State"], role: str = "State") -> None:
        """
        Check that a state is present and registered.

        :param state: The state to check.
        :param states: The registered states.
        :param role: Name used in error messages ("Initial state", ...).
        :raises InvalidArgumentError: If state is None.
        :raises ValidationError: If state is not registered.
        """
        if state is None:
            raise InvalidArgumentError(f"{role} must not be None")
        if state not in states:
            raise ValidationError(f"{role} must be in automaton states", {"state": state})

    def validate_transition(self, transition: "Transition", states: AbstractSet["State"]) -> None:
        """
        Check that both ends of a transition are registered states.

        :raises ValidationError: If source or destination is not registered.
        """
        if transition is None:
            raise InvalidArgumentError("Transition must not be None")
        self.validate_state(transition.source, states, "Source state")
        self.validate_state(transition.destination, states, "Destination state")

    def validate_automaton(
        self, initial_state: "State", states: AbstractSet["State"], transitions: Iterable["Transition"]
    ) -> None:
        """
        Check a complete state/transition graph before it is frozen.

        :raises ValidationError: If any reference points outside the state set.
        """
        self.validate_state(initial_state, states, "Initial state")
        for transition in transitions:
            self.validate_transition(transition, states)


def require_callable(value: Any, name: str) -> Any:
    """
    Return value if it is callable.

    :raises InvalidArgumentError: If value is None or not callable.
    """
    if value is None:
        raise InvalidArgumentError(f"{name} must not be None")
    if not callable(value):
        raise InvalidArgumentError(f"{name} must be callable")
    return value
