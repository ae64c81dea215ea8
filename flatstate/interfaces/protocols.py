# flatstate/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Protocol, runtime_checkable

from flatstate.interfaces.types import Work


@runtime_checkable
class Executor(Protocol):
    """
    Executor protocol for type checking.

    Methods:
        execute(work): Accept a zero-argument unit of work and arrange for its
            eventual execution.

    Runtime Invariants:
    - An automaton relies on its executor to run submitted units one at a
      time, in submission order. The automaton itself holds no locks.

    Error Handling:
    - Synchronous executors let failures propagate to the submitting caller.
    - Asynchronous executors must report failures through their own error
      channel, since there is no caller left to raise to.
    """

    def execute(self, work: Work) -> None:
        """Schedule the given unit of work."""
        ...
