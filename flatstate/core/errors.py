# flatstate/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, Optional


class AutomatonError(Exception):
    """
    Base exception class for errors within the automaton library.

    :param message: Human readable description.
    :param details: Optional dictionary with additional context.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}


class InvalidArgumentError(AutomatonError, ValueError):
    """
    Raised when an absent (None) or otherwise unusable argument is passed to a
    builder or to the automaton.
    """


class FieldAlreadySetError(AutomatonError, RuntimeError):
    """
    Raised when a single-assignment builder field is assigned a second time.
    """

    def __init__(self, field_name: str) -> None:
        super().__init__(f"{field_name} already set", {"field": field_name})
        self.field_name = field_name


class MissingFieldError(AutomatonError, ValueError):
    """
    Raised by build() when a required builder field was never assigned.
    """

    def __init__(self, field_name: str) -> None:
        super().__init__(f"{field_name} must be set before build()", {"field": field_name})
        self.field_name = field_name


class ValidationError(AutomatonError, ValueError):
    """
    Raised when a state referenced by a transition or used as initial state is
    not a member of the automaton's state set.
    """


class AlreadyEnabledError(AutomatonError, RuntimeError):
    """
    Raised when enable() is called on an automaton that is already enabled.
    """


class NotEnabledError(AutomatonError, RuntimeError):
    """
    Raised when an event is posted to an automaton that has not been enabled.
    """


class DispatchError(AutomatonError, RuntimeError):
    """
    Raised when dispatch of an event begins while the current state is
    undefined. This means scheduled work ran concurrently or out of order.
    """


class ExecutorError(AutomatonError, RuntimeError):
    """
    Base class for failures of the work-scheduling executors.
    """


class QueueFullError(ExecutorError):
    """
    Raised when a bounded work queue cannot accept another unit of work.
    """

    def __init__(self, message: str, max_size: int, current_size: int) -> None:
        super().__init__(message, {"max_size": max_size, "current_size": current_size})
        self.max_size = max_size
        self.current_size = current_size


class ExecutorShutdownError(ExecutorError):
    """
    Raised when work is submitted to an executor that has been shut down.
    """
