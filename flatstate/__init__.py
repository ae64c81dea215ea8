"""flatstate: flat finite state automaton runtime

Callers declare states and transitions with builders, freeze them into an
Automaton, enable it once and drive it by posting events.

Responsibilities:
    - Construction-time validation of the state/transition graph
    - Event dispatch: first matching transition by type and guard wins
    - Exit, transition and entry actions in a fixed order

Cross-cutting Concerns:
    Thread Safety:
        - The automaton holds no locks
        - Serialization of work is delegated to the executor

    Error Handling:
        - Errors derive from AutomatonError
        - Failures inside asynchronously scheduled work are reported by the
          executor's error handler

    Logging:
        - Standard library logging, DEBUG level for dispatch decisions
"""

from flatstate.core.automaton import Automaton, AutomatonBuilder
from flatstate.core.errors import (
    AlreadyEnabledError,
    AutomatonError,
    DispatchError,
    ExecutorError,
    ExecutorShutdownError,
    FieldAlreadySetError,
    InvalidArgumentError,
    MissingFieldError,
    NotEnabledError,
    QueueFullError,
    ValidationError,
)
from flatstate.core.states import ImmutableState, State, StateBuilder
from flatstate.core.transitions import Guards, ImmutableTransition, Transition, TransitionBuilder
from flatstate.interfaces.protocols import Executor
from flatstate.runtime.async_support import AsyncioExecutor
from flatstate.runtime.executor import FuturesExecutor, ImmediateExecutor, SerialExecutor, as_executor

__version__ = "0.1.0"

__all__ = [
    "AlreadyEnabledError",
    "AsyncioExecutor",
    "Automaton",
    "AutomatonBuilder",
    "AutomatonError",
    "DispatchError",
    "Executor",
    "ExecutorError",
    "ExecutorShutdownError",
    "FieldAlreadySetError",
    "FuturesExecutor",
    "Guards",
    "ImmediateExecutor",
    "ImmutableState",
    "ImmutableTransition",
    "InvalidArgumentError",
    "MissingFieldError",
    "NotEnabledError",
    "QueueFullError",
    "SerialExecutor",
    "State",
    "StateBuilder",
    "Transition",
    "TransitionBuilder",
    "ValidationError",
    "as_executor",
]
