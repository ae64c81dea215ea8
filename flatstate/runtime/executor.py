# flatstate/runtime/executor.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import concurrent.futures
import logging
import threading
from typing import Any, Optional

from flatstate.core.errors import ExecutorShutdownError, InvalidArgumentError
from flatstate.interfaces.protocols import Executor
from flatstate.interfaces.types import ErrorHandler, Work
from flatstate.runtime.event_queue import WorkQueue

logger = logging.getLogger(__name__)


def log_error(error: BaseException) -> None:
    """Default error handler: log the failed unit with its traceback."""
    logger.error("Unit of work failed: %s", error, exc_info=error)


class ImmediateExecutor:
    """
    Runs every unit of work synchronously on the calling thread before
    execute() returns. Failures propagate to the caller.
    """

    def execute(self, work: Work) -> None:
        work()


class CallableExecutor:
    """
    Adapts a plain callable that accepts a unit of work, such as
    loop.call_soon or a queue's put method, to the Executor protocol.
    """

    def __init__(self, submit: Any) -> None:
        self._submit = submit

    def execute(self, work: Work) -> None:
        self._submit(work)


class SerialExecutor:
    """
    Runs units of work one at a time, in submission order, on a single
    worker thread. This satisfies the serialization an Automaton relies on
    when events are posted from other threads.

    The worker thread is started on the first call to execute(). A unit that
    raises is reported to error_handler and the worker moves on to the next
    unit.
    """

    def __init__(
        self,
        max_queue_size: Optional[int] = None,
        name: str = "flatstate-serial",
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        """
        :param max_queue_size: Bound on pending units, None for unbounded.
        :param name: Name of the worker thread.
        :param error_handler: Called with each exception raised by a unit.
            Defaults to logging it.
        """
        self._queue = WorkQueue(max_queue_size)
        self._name = name
        self._error_handler = error_handler or log_error
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def pending(self) -> int:
        """Number of units waiting to run."""
        return len(self._queue)

    def start(self) -> None:
        """
        Start the worker thread if it is not running yet.

        :raises ExecutorShutdownError: If the executor was shut down.
        """
        with self._lock:
            if self._queue.closed:
                raise ExecutorShutdownError("Executor has been shut down")
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()

    def execute(self, work: Work) -> None:
        """
        Queue a unit of work.

        :raises ExecutorShutdownError: If the executor was shut down.
        :raises InvalidArgumentError: If work is None.
        :raises QueueFullError: If the queue is bounded and full.
        """
        if work is None:
            raise InvalidArgumentError("Work must not be None")
        self.start()
        self._queue.put(work)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until all units submitted so far have run. Must not be called
        from a unit of work.

        :return: True if drained, False on timeout.
        """
        return self._queue.join(timeout)

    def shutdown(self, wait: bool = True, timeout: Optional[float] = None, cancel_pending: bool = False) -> None:
        """
        Stop accepting work. Pending units still run unless cancel_pending is
        set.

        :param wait: Block until the worker thread exits.
        :param timeout: Seconds to wait for the worker thread.
        :param cancel_pending: Drop units that have not started yet.
        """
        with self._lock:
            if cancel_pending:
                dropped = self._queue.clear()
                if dropped:
                    logger.debug("Dropped %d pending units on shutdown", dropped)
            self._queue.close()
            thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while True:
            work = self._queue.get()
            if work is None:
                break
            try:
                work()
            except Exception as exc:
                self._handle_error(exc)
            finally:
                self._queue.task_done()

    def _handle_error(self, error: Exception) -> None:
        try:
            self._error_handler(error)
        except Exception:
            logger.exception("Error handler failed while handling %r", error)

    def __enter__(self) -> SerialExecutor:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)


class FuturesExecutor:
    """
    Submits units of work to a concurrent.futures.Executor. Failures are
    reported to error_handler when the future completes.

    Work is only serialized if the wrapped pool has a single worker; with more
    workers, dispatch of one event can overlap with another.
    """

    def __init__(self, pool: concurrent.futures.Executor, error_handler: Optional[ErrorHandler] = None) -> None:
        self._pool = pool
        self._error_handler = error_handler or log_error

    @property
    def pool(self) -> concurrent.futures.Executor:
        return self._pool

    def execute(self, work: Work) -> None:
        """
        :raises ExecutorShutdownError: If the wrapped pool was shut down.
        """
        try:
            future = self._pool.submit(work)
        except RuntimeError as exc:
            raise ExecutorShutdownError(str(exc)) from exc
        future.add_done_callback(self._report)

    def _report(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._error_handler(error)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)


def as_executor(obj: Any) -> Executor:
    """
    Normalize obj to an Executor.

    :param obj: An Executor, a concurrent.futures.Executor or a callable
        accepting a unit of work.
    :raises InvalidArgumentError: If obj is None or none of the above.
    """
    if obj is None:
        raise InvalidArgumentError("Executor must not be None")
    if isinstance(obj, concurrent.futures.Executor):
        return FuturesExecutor(obj)
    if isinstance(obj, Executor):
        return obj
    if callable(obj):
        return CallableExecutor(obj)
    raise InvalidArgumentError(f"Cannot use {obj!r} as executor")
