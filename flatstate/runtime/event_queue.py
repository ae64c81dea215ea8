# flatstate/runtime/event_queue.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque, Optional

from flatstate.core.errors import ExecutorShutdownError, InvalidArgumentError, QueueFullError
from flatstate.interfaces.types import Work


class WorkQueue:
    """
    A thread-safe FIFO of pending units of work, consumed by SerialExecutor.

    The queue is unbounded unless max_size is given. A bounded queue rejects
    new work with QueueFullError instead of blocking the producer, so a caller
    posting faster than the automaton can keep up finds out immediately.
    """

    def __init__(self, max_size: Optional[int] = None) -> None:
        """
        :param max_size: Maximum number of pending units, or None for no bound.
        :raises InvalidArgumentError: If max_size is not positive.
        """
        if max_size is not None and max_size <= 0:
            raise InvalidArgumentError("max_size must be positive")
        self._max_size = max_size
        self._queue: Deque[Work] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._all_done = threading.Condition(self._lock)
        self._unfinished = 0
        self._closed = False

    @property
    def max_size(self) -> Optional[int]:
        return self._max_size

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, work: Work) -> None:
        """
        Append a unit of work.

        :raises InvalidArgumentError: If work is None.
        :raises ExecutorShutdownError: If the queue was closed.
        :raises QueueFullError: If the queue is bounded and full.
        """
        if work is None:
            raise InvalidArgumentError("Work must not be None")
        with self._lock:
            if self._closed:
                raise ExecutorShutdownError("Work queue is closed")
            if self._max_size is not None and len(self._queue) >= self._max_size:
                raise QueueFullError("Work queue is full", max_size=self._max_size, current_size=len(self._queue))
            self._queue.append(work)
            self._unfinished += 1
            self._not_empty.notify()

    def get(self, timeout: Optional[float] = None) -> Optional[Work]:
        """
        Remove and return the oldest unit of work, waiting for one if needed.

        :param timeout: Seconds to wait, or None to wait until work arrives or
            the queue is closed.
        :return: The next unit, or None on timeout or once closed and drained.
        """
        with self._not_empty:
            if not self._not_empty.wait_for(lambda: self._queue or self._closed, timeout):
                return None
            if self._queue:
                return self._queue.popleft()
            return None

    def task_done(self) -> None:
        """Mark one unit returned by get() as finished."""
        with self._lock:
            if self._unfinished <= 0:
                raise ValueError("task_done() called too many times")
            self._unfinished -= 1
            if self._unfinished == 0:
                self._all_done.notify_all()

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every unit put so far has been marked done.

        :return: True if the queue drained, False on timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._all_done:
            while self._unfinished:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._all_done.wait(remaining)
            return True

    def close(self) -> None:
        """Refuse further work and wake up any waiting consumer."""
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()

    def clear(self) -> int:
        """
        Drop all pending units.

        :return: The number of units dropped.
        """
        with self._lock:
            dropped = len(self._queue)
            self._queue.clear()
            self._unfinished -= dropped
            if self._unfinished == 0:
                self._all_done.notify_all()
            return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)
