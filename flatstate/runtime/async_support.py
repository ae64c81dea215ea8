# flatstate/runtime/async_support.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import threading
from typing import Optional

from flatstate.core.errors import ExecutorShutdownError
from flatstate.interfaces.types import ErrorHandler, Work


class AsyncioExecutor:
    """
    Schedules units of work as callbacks on an asyncio event loop. The loop
    runs callbacks one at a time in the order they were scheduled, so an
    automaton driven by this executor is serialized even when events are
    posted from other threads.

    Work runs inside the loop thread and must not block it.
    """

    def __init__(
        self, loop: Optional[asyncio.AbstractEventLoop] = None, error_handler: Optional[ErrorHandler] = None
    ) -> None:
        """
        :param loop: Target loop. Defaults to the running loop, so without it
            the executor must be created from a coroutine.
        :param error_handler: Called with each exception raised by a unit.
            Defaults to the loop's exception handler.
        """
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        self._error_handler = error_handler
        self._pending = 0
        self._lock = threading.Lock()
        self._closed = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    @property
    def pending(self) -> int:
        with self._lock:
            return self._pending

    def execute(self, work: Work) -> None:
        """
        Schedule work on the loop. Safe to call from any thread.

        :raises ExecutorShutdownError: If the executor was closed or the loop
            is closed.
        """
        with self._lock:
            if self._closed or self._loop.is_closed():
                raise ExecutorShutdownError("Event loop is not accepting work")
            self._pending += 1
        try:
            self._loop.call_soon_threadsafe(self._run, work)
        except RuntimeError as exc:
            with self._lock:
                self._pending -= 1
            raise ExecutorShutdownError(str(exc)) from exc

    def _run(self, work: Work) -> None:
        try:
            work()
        except Exception as exc:
            self._report(exc)
        finally:
            with self._lock:
                self._pending -= 1

    def _report(self, error: Exception) -> None:
        if self._error_handler is not None:
            self._error_handler(error)
            return
        self._loop.call_exception_handler(
            {"message": "Unit of work scheduled by AsyncioExecutor failed", "exception": error}
        )

    async def drain(self) -> None:
        """Wait until all units scheduled so far have run. Call from the loop."""
        while self.pending:
            await asyncio.sleep(0)

    def close(self) -> None:
        """Refuse further work. Units already scheduled still run."""
        with self._lock:
            self._closed = True
