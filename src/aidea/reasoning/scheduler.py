"""Periodic task scheduling.

Hides how repeating timers are driven. Starting a timer returns a handle
owned by whoever started it; cancelling the handle is the only way to
stop it, and a cancelled handle never fires again.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable


class TaskHandle(ABC):
    """Cancelable handle to a scheduled periodic callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the callback from firing again. Safe to call repeatedly."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether :meth:`cancel` has been called."""


class Scheduler(ABC):
    """Source of periodic timers."""

    @abstractmethod
    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        """Invoke ``callback`` every ``interval`` seconds until cancelled."""


class _RepeatingTimer(TaskHandle):
    """Chain of ``loop.call_later`` calls that re-arms itself after each run."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._timer: asyncio.TimerHandle | None = loop.call_later(interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback()
        finally:
            if not self._cancelled:
                self._timer = self._loop.call_later(self._interval, self._fire)

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop.

    Args:
        loop: Event loop to use; the running loop is looked up per call
            when omitted
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> TaskHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _RepeatingTimer(loop, interval, callback)
