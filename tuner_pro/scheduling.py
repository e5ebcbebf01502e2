from __future__ import annotations

import asyncio
import itertools
import time
from collections import OrderedDict
from typing import Any, Callable, Protocol

Callback = Callable[[], None]


class Scheduler(Protocol):
    def schedule(self, callback: Callback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class ManualScheduler:
    """
    Scheduler driven by the caller.

    Nothing fires until run_pending() is called; callbacks scheduled while
    run_pending() is running wait for the next call, so one call advances a
    session by exactly one cycle.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._pending: OrderedDict[int, Callback] = OrderedDict()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def schedule(self, callback: Callback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def run_pending(self) -> int:
        due = list(self._pending.keys())
        fired = 0
        for handle in due:
            callback = self._pending.pop(handle, None)
            if callback is None:
                continue
            callback()
            fired += 1
        return fired


class AsyncioScheduler:
    def __init__(self, interval: float = 1 / 60, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._interval = float(interval)
        self._loop = loop

    def schedule(self, callback: Callback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(self._interval, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class BlockingScheduler:
    """Single-threaded loop: sleeps `interval` seconds, then fires the next callback."""

    def __init__(self, interval: float = 1 / 60) -> None:
        self._interval = float(interval)
        self._inner = ManualScheduler()

    def schedule(self, callback: Callback) -> int:
        return self._inner.schedule(callback)

    def cancel(self, handle: int) -> None:
        self._inner.cancel(handle)

    def run(self, until: Callable[[], bool] | None = None) -> None:
        while self._inner.pending_count:
            if until is not None and until():
                return
            time.sleep(self._interval)
            self._inner.run_pending()
