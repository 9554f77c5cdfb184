from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerScheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callback) -> TimerHandle:
        ...

    def call_every(self, period_ms: int, callback: Callback) -> TimerHandle:
        ...


class _PeriodicHandle:
    """Re-arms ``callback`` every ``period_ms`` until cancelled."""

    def __init__(self, loop: asyncio.AbstractEventLoop, period_ms: int, callback: Callback) -> None:
        self._loop = loop
        self._period = period_ms / 1000.0
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._cancelled = False

    def start(self) -> "_PeriodicHandle":
        self._handle = self._loop.call_later(self._period, self._run)
        return self

    def _run(self) -> None:
        if self._cancelled:
            return
        self._callback()
        # the callback may have cancelled us
        if not self._cancelled:
            self._handle = self._loop.call_later(self._period, self._run)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


class AsyncioTimerScheduler:
    """TimerScheduler backed by an asyncio event loop.

    All callbacks run on the loop's thread. When no loop is given, the running
    loop of the calling thread is used.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def call_later(self, delay_ms: int, callback: Callback) -> asyncio.TimerHandle:
        return self._get_loop().call_later(delay_ms / 1000.0, callback)

    def call_every(self, period_ms: int, callback: Callback) -> _PeriodicHandle:
        if period_ms <= 0:
            raise ValueError("period_ms must be positive")
        return _PeriodicHandle(self._get_loop(), period_ms, callback).start()
