from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Optional, TypeVar

from flask import current_app

from luckydraw.config import DrawSettings
from luckydraw.session import DrawSession
from luckydraw.timers import AsyncioTimerScheduler

T = TypeVar("T")


class EngineRuntime:
    """Hosts a :class:`DrawSession` on a private event-loop thread.

    Request handlers run on WSGI worker threads; every session access goes
    through :meth:`call` so the session itself is only touched by the loop.
    """

    def __init__(self, settings: DrawSettings, call_timeout: float = 5.0) -> None:
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="luckydraw-engine", daemon=True)
        self._timeout = call_timeout
        self._session = DrawSession(settings, AsyncioTimerScheduler(self._loop))

    def start(self) -> "EngineRuntime":
        self._thread.start()
        return self

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn(session, *args, **kwargs)`` on the loop thread and return its result."""

        async def invoke() -> T:
            return fn(self._session, *args, **kwargs)

        future = asyncio.run_coroutine_threadsafe(invoke(), self._loop)
        return future.result(timeout=self._timeout)

    def shutdown(self, timeout: Optional[float] = 2.0) -> None:
        if not self._thread.is_alive():
            return
        self.call(DrawSession.reset)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        self._loop.close()


def current_runtime() -> EngineRuntime:
    return current_app.extensions["luckydraw"]
