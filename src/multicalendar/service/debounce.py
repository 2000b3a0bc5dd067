# SPDX-License-Identifier: MIT

import asyncio
from typing import Callable, Optional


class Debouncer:
    """
    Run only the last call scheduled within ``delay`` seconds.

    Each ``call`` cancels the pending timer and starts a new one on the
    running event loop, so a burst of scroll or resize events collapses into
    a single callback.
    """

    def __init__(self, delay: float) -> None:
        if delay < 0:
            raise ValueError("debounce delay must not be negative")
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None
        self._callback: Optional[Callable[[], None]] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def call(self, callback: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._callback = callback
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._callback = None

    def _fire(self) -> None:
        callback = self._callback
        self._handle = None
        self._callback = None
        if callback is not None:
            callback()
