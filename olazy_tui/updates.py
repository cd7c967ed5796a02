"""Hand-off of work from background threads to the render thread."""

from __future__ import annotations

import queue
import threading
from typing import Callable


class UpdateQueue:
    """Runs scheduled callables on the thread that owns the queue.

    Calls to ``schedule`` from the owner thread drain anything already pending
    and then run immediately; calls from other threads are queued until the
    owner's next ``drain``. Only the owner ever executes callables, so state
    they touch needs no further locking.
    """

    def __init__(self) -> None:
        self._owner = threading.get_ident()
        self._pending: queue.SimpleQueue[Callable[[], None]] = queue.SimpleQueue()

    @property
    def on_owner_thread(self) -> bool:
        return threading.get_ident() == self._owner

    def schedule(self, fn: Callable[[], None]) -> None:
        if self.on_owner_thread:
            self.drain()
            fn()
        else:
            self._pending.put(fn)

    def drain(self) -> int:
        if not self.on_owner_thread:
            raise RuntimeError("drain() must be called from the owner thread")
        count = 0
        while True:
            try:
                fn = self._pending.get_nowait()
            except queue.Empty:
                return count
            fn()
            count += 1
