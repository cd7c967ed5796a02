"""Dashboard controller: owns the view state and coordinates background refreshes.

All state mutation happens on the thread that owns the ``UpdateQueue`` (the
render thread). Background fetches only produce a ``FetchResult`` and hand it
over through the queue; the render thread applies it in one step, so the
renderers never observe a half-applied refresh.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable

from olazy_tui.collectors import DEFAULT_TIMEOUT_SECONDS, Deadline, FetchError, TransportError
from olazy_tui.collectors.ollama import OllamaClient
from olazy_tui.formatting import model_line
from olazy_tui.keys import KEY_CTRL_C, KEY_CTRL_R, KeyBindings, QuitRequested
from olazy_tui.models import DashboardState, FetchResult, Model
from olazy_tui.updates import UpdateQueue

logger = logging.getLogger(__name__)

REGIONS = ("installed", "running", "status")

NO_INSTALLED = "(no models installed)"
NOTHING_RUNNING = "(nothing running)"
STATUS_IDLE = "Ready"

JOIN_POLL_SECONDS = 0.05


def _spawn(fn: Callable[[Deadline], tuple[Model, ...]], deadline: Deadline, name: str) -> Future:
    """Run one endpoint call on a daemon thread so a hung socket never blocks exit."""
    future: Future = Future()

    def run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(deadline))
        except Exception as exc:
            future.set_exception(exc)

    threading.Thread(target=run, name=name, daemon=True).start()
    return future


def _outcome(future: Future, label: str) -> tuple[tuple[Model, ...] | None, Exception | None]:
    if not future.done():
        return None, TransportError(f"{label}: deadline exceeded")
    try:
        return future.result(), None
    except FetchError as exc:
        return None, exc


def fetch_models(client: OllamaClient, deadline: Deadline) -> FetchResult:
    """Query both endpoints concurrently and join them before returning.

    The join gives up once the deadline expires or is cancelled; a call still
    running at that point is reported as a ``TransportError``.
    """
    installed_future = _spawn(client.list_installed, deadline, "olazy-fetch-tags")
    running_future = _spawn(client.list_running, deadline, "olazy-fetch-ps")

    pending = {installed_future, running_future}
    while pending and not deadline.expired:
        remaining = deadline.remaining()
        poll = JOIN_POLL_SECONDS if remaining is None else min(JOIN_POLL_SECONDS, remaining)
        _, pending = wait(pending, timeout=poll)

    installed, installed_error = _outcome(installed_future, "tags")
    running, running_error = _outcome(running_future, "ps")
    return FetchResult(
        installed=installed,
        installed_error=installed_error,
        running=running,
        running_error=running_error,
    )


class DashboardController:
    def __init__(
        self,
        client: OllamaClient,
        updates: UpdateQueue | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self.client = client
        self.updates = updates or UpdateQueue()
        self.timeout = timeout
        self.state = DashboardState()
        self._dirty: set[str] = set(REGIONS)
        self._inflight: Future | None = None
        self._deadline: Deadline | None = None
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="olazy-refresh")

    # -- status log ----------------------------------------------------

    def log(self, message: str) -> None:
        self.updates.schedule(lambda: self._append_status(message))

    def _append_status(self, message: str) -> None:
        self.state.status.append(message)
        self._dirty.add("status")
        logger.debug("status: %s", message)

    # -- refresh cycle -------------------------------------------------

    @property
    def refreshing(self) -> bool:
        return self._inflight is not None

    def refresh(self) -> None:
        self.updates.schedule(self._start_refresh)

    def _start_refresh(self) -> None:
        if self._inflight is not None:
            self._append_status("Refresh already in progress")
            return
        self._append_status("Refreshing...")
        deadline = Deadline.after(self.timeout)
        self._deadline = deadline
        self._inflight = self._worker.submit(self._run_refresh, deadline)

    def _run_refresh(self, deadline: Deadline) -> None:
        try:
            result = fetch_models(self.client, deadline)
        except Exception as exc:
            logger.exception("refresh failed unexpectedly")
            result = FetchResult(installed_error=exc, running_error=exc)
        self.updates.schedule(lambda: self._apply(result))

    def _apply(self, result: FetchResult) -> None:
        self._inflight = None
        self._deadline = None

        if result.installed_error is None:
            self.state.installed = result.installed or ()
            self.state.installed_failed = False
        else:
            logger.info("installed models fetch failed: %s", result.installed_error)
            self.state.installed_failed = True
            self._append_status(f"Installed: {result.installed_error}")

        if result.running_error is None:
            self.state.running = result.running or ()
            self.state.running_failed = False
        else:
            logger.info("running models fetch failed: %s", result.running_error)
            self.state.running_failed = True
            self._append_status(f"Running: {result.running_error}")

        self._dirty.update(("installed", "running"))
        if result.ok:
            self._append_status("Refreshed")

    def wait_for_refresh(self, timeout: float | None = None) -> None:
        """Block until the in-flight refresh is applied. Owner thread only."""
        self.updates.drain()
        future = self._inflight
        if future is not None:
            future.result(timeout=timeout)
        self.updates.drain()

    # -- projections ---------------------------------------------------

    def render_installed(self) -> list[str]:
        if not self.state.installed:
            return [NO_INSTALLED]
        return [model_line(m.name, m.size) for m in self.state.installed]

    def render_running(self) -> list[str]:
        if not self.state.running:
            return [NOTHING_RUNNING]
        return [m.name for m in self.state.running]

    def render_status(self) -> str:
        return self.state.status.joined() or STATUS_IDLE

    def take_dirty(self) -> set[str]:
        dirty = set(self._dirty)
        self._dirty.clear()
        return dirty

    # -- keys ----------------------------------------------------------

    def bind_keys(self, bindings: KeyBindings) -> None:
        bindings.bind(KEY_CTRL_C, self.on_quit)
        bindings.bind("q", self.on_quit)
        bindings.bind("r", self.on_refresh)
        bindings.bind(KEY_CTRL_R, self.on_refresh)

    def on_quit(self) -> None:
        raise QuitRequested()

    def on_refresh(self) -> None:
        self.refresh()

    def close(self) -> None:
        if self._deadline is not None:
            self._deadline.cancel()
        self._worker.shutdown(wait=False, cancel_futures=True)
        self.client.close()
