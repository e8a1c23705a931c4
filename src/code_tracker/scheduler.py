"""Single-threaded dispatch of periodic ticks and external events."""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]


class TimerHandle:
    """Cancellable registration returned by :meth:`Scheduler.call_every`."""

    def __init__(self, interval: float, callback: Callback, next_due: float) -> None:
        self.interval = interval
        self.callback = callback
        self.next_due = next_due
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class Scheduler:
    """Run periodic callbacks and posted events on one logical thread.

    Only the thread driving :meth:`run_until_stopped` (or
    :meth:`run_pending`) invokes callbacks, so callbacks never overlap.
    Events may be posted from any thread.
    """

    def __init__(self, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._monotonic = monotonic
        self._events: "queue.Queue[Callback]" = queue.Queue()
        self._timers: list[TimerHandle] = []
        self._lock = threading.Lock()

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = TimerHandle(interval, callback, self._monotonic() + interval)
        with self._lock:
            self._timers.append(handle)
        return handle

    def post(self, callback: Callback) -> None:
        self._events.put(callback)

    def submit(self, callback: Callback) -> "Future[Any]":
        """Queue ``callback`` and return a future for its result."""
        future: "Future[Any]" = Future()

        def _run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = callback()
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        self.post(_run)
        return future

    def run_pending(self) -> int:
        """Run queued events and due timers once; return how many ran."""
        ran = 0
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            self._invoke(event)
            ran += 1
        for handle in self._due_timers():
            self._invoke(handle.callback)
            ran += 1
        return ran

    def run_until_stopped(self, stop_event: threading.Event) -> None:
        logger.debug("Scheduler loop started.")
        while not stop_event.is_set():
            try:
                event = self._events.get(timeout=self._seconds_until_next_timer())
            except queue.Empty:
                pass
            else:
                if stop_event.is_set():
                    break
                self._invoke(event)
            for handle in self._due_timers():
                if stop_event.is_set():
                    break
                self._invoke(handle.callback)
        logger.debug("Scheduler loop stopped.")

    def _seconds_until_next_timer(self) -> float:
        with self._lock:
            pending = [t.next_due for t in self._timers if not t.cancelled]
        if not pending:
            return 0.5
        return min(max(min(pending) - self._monotonic(), 0.0), 0.5)

    def _due_timers(self) -> list[TimerHandle]:
        now = self._monotonic()
        due: list[TimerHandle] = []
        with self._lock:
            self._timers = [t for t in self._timers if not t.cancelled]
            for handle in self._timers:
                if handle.next_due > now:
                    continue
                due.append(handle)
                handle.next_due += handle.interval
                if handle.next_due <= now:
                    # Fell behind (e.g. system sleep): skip missed ticks.
                    handle.next_due = now + handle.interval
        return due

    @staticmethod
    def _invoke(callback: Callback) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Scheduled callback %r failed", callback)
