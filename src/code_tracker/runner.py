"""Own the tracker, its dispatch thread and the host-facing callbacks."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, TypeVar

from .activity import WorkspaceWatcher
from .config import TrackerSettings
from .host import LogNotifier, Notifier, StatusBarItem
from .scheduler import Scheduler
from .storage import FileSystem, LedgerStore
from .tracker import CodingTimeTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

CALL_TIMEOUT_SECONDS = 10.0
CALL_POLL_SECONDS = 0.1


class UnknownCommandError(KeyError):
    """Raised for a command identifier that was never registered."""


class TrackerRunner:
    """Run a :class:`CodingTimeTracker` on a background dispatch thread.

    Every callback handed to a host goes through a guard, so tracker
    failures are logged (and, for commands, reported) but never raised
    into the host.
    """

    def __init__(
        self,
        data_file: Path,
        settings: Optional[TrackerSettings] = None,
        *,
        status_bar: Optional[StatusBarItem] = None,
        notifier: Optional[Notifier] = None,
        watch_paths: Iterable[Path] = (),
        fs: Optional[FileSystem] = None,
    ) -> None:
        self.data_file = Path(data_file)
        self.settings = settings or TrackerSettings()
        self.notifier: Notifier = notifier or LogNotifier()
        self.scheduler = Scheduler()
        self.tracker = CodingTimeTracker(
            store=LedgerStore(self.data_file, fs=fs),
            status_bar=status_bar or StatusBarItem(),
            notifier=self.notifier,
            settings=self.settings,
        )
        self.commands: Dict[str, Callable[[], str]] = {
            self.settings.show_time_command: self.tracker.show_time,
            self.settings.show_stats_command: self.tracker.show_stats,
        }
        self.watcher: Optional[WorkspaceWatcher] = None
        watch_paths = list(watch_paths)
        if watch_paths:
            self.watcher = WorkspaceWatcher(
                watch_paths,
                on_activity=self._on_activity,
                ignored_files=[self.data_file],
            )
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._disposed = False

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            self.scheduler.post(self._activate)
            thread = threading.Thread(
                target=self.scheduler.run_until_stopped,
                args=(stop_event,),
                name="code-tracker",
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
            logger.info("Tracker started; writing to %s", self.data_file)

    def stop(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if self._stop_event:
                self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        if thread:
            # Wake the loop if it is waiting for events.
            self.scheduler.post(lambda: None)
            thread.join(timeout=10)
        self._dispose()

    def run_forever(self) -> None:
        """Run on the calling thread until interrupted."""
        stop_event = threading.Event()
        self.scheduler.post(self._activate)
        logger.info("Tracker started; writing to %s", self.data_file)
        try:
            self.scheduler.run_until_stopped(stop_event)
        except KeyboardInterrupt:
            logger.info("Tracker interrupted; saving coding time.")
        finally:
            self._dispose()

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    def _activate(self) -> None:
        self.tracker.start(self.scheduler)
        if self.watcher is not None:
            self.watcher.poll()
            self.scheduler.call_every(
                self.settings.watch_interval.total_seconds(), self._poll_workspace
            )

    def _dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        try:
            self.tracker.dispose()
        except Exception:
            logger.exception("Failed to dispose tracker")
        logger.info("Tracker stopped.")

    def call(self, fn: Callable[[], T]) -> T:
        """Run ``fn`` on the dispatch thread and wait for its result.

        If the dispatch thread stops before picking the call up, ``fn`` runs
        on the caller's thread instead.
        """
        if not self.is_running():
            return fn()
        future = self.scheduler.submit(fn)
        deadline = time.monotonic() + CALL_TIMEOUT_SECONDS
        while True:
            try:
                return future.result(timeout=CALL_POLL_SECONDS)
            except FutureTimeoutError:
                if not self.is_running() and future.cancel():
                    return fn()
                if time.monotonic() >= deadline:
                    raise

    def record_activity(self) -> None:
        if self.is_running():
            self.scheduler.post(self._on_activity)
        else:
            self._on_activity()

    def _on_activity(self) -> None:
        try:
            self.tracker.handle_activity()
        except Exception:
            # Fires on every edit; a dialog per failure would be disruptive.
            logger.exception("Activity handler failed")

    def _poll_workspace(self) -> None:
        if self.watcher is None:
            return
        try:
            self.watcher.poll()
        except Exception:
            logger.exception("Workspace poll failed")

    def execute_command(self, command_id: str) -> Optional[str]:
        """Run a registered command; ``None`` means it failed and was reported."""
        try:
            command = self.commands[command_id]
        except KeyError:
            raise UnknownCommandError(command_id) from None
        try:
            return self.call(command)
        except Exception as exc:
            logger.exception("Command %s failed", command_id)
            self.notifier.error(f"Command {command_id} failed: {exc}")
            return None

    def snapshot(self) -> Dict[str, Any]:
        def _read() -> Dict[str, Any]:
            tracker = self.tracker
            return {
                "today_key": tracker.today_key,
                "is_active": tracker.is_active,
                "status_text": tracker.status_bar.text,
                "total_coding_time": tracker.total_coding_time,
                "session_time": tracker.session_time,
                "live_total": tracker.live_total,
                "days": dict(tracker.time_data),
            }

        return self.call(_read)
