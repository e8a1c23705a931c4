"""Idle-aware coding time tracker."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from .config import TrackerSettings
from .host import Notifier, StatusBarItem
from .models import DayRecord, TimeLedger, day_key
from .reporting import format_duration, render_stats, render_today
from .scheduler import Scheduler, TimerHandle
from .storage import LedgerStorageError, LedgerStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_seconds(start: datetime, end: datetime) -> int:
    return max(int((end - start).total_seconds()), 0)


class CodingTimeTracker:
    """Accumulates active coding seconds for today and persists them.

    The tracker is a two-state machine. It starts idle; an activity signal
    makes it active, and a tick that finds no activity for
    ``settings.idle_timeout`` folds the session into today's total and
    returns it to idle.

    ``clock`` must not jump with local wall-clock changes; the default is
    aware UTC. Only the day-key is taken from local time.
    """

    def __init__(
        self,
        store: LedgerStore,
        status_bar: StatusBarItem,
        notifier: Notifier,
        settings: Optional[TrackerSettings] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.status_bar = status_bar
        self.notifier = notifier
        self.settings = settings or TrackerSettings()
        self._clock = clock

        now = clock()
        self.today_key = day_key(now.astimezone().date())
        self.time_data: TimeLedger = self.load_time_data()

        self.coding_start_time = now
        self.session_time = 0
        today = self.time_data.get(self.today_key)
        self.total_coding_time = today.total_coding_time if today else 0
        self.is_active = False
        self.last_activity_time = now

        self._timer: Optional[TimerHandle] = None
        self._configure_status_bar()

    def _configure_status_bar(self) -> None:
        self.status_bar.priority = self.settings.status_bar_priority
        self.status_bar.command = self.settings.show_time_command
        self.status_bar.tooltip = self.settings.status_tooltip

    @property
    def live_total(self) -> int:
        return self.total_coding_time + self.session_time

    def load_time_data(self) -> TimeLedger:
        return self.store.load()

    def save_time_data(self) -> bool:
        current_total = self.live_total
        self.time_data[self.today_key] = DayRecord(
            total_coding_time=current_total,
            last_saved=self._clock(),
        )
        try:
            self.store.save(self.time_data)
        except LedgerStorageError as exc:
            logger.exception("Error saving time data")
            if self.settings.notify_on_save_error:
                self.notifier.error(f"Error saving time data: {exc}")
            return False
        logger.info(
            "Time data saved successfully. Today's total: %s",
            format_duration(current_total),
        )
        return True

    def _render(self, seconds: int) -> None:
        self.status_bar.text = f"{self.settings.status_icon} {format_duration(seconds)}"

    def update_time(self) -> None:
        if not self.is_active:
            self._render(self.total_coding_time)
            return

        now = self._clock()
        idle_gap = _elapsed_seconds(self.last_activity_time, now)
        if idle_gap < self.settings.idle_timeout_seconds:
            self.session_time = _elapsed_seconds(self.coding_start_time, now)
            self._render(self.live_total)
            if idle_gap % self.settings.save_gap_modulus == 0:
                self.save_time_data()
        else:
            logger.debug("Idle for %ds; closing %ds session.", idle_gap, self.session_time)
            self.is_active = False
            self.total_coding_time += self.session_time
            self.session_time = 0
            self.save_time_data()

    def handle_activity(self) -> None:
        now = self._clock()
        if not self.is_active:
            self.is_active = True
            self.coding_start_time = now
            self.session_time = 0
            if self.today_key not in self.time_data:
                self.time_data[self.today_key] = DayRecord(total_coding_time=0, last_saved=now)
            logger.debug("Coding session started at %s", now.isoformat())
        self.last_activity_time = now

    def show_stats(self) -> str:
        message = render_stats(self.time_data)
        self.notifier.info(message, modal=True)
        return message

    def show_time(self) -> str:
        message = render_today(self.total_coding_time)
        self.notifier.info(message)
        return message

    def start(self, scheduler: Scheduler) -> TimerHandle:
        self.update_time()
        self.status_bar.show()
        self._timer = scheduler.call_every(
            self.settings.tick_interval.total_seconds(), self.update_time
        )
        return self._timer

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def dispose(self) -> None:
        self.stop()
        self.save_time_data()
        self.status_bar.dispose()
