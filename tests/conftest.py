from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

import pytest

from code_tracker.config import TrackerSettings
from code_tracker.host import StatusBarItem
from code_tracker.models import TimeLedger
from code_tracker.storage import LedgerStore, dump_ledger
from code_tracker.tracker import CodingTimeTracker

START = datetime(2024, 1, 1, 9, 0, 0)
TODAY_KEY = "Mon Jan 01 2024"


class FakeClock:
    def __init__(self, start: datetime = START) -> None:
        self.start = start
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def at(self, seconds: float) -> "FakeClock":
        self.now = self.start + timedelta(seconds=seconds)
        return self


class FakeMonotonic:
    def __init__(self) -> None:
        self.value = 1000.0

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class MemoryFileSystem:
    def __init__(self) -> None:
        self.files: dict[Path, str] = {}
        self.writes: list[Path] = []
        self.fail_writes = False

    def read(self, path: Path) -> str:
        return self.files[Path(path)]

    def write(self, path: Path, data: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.files[Path(path)] = data
        self.writes.append(Path(path))

    def exists(self, path: Path) -> bool:
        return Path(path) in self.files


class RecordingNotifier:
    def __init__(self) -> None:
        self.infos: list[tuple[str, bool]] = []
        self.errors: list[str] = []

    def info(self, message: str, *, modal: bool = False) -> None:
        self.infos.append((message, modal))

    def error(self, message: str) -> None:
        self.errors.append(message)


DATA_PATH = Path("data/coding-stats.json")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fs() -> MemoryFileSystem:
    return MemoryFileSystem()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_tracker(
    clock: FakeClock, fs: MemoryFileSystem, notifier: RecordingNotifier
) -> Callable[..., CodingTimeTracker]:
    def _make(
        ledger: Optional[TimeLedger] = None,
        settings: Optional[TrackerSettings] = None,
    ) -> CodingTimeTracker:
        if ledger is not None:
            fs.files[DATA_PATH] = dump_ledger(ledger)
        return CodingTimeTracker(
            store=LedgerStore(DATA_PATH, fs=fs),
            status_bar=StatusBarItem(),
            notifier=notifier,
            settings=settings,
            clock=clock,
        )

    return _make
