"""Activity detection from file modifications in a workspace."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_DIRS: frozenset[str] = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".idea",
        ".mypy_cache",
        ".pytest_cache",
        ".tox",
        ".venv",
        "__pycache__",
        "node_modules",
        "venv",
    }
)

Snapshot = dict[Path, int]


class WorkspaceWatcher:
    """Polls file modification times and reports edits as activity.

    The first poll only records a baseline. Each later poll that finds an
    added, modified or deleted file calls ``on_activity`` once.
    """

    def __init__(
        self,
        roots: Iterable[Path],
        on_activity: Callable[[], None],
        ignored_dirs: frozenset[str] = DEFAULT_IGNORED_DIRS,
        ignored_files: Iterable[Path] = (),
    ) -> None:
        self.roots = [Path(root) for root in roots]
        self.on_activity = on_activity
        self.ignored_dirs = ignored_dirs
        self.ignored_files = {Path(p).resolve() for p in ignored_files}
        self._snapshot: Optional[Snapshot] = None

    def snapshot(self) -> Snapshot:
        result: Snapshot = {}
        for root in self.roots:
            if root.is_file():
                self._stat_into(result, root)
                continue
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames[:] = [d for d in dirnames if d not in self.ignored_dirs]
                for name in filenames:
                    self._stat_into(result, Path(dirpath) / name)
        return result

    def _stat_into(self, result: Snapshot, path: Path) -> None:
        if self.ignored_files and path.resolve() in self.ignored_files:
            return
        try:
            result[path] = path.stat().st_mtime_ns
        except OSError:
            # Removed between listing and stat, or unreadable.
            pass

    def poll(self) -> bool:
        """Take a new snapshot; return True if activity was reported."""
        current = self.snapshot()
        previous = self._snapshot
        self._snapshot = current
        if previous is None:
            logger.debug("Watching %d files under %s", len(current), self.roots)
            return False
        if current == previous:
            return False
        logger.debug("Workspace change detected.")
        self.on_activity()
        return True
