"""Host-side collaborators: the status line and user notifications."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import typer

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def info(self, message: str, *, modal: bool = False) -> None: ...

    def error(self, message: str) -> None: ...


class StatusBarItem:
    """A single-line status target with an icon label, tooltip and command."""

    def __init__(self, priority: int = 0) -> None:
        self.priority = priority
        self.tooltip: Optional[str] = None
        self.command: Optional[str] = None
        self.visible = False
        self.disposed = False
        self._text = ""

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, value: str) -> None:
        changed = value != self._text
        self._text = value
        if changed and self.visible:
            self.render()

    def show(self) -> None:
        self.visible = True
        self.render()

    def hide(self) -> None:
        self.visible = False

    def dispose(self) -> None:
        self.hide()
        self.disposed = True

    def render(self) -> None:
        """Draw the item; plain items keep their state only."""


class ConsoleStatusBar(StatusBarItem):
    """Redraws the status text in place on the terminal."""

    def render(self) -> None:
        if not self.visible:
            return
        typer.echo(f"\r{self.text}  ", nl=False)

    def dispose(self) -> None:
        if self.visible:
            typer.echo()
        super().dispose()


class ConsoleNotifier:
    def info(self, message: str, *, modal: bool = False) -> None:
        typer.echo(message)

    def error(self, message: str) -> None:
        typer.secho(message, fg=typer.colors.RED, err=True)


class LogNotifier:
    """Notifier for headless hosts; messages only reach the log."""

    def info(self, message: str, *, modal: bool = False) -> None:
        logger.info("%s", message)

    def error(self, message: str) -> None:
        logger.error("%s", message)
