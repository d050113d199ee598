"""User-facing notifications: error messages, info lines and a status spinner.

The CLI reports every outcome through a Notifier, so the same flow can be
driven by tests with a recording notifier instead of a terminal.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from rich.console import Console
from rich.markup import escape

OPENING_STATUS = "Opening Playwright Trace Viewer…"


class Notifier(Protocol):
    def error(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def status(self, message: str) -> AbstractContextManager[None]: ...


class ConsoleNotifier:
    """Rich-based notifier.

    Errors go to stderr so stdout stays clean for ``--json`` output.
    """

    def __init__(self, quiet: bool = False):
        self.quiet = quiet
        self.console = Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]Error:[/red] {escape(message)}", markup=True, soft_wrap=True)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(message, markup=False, soft_wrap=True)

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Show a spinner for the duration of the block, cleared on any exit."""
        if self.quiet:
            yield
            return
        with self.err_console.status(message):
            yield
