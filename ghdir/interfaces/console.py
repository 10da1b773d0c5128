"""
Console presentation for the command line: rich panels or plain lines.
"""

from typing import Iterable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)


_STYLES = {
    "info": ("blue", "ℹ"),
    "success": ("green", "✓"),
    "warning": ("yellow", "⚠"),
    "error": ("red", "✗"),
}


class ConsoleReporter:
    """Prints user-facing messages, boxed unless ``plain`` is set."""

    def __init__(self, plain: bool = False, console: Optional[Console] = None):
        self.plain = plain
        self.console = console or Console(stderr=True)

    def _emit(self, kind: str, message: str, boxed: bool) -> None:
        color, symbol = _STYLES[kind]
        if boxed and not self.plain:
            self.console.print(Panel(f"[{color}]{message}[/{color}]", border_style=color, expand=False))
        else:
            self.console.print(f"[{color}]{symbol} {message}[/{color}]")

    def info(self, message: str, boxed: bool = False) -> None:
        self._emit("info", message, boxed)

    def success(self, message: str, boxed: bool = False) -> None:
        self._emit("success", message, boxed)

    def warning(self, message: str, boxed: bool = False) -> None:
        self._emit("warning", message, boxed)

    def error(self, message: str, boxed: bool = False) -> None:
        self._emit("error", message, boxed)

    def summary(self, lines: Iterable[str], title: str = "Summary") -> None:
        lines = list(lines)
        if self.plain:
            self.success(", ".join(lines))
            return
        self.console.print(
            Panel("\n".join(lines), title=title, border_style="cyan", expand=False)
        )

    def progress(self) -> Progress:
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )


__all__ = [
    "ConsoleReporter",
]
