"""Console logging built on rich."""

import os
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}


def _markup(style: str) -> Callable[[Any], str]:
    return lambda value: f"[{style}]{escape(str(value))}[/{style}]"


# Markup helpers for the names that show up in log lines.
color_palette: Dict[str, Callable[[Any], str]] = {
    "table": _markup("cyan"),
    "column": _markup("green"),
    "keyword": _markup("bold magenta"),
    "param": _markup("yellow"),
    "stage": _markup("bold red"),
    "dim": _markup("dim"),
}


class Logger:
    """Leveled console logger with sections, timers and indentation."""

    def __init__(self, console: Optional[Console] = None, level: Optional[str] = None):
        self.console = console or Console(stderr=True, highlight=False)
        self.level = (level or os.environ.get("QUERYFORGE_LOG_LEVEL", "INFO")).upper()
        self._indent = 0

    def set_level(self, level: str) -> None:
        self.level = level.upper()

    def _enabled(self, level: str) -> bool:
        return LEVELS[level] >= LEVELS.get(self.level, LEVELS["INFO"])

    def _emit(self, level: str, prefix: str, message: str) -> None:
        if not self._enabled(level):
            return
        pad = "  " * self._indent
        self.console.print(f"{pad}{prefix} {message}")

    def debug(self, message: str) -> None:
        self._emit("DEBUG", "[dim]·[/dim]", message)

    def info(self, message: str) -> None:
        self._emit("INFO", "[blue]i[/blue]", message)

    def success(self, message: str) -> None:
        self._emit("INFO", "[green]✓[/green]", message)

    def warn(self, message: str) -> None:
        self._emit("WARN", "[yellow]![/yellow]", message)

    def error(self, message: str) -> None:
        self._emit("ERROR", "[red]✗[/red]", message)

    def section(self, title: str) -> None:
        if self._enabled("INFO"):
            self.console.rule(f"[bold]{escape(title)}[/bold]")

    @contextmanager
    def indented(self) -> Iterator[None]:
        self._indent += 1
        try:
            yield
        finally:
            self._indent -= 1

    @contextmanager
    def timed(self, label: str) -> Iterator[None]:
        """Log how long the wrapped block took."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = (time.perf_counter() - start) * 1000
            self.info(f"{escape(label)} [dim]({elapsed:.1f} ms)[/dim]")

    def table(self, headers: List[str], rows: List[List[Any]]) -> None:
        if not self._enabled("INFO"):
            return
        grid = Table(show_edge=False, padding=(0, 1))
        for header in headers:
            grid.add_column(header, style="cyan")
        for row in rows:
            grid.add_row(*(escape(str(cell)) for cell in row))
        self.console.print(grid)


log = Logger()
