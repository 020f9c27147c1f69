"""Terminal/report output shared by the three tools.

``ReportConsole`` prints colorized lines through rich and, when a report file is
attached, mirrors the same text without color codes into it (the scanner's
"tee" behaviour). Markup is always disabled so service names, log lines and
shell commands are printed verbatim.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence, TextIO

from rich.console import Console
from tabulate import tabulate

from finops_toolset.config import COLOR

RULE_WIDTH = 80

# severity -> (symbol, rich style)
_LEVELS = {
    "info": ("ℹ", "blue"),
    "success": ("✓", "green"),
    "warning": ("⚠", "yellow"),
    "error": ("✗", "red"),
}


def _make_console(file: Optional[TextIO], color: bool) -> Console:
    return Console(
        file=file,
        color_system="auto" if color else None,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def render_table(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Grid table, blanks for missing values."""
    return tabulate(
        [["" if v is None else v for v in row] for row in rows],
        headers=list(headers),
        tablefmt="grid",
        stralign="left",
        numalign="right",
    )


class ReportConsole:
    """Colorized console with an optional plain-text report mirror."""

    def __init__(
        self,
        *,
        stream: Optional[TextIO] = None,
        report: Optional[TextIO] = None,
        color: bool = COLOR,
    ) -> None:
        self._term = _make_console(stream, color)
        self._report: Optional[Console] = None
        if report is not None:
            self.attach(report)

    def attach(self, report: TextIO) -> None:
        """Mirror every following line into ``report`` (uncolored)."""
        self._report = _make_console(report, False)

    def line(self, text: str = "", style: Optional[str] = None) -> None:
        self._term.print(text, style=style, markup=False, highlight=False)
        if self._report is not None:
            self._report.print(text, markup=False, highlight=False)

    def blank(self) -> None:
        self.line("")

    def rule(self, char: str = "=", width: int = RULE_WIDTH, style: Optional[str] = None) -> None:
        self.line(char * width, style=style)

    def _level(self, level: str, message: str) -> None:
        symbol, style = _LEVELS[level]
        self.line(f"{symbol} {message}", style=style)

    def info(self, message: str) -> None:
        self._level("info", message)

    def success(self, message: str) -> None:
        self._level("success", message)

    def warning(self, message: str) -> None:
        self._level("warning", message)

    def error(self, message: str) -> None:
        self._level("error", message)

    def table(self, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
        self.line(render_table(headers, rows))
