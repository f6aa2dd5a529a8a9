"""
Rebuild Watch Output Sinks.

Terminal output for build reports.
Requires Python 3.11+.
"""

import os
from typing import Protocol

from rich.console import Console
from rich.text import Text


class UI(Protocol):
    """Output sink accepting pre-colored, pre-formatted lines."""

    def write_line(self, text: str) -> None: ...


class ConsoleUI:
    """Writes rich-markup lines to the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)

    def write_line(self, text: str) -> None:
        """Render markup and append the platform line separator."""
        self.console.print(text, end=os.linesep, markup=True, highlight=False)


class MemoryUI:
    """Collects output in memory; used for headless runs and tests."""

    def __init__(self) -> None:
        self.output = ""

    def write_line(self, text: str) -> None:
        self.output += text + os.linesep

    @property
    def lines(self) -> list[str]:
        """Written lines, without the trailing separator."""
        return self.output.split(os.linesep)[:-1]

    @property
    def plain_output(self) -> str:
        """Output with rich markup stripped."""
        return Text.from_markup(self.output).plain
