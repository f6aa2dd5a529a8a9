"""
Rebuild Watch Exceptions.

Requires Python 3.11+.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reporting.formatter import BuildError


class WatchError(Exception):
    """Base class for watch session errors."""


class CommandFailedError(WatchError):
    """A subprocess exited with a non-zero status."""

    def __init__(self, command: list[str] | str, returncode: int, output: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(f"Command {command!r} exited with status {returncode}")


class BuildFailedError(WatchError):
    """A rebuild failed; carries the structured build error."""

    def __init__(self, error: "BuildError") -> None:
        self.error = error
        super().__init__(error.message)


class WatcherStartupError(WatchError):
    """The external file watcher could not be constructed or started."""
