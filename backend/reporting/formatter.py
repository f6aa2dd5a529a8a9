"""
Rebuild Watch Report Formatter.

Turns rebuild and build-error events into colored terminal lines
and analytics payloads.
Requires Python 3.11+.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rich.markup import escape

NANOS_PER_MILLI = 1_000_000

REBUILD_EVENT_NAME = "ember rebuild"
REBUILD_TIMING_CATEGORY = "rebuild"
REBUILD_TIMING_VARIABLE = "rebuild time"
REBUILD_TIMING_LABEL = "broccoli rebuild time"


class Color(str, Enum):
    """Semantic colors mapped to rich styles."""

    SUCCESS = "green"
    ERROR = "red"
    MUTED = "dim"


def colorize(text: str, color: Color) -> str:
    """Wrap text in rich markup for the given semantic color."""
    return f"[{color.value}]{escape(text)}[/{color.value}]"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A completed (re)build reported by the file watcher."""

    total_time: int  # nanoseconds

    def __post_init__(self) -> None:
        if self.total_time < 0:
            raise ValueError(f"total_time must be >= 0, got {self.total_time}")

    @classmethod
    def from_payload(cls, payload: "ChangeEvent | Mapping[str, Any]") -> "ChangeEvent":
        """Build from a watcher payload such as {"totalTime": 12344000000}."""
        if isinstance(payload, ChangeEvent):
            return payload
        total = payload.get("total_time", payload.get("totalTime", 0))
        return cls(total_time=int(total))

    @property
    def total_millis(self) -> int:
        """Whole milliseconds, truncated."""
        return self.total_time // NANOS_PER_MILLI


@dataclass(frozen=True, slots=True)
class BuildError:
    """A build failure, with best-effort source location."""

    message: str
    file: str | None = None
    line: int | None = None
    col: int | None = None
    stack: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "BuildError":
        """
        Normalize an error payload.

        Accepts a BuildError, a mapping (with `col` or `column`),
        or any exception-like object exposing `message`/`file`/`line`/`col`.
        """
        if isinstance(payload, BuildError):
            return payload

        if isinstance(payload, Mapping):
            get = payload.get
        else:
            def get(key: str, default: Any = None) -> Any:
                return getattr(payload, key, default)

        message = get("message")
        if message is None:
            message = str(payload) if isinstance(payload, BaseException) else ""

        col = get("col")
        if col is None:
            col = get("column")

        return cls(
            message=str(message),
            file=get("file"),
            line=get("line"),
            col=col,
            stack=get("stack"),
        )

    @property
    def location(self) -> str:
        """Location suffix; a column is only shown together with a line."""
        if self.line is None:
            return ""
        if self.col is None:
            return f" ({self.line})"
        return f" ({self.line}:{self.col})"


@dataclass(frozen=True, slots=True)
class ChangeReport:
    """Formatted output for a successful rebuild."""

    line: str
    analytics_event: dict[str, str]
    timing_event: dict[str, Any]


@dataclass(frozen=True, slots=True)
class ErrorReport:
    """Formatted output for a failed build."""

    lines: list[str]
    analytics_event: dict[str, str]


def format_change_report(event: ChangeEvent) -> ChangeReport:
    """
    Format a successful rebuild.

    Args:
        event: Change event carrying the rebuild duration in nanoseconds

    Returns:
        ChangeReport with the colored line and both analytics payloads
    """
    millis = event.total_millis
    return ChangeReport(
        line=colorize(f"Build successful - {millis}ms.", Color.SUCCESS),
        analytics_event={
            "name": REBUILD_EVENT_NAME,
            "message": f"broccoli rebuild time: {millis}ms",
        },
        timing_event={
            "category": REBUILD_TIMING_CATEGORY,
            "variable": REBUILD_TIMING_VARIABLE,
            "label": REBUILD_TIMING_LABEL,
            "value": millis,
        },
    )


def format_error_report(error: BuildError) -> ErrorReport:
    """
    Format a build error.

    The `File:` line is only emitted when the error names a file.
    The message line is always emitted unmodified. Analytics only
    receive the message, never the stack.
    """
    lines: list[str] = []
    if error.file:
        lines.append(colorize(f"File: {error.file}{error.location}", Color.ERROR))
    lines.append(colorize(error.message, Color.ERROR))

    return ErrorReport(lines=lines, analytics_event={"description": error.message})
