"""
Rebuild Watch Analytics Sinks.

Requires Python 3.11+.
"""

from typing import Any, Protocol

from utils.logger import LoggerMixin


class Analytics(Protocol):
    """Analytics backend consumed by the watch coordinator."""

    def track(self, event: dict[str, str]) -> None: ...

    def track_timing(self, event: dict[str, Any]) -> None: ...

    def track_error(self, event: dict[str, str]) -> None: ...


class LogAnalytics(LoggerMixin):
    """Emits analytics payloads as structured log events."""

    def track(self, event: dict[str, str]) -> None:
        self.log.info("analytics_track", **event)

    def track_timing(self, event: dict[str, Any]) -> None:
        self.log.info("analytics_timing", **event)

    def track_error(self, event: dict[str, str]) -> None:
        self.log.info("analytics_error", **event)


class NullAnalytics:
    """Discards everything; used when analytics are disabled."""

    def track(self, event: dict[str, str]) -> None:
        pass

    def track_timing(self, event: dict[str, Any]) -> None:
        pass

    def track_error(self, event: dict[str, str]) -> None:
        pass


class RecordingAnalytics:
    """Keeps every payload it receives."""

    def __init__(self) -> None:
        self.tracks: list[dict[str, str]] = []
        self.track_timings: list[dict[str, Any]] = []
        self.track_errors: list[dict[str, str]] = []

    def track(self, event: dict[str, str]) -> None:
        self.tracks.append(dict(event))

    def track_timing(self, event: dict[str, Any]) -> None:
        self.track_timings.append(dict(event))

    def track_error(self, event: dict[str, str]) -> None:
        self.track_errors.append(dict(event))
