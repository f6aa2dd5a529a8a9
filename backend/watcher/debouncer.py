"""
Rebuild Watch Debouncer.

Collapses bursts of file system events into a single rebuild trigger.
Requires Python 3.11+.
"""

import threading
from collections import Counter
from collections.abc import Callable
from pathlib import Path
from typing import Any

from utils.logger import LoggerMixin


class Debouncer(LoggerMixin):
    """
    Debounces rapid file changes.

    Accumulates changes from watchdog's observer thread and calls the
    callback, on the timer thread, once no new change has arrived for
    `delay_ms`. A path changed several times in one burst is reported once,
    with its latest change type.
    """

    def __init__(
        self,
        delay_ms: int = 100,
        callback: Callable[[list[Path]], Any] | None = None,
    ) -> None:
        """
        Initialize the debouncer.

        Args:
            delay_ms: Quiet period in milliseconds before firing
            callback: Called with the changed paths
        """
        self._delay = delay_ms / 1000.0
        self._callback = callback
        self._pending: dict[Path, str] = {}
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()

    def debounce(self, path: Path, change_type: str) -> None:
        """
        Record a change and restart the quiet-period timer.

        Args:
            path: Path to the changed file
            change_type: Type of change (created, modified, deleted, moved)
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()

            self._pending[path] = change_type

            self._timer = threading.Timer(self._delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _take_pending(self) -> dict[Path, str]:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            pending = self._pending
            self._pending = {}
        return pending

    def _fire(self) -> None:
        pending = self._take_pending()
        if not pending or self._callback is None:
            return

        self.log.debug(
            "processing_debounced_changes",
            count=len(pending),
            change_types=dict(Counter(pending.values())),
        )

        try:
            self._callback(list(pending))
        except Exception as e:
            self.log.error("debounce_callback_failed", error=str(e))

    def clear(self) -> None:
        """Drop all pending changes without firing."""
        dropped = self._take_pending()
        if dropped:
            self.log.debug("debounced_changes_dropped", count=len(dropped))

    @property
    def pending_count(self) -> int:
        """Get number of pending changes."""
        return len(self._pending)

    @property
    def pending_paths(self) -> list[Path]:
        """Get list of paths with pending changes."""
        return list(self._pending)
