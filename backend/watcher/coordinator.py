"""
Rebuild Watch Coordinator.

Owns the external watcher's event stream, reports every rebuild outcome
to the user and to analytics, and tracks whether the project is
currently failing to build.
Requires Python 3.11+.
"""

import asyncio
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

from reporting.analytics import Analytics
from reporting.formatter import (
    BuildError,
    ChangeEvent,
    Color,
    colorize,
    format_change_report,
    format_error_report,
)
from reporting.ui import UI
from utils.logger import LoggerMixin
from watcher.exceptions import WatchError
from watcher.options import OptionsResolver, WatchOptions

CHANGE = "change"
ERROR = "error"

Emit = Callable[[str, Any], None]


class ExternalWatcher(Protocol):
    """File watcher driving rebuilds; reports through the emit callback."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


WatcherFactory = Callable[[WatchOptions, Emit], ExternalWatcher]


class WatchState(str, Enum):
    """Lifecycle states of a watch session."""

    IDLE = "idle"
    WATCHING = "watching"
    WATCHING_WITH_ERROR = "watching_with_error"
    STOPPED = "stopped"


class WatchCoordinator(LoggerMixin):
    """
    Event-driven coordinator between the file watcher and the user.

    Events may be emitted from any thread. They are funneled through a
    single asyncio queue and handled one at a time, in delivery order,
    by one consumer task, so `had_error` needs no locking.

    A successful rebuild always clears the error flag: the reported state
    reflects only the latest outcome.
    """

    def __init__(
        self,
        ui: UI,
        analytics: Analytics,
        watcher_factory: WatcherFactory,
        resolver: OptionsResolver | None = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            ui: Output sink for formatted lines
            analytics: Analytics sink
            watcher_factory: Builds the external watcher from resolved options
            resolver: Build-options resolver (defaults to events, not verbose)
        """
        self.ui = ui
        self.analytics = analytics
        self.resolver = resolver or OptionsResolver()
        self._watcher_factory = watcher_factory

        self.had_error = False
        self.options: WatchOptions | None = None
        self._state = WatchState.IDLE
        self._watcher: ExternalWatcher | None = None
        self._queue: asyncio.Queue[tuple[str, Any]] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._stopped = asyncio.Event()

    @property
    def state(self) -> WatchState:
        """Current lifecycle state."""
        if self._state is WatchState.WATCHING and self.had_error:
            return WatchState.WATCHING_WITH_ERROR
        return self._state

    async def start(self) -> None:
        """
        Resolve options, start the external watcher and begin consuming events.

        Raises:
            WatchError: If the session was already started
            Exception: Whatever the watcher factory or watcher start raises
        """
        if self._state is not WatchState.IDLE:
            raise WatchError(f"Cannot start a watch session in state {self._state.value}")

        self.options = await self.resolver.build_options()

        self._loop = asyncio.get_running_loop()
        queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue()
        self._queue = queue

        watcher = self._watcher_factory(self.options, self.emit)
        watcher.start()
        self._watcher = watcher

        self._consumer = asyncio.create_task(self._consume(queue))
        self._state = WatchState.WATCHING

        self.log.info(
            "watch_started",
            use_polling=self.options.use_polling,
            use_native_daemon=self.options.use_native_daemon,
            verbose=self.options.verbose,
        )

    async def stop(self) -> None:
        """Stop watching. Idempotent; a no-op before start() has completed."""
        if self._state is not WatchState.WATCHING:
            return

        self._state = WatchState.STOPPED

        watcher, self._watcher = self._watcher, None
        consumer, self._consumer = self._consumer, None
        try:
            if watcher is not None:
                watcher.stop()
        finally:
            if consumer is not None:
                consumer.cancel()
                try:
                    await consumer
                except asyncio.CancelledError:
                    pass
            self._stopped.set()
            self.log.info("watch_stopped")

    async def wait_stopped(self) -> None:
        """Block until stop() has run."""
        await self._stopped.wait()

    def emit(self, name: str, payload: Any) -> None:
        """
        Deliver a watcher event. Safe to call from any thread.

        Events arriving when the coordinator is not watching are dropped.
        """
        if self._state is not WatchState.WATCHING or self._loop is None or self._queue is None:
            self.log.debug("event_ignored", event_name=name, state=self._state.value)
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._queue.put_nowait((name, payload))
        else:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, (name, payload))

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        if self._queue is not None and self._consumer is not None:
            await self._queue.join()

    async def _consume(self, queue: asyncio.Queue[tuple[str, Any]]) -> None:
        """Single consumer: handles queued events one at a time."""
        while True:
            name, payload = await queue.get()
            try:
                self._dispatch(name, payload)
            except Exception:
                self.log.exception("watcher_event_failed", event_name=name)
            finally:
                queue.task_done()

    def _dispatch(self, name: str, payload: Any) -> None:
        if self._state is not WatchState.WATCHING:
            return

        if name == CHANGE:
            self.did_change(ChangeEvent.from_payload(payload))
        elif name == ERROR:
            self.did_error(BuildError.from_payload(payload))
        else:
            self.log.warning("unknown_watcher_event", event_name=name)

    def did_change(self, event: ChangeEvent) -> None:
        """Report a successful rebuild and clear the error flag."""
        report = format_change_report(event)

        self.analytics.track(report.analytics_event)
        self.analytics.track_timing(report.timing_event)

        self.ui.write_line("")
        self.ui.write_line(report.line)

        self.had_error = False
        self.log.debug("rebuild_succeeded", total_ms=event.total_millis)

    def did_error(self, error: BuildError) -> None:
        """Report a failed build; the session keeps watching."""
        report = format_error_report(error)

        self.analytics.track_error(report.analytics_event)

        for line in report.lines:
            self.ui.write_line(line)

        if error.stack and self.options is not None and self.options.verbose:
            self.ui.write_line(colorize(error.stack, Color.MUTED))

        self.had_error = True
        self.log.debug("rebuild_failed", file=error.file, message=error.message)
