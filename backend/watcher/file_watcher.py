"""
Rebuild Watch File Watcher.

Watchdog-backed external watcher: detects project changes, runs the
build and reports `change` / `error` events to the coordinator.
Requires Python 3.11+.
"""

import asyncio
import fnmatch
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler, FileSystemMovedEvent
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from reporting.formatter import BuildError
from utils.config import get_settings
from utils.logger import LoggerMixin
from watcher.builder import CommandBuilder
from watcher.coordinator import CHANGE, ERROR, Emit
from watcher.debouncer import Debouncer
from watcher.exceptions import BuildFailedError, WatcherStartupError
from watcher.options import WatchOptions


class ProjectChangeHandler(FileSystemEventHandler, LoggerMixin):
    """
    Forwards file events to the debouncer.

    Directory events and ignored paths are dropped.
    """

    def __init__(
        self,
        debouncer: Debouncer,
        root_path: Path | None = None,
        ignore_patterns: Sequence[str] | None = None,
        verbose: bool = False,
    ) -> None:
        super().__init__()
        self._debouncer = debouncer
        self._root_path = root_path
        self._ignore_patterns = list(ignore_patterns or [])
        self._verbose = verbose

    def should_ignore(self, path: str) -> bool:
        """Check if a path, relative to the watched root, should be ignored."""
        candidate = Path(path)
        if self._root_path is not None and candidate.is_relative_to(self._root_path):
            candidate = candidate.relative_to(self._root_path)
        path = str(candidate)
        parts = candidate.parts
        for pattern in self._ignore_patterns:
            if fnmatch.fnmatch(path, pattern):
                return True
            if any(fnmatch.fnmatch(part, pattern) for part in parts):
                return True
        return False

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return

        paths = [event.src_path]
        if isinstance(event, FileSystemMovedEvent):
            paths.append(event.dest_path)

        for raw in paths:
            path = raw.decode() if isinstance(raw, bytes) else raw
            if not path or self.should_ignore(path):
                continue
            if self._verbose:
                self.log.info("file_changed", path=path, change_type=event.event_type)
            self._debouncer.debounce(Path(path), event.event_type)


class FileWatcher(LoggerMixin):
    """
    Watches a project directory and rebuilds it on every change.

    The observer is picked from WatchOptions: watchdog's PollingObserver
    when polling is selected, the platform-native Observer otherwise.
    Builds never overlap; each finished build emits exactly one event.
    """

    def __init__(
        self,
        root_path: Path,
        options: WatchOptions,
        emit: Emit,
        builder: CommandBuilder,
        debounce_delay_ms: int | None = None,
        ignore_patterns: Sequence[str] | None = None,
        recursive: bool | None = None,
        poll_interval_s: float | None = None,
        build_on_start: bool = True,
    ) -> None:
        """
        Initialize the file watcher.

        Args:
            root_path: Project directory to watch
            options: Resolved watch options
            emit: Event callback, called as emit("change" | "error", payload)
            builder: Runs one build
            debounce_delay_ms: Quiet period before rebuilding
            ignore_patterns: Glob patterns to ignore
            recursive: Whether to watch subdirectories
            poll_interval_s: Scan interval for the polling observer
            build_on_start: Run a build as soon as watching starts

        Raises:
            WatcherStartupError: If root_path is not a directory
        """
        settings = get_settings().watcher

        if not root_path.is_dir():
            raise WatcherStartupError(f"Cannot watch {root_path}: not a directory")

        self._root_path = root_path
        self._options = options
        self._emit = emit
        self._builder = builder
        self._recursive = settings.recursive if recursive is None else recursive
        self._poll_interval = poll_interval_s or settings.poll_interval_s
        self._build_on_start = build_on_start
        self._ignore_patterns = list(
            settings.ignore_patterns if ignore_patterns is None else ignore_patterns
        )

        delay = settings.debounce_delay_ms if debounce_delay_ms is None else debounce_delay_ms
        self._debouncer = Debouncer(delay_ms=delay, callback=self._on_changes)
        self._handler = ProjectChangeHandler(
            debouncer=self._debouncer,
            root_path=root_path,
            ignore_patterns=self._ignore_patterns,
            verbose=options.verbose,
        )

        self._observer: BaseObserver | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._build_lock: asyncio.Lock | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._running = False

    def _make_observer(self) -> BaseObserver:
        if self._options.use_polling:
            return PollingObserver(timeout=self._poll_interval)
        if self._options.use_native_daemon:
            self.log.info("native_daemon_available", backend="platform")
        return Observer()

    def start(self) -> None:
        """
        Start watching. Must be called from the running event loop.

        Raises:
            WatcherStartupError: If the observer cannot be scheduled
        """
        if self._running:
            return

        self._loop = asyncio.get_running_loop()
        self._build_lock = asyncio.Lock()

        observer = self._make_observer()
        try:
            observer.schedule(self._handler, str(self._root_path), recursive=self._recursive)
            observer.start()
        except OSError as e:
            raise WatcherStartupError(f"Cannot watch {self._root_path}: {e}") from e

        self._observer = observer
        self._running = True

        self.log.info(
            "file_watcher_started",
            path=str(self._root_path),
            observer=type(observer).__name__,
            recursive=self._recursive,
        )

        if self._build_on_start:
            self._schedule_rebuild([])

    def stop(self) -> None:
        """Stop watching and drop pending changes."""
        if not self._running:
            return

        self._running = False
        self._debouncer.clear()

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        for task in list(self._tasks):
            task.cancel()

        self.log.info("file_watcher_stopped")

    def _on_changes(self, changed: list[Path]) -> None:
        """Debouncer callback; runs on the timer thread."""
        loop = self._loop
        if not self._running or loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._schedule_rebuild, changed)

    def _schedule_rebuild(self, changed: list[Path]) -> None:
        """Start a rebuild task on the loop; stop() cancels it."""
        if not self._running or self._loop is None:
            return
        task = self._loop.create_task(self._rebuild(changed))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _rebuild(self, changed: list[Path]) -> None:
        """Run one build and emit its outcome."""
        if not self._running or self._build_lock is None:
            return

        async with self._build_lock:
            if not self._running:
                return

            self.log.debug("rebuild_started", changed=len(changed))
            try:
                total_time = await self._builder.build()
            except BuildFailedError as e:
                self._emit(ERROR, e.error)
            except Exception as e:
                self._emit(ERROR, BuildError(message=str(e)))
            else:
                self._emit(CHANGE, {"total_time": total_time})

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    @property
    def pending_count(self) -> int:
        """Get number of pending changes."""
        return self._debouncer.pending_count


def create_watcher_factory(
    root_path: Path,
    builder: CommandBuilder,
    **kwargs: Any,
) -> Callable[[WatchOptions, Emit], FileWatcher]:
    """
    Create a watcher factory for WatchCoordinator.

    Args:
        root_path: Project directory to watch
        builder: Builder run on every change
        **kwargs: Extra FileWatcher arguments

    Returns:
        Factory building a FileWatcher from resolved options
    """

    def factory(options: WatchOptions, emit: Emit) -> FileWatcher:
        return FileWatcher(root_path=root_path, options=options, emit=emit, builder=builder, **kwargs)

    return factory
