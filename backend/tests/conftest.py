"""
Rebuild Watch Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import pytest

from fakes import FakeWatcher, exec_fail
from reporting.analytics import RecordingAnalytics
from reporting.ui import MemoryUI
from watcher.coordinator import Emit, WatchCoordinator
from watcher.options import OptionsResolver, WatchOptions


@pytest.fixture
def ui() -> MemoryUI:
    """In-memory output sink."""
    return MemoryUI()


@pytest.fixture
def analytics() -> RecordingAnalytics:
    """Analytics sink that records payloads."""
    return RecordingAnalytics()


@pytest.fixture
def watchers() -> list[FakeWatcher]:
    """Every FakeWatcher the coordinator fixture created."""
    return []


@pytest.fixture
def coordinator(ui: MemoryUI, analytics: RecordingAnalytics, watchers: list[FakeWatcher]) -> WatchCoordinator:
    """Coordinator wired to fakes, events strategy, daemon unavailable."""

    def factory(options: WatchOptions, emit: Emit) -> FakeWatcher:
        watcher = FakeWatcher(options, emit)
        watchers.append(watcher)
        return watcher

    return WatchCoordinator(
        ui=ui,
        analytics=analytics,
        watcher_factory=factory,
        resolver=OptionsResolver(exec_command=exec_fail),
    )
