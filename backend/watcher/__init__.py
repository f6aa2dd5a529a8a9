"""
Rebuild Watch Watcher Package.

Strategy selection, build options and the watch coordinator.
Requires Python 3.11+.
"""

from watcher.capability import native_daemon_available, run_command
from watcher.coordinator import WatchCoordinator, WatchState
from watcher.options import OptionsResolver, WatchOptions
from watcher.strategy import polling

__all__ = [
    "WatchCoordinator",
    "WatchState",
    "OptionsResolver",
    "WatchOptions",
    "native_daemon_available",
    "run_command",
    "polling",
]
