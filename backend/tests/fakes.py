"""
Test doubles for the watcher collaborators.

Requires Python 3.11+.
"""

import asyncio
from collections.abc import Callable
from typing import Any

from watcher.coordinator import Emit
from watcher.options import WatchOptions


class FakeWatcher:
    """External watcher double; tests push events through `emit`."""

    def __init__(self, options: WatchOptions, emit: Emit) -> None:
        self.options = options
        self.emit = emit
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


class FakeBuilder:
    """Builder double returning a fixed duration or raising."""

    def __init__(self, total_time: int = 0, error: Exception | None = None) -> None:
        self.total_time = total_time
        self.error = error
        self.calls = 0

    async def build(self) -> int:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.total_time


async def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll until predicate() is true or fail after timeout seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.01)


async def exec_ok(command: Any) -> str:
    return ""


async def exec_fail(command: Any) -> str:
    raise OSError("command not found")


class BlockingBuilder:
    """Builder double that waits until released; tests use it to stop mid-build."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def build(self) -> int:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return 0
