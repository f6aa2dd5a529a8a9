#!/usr/bin/env python3
"""
Rebuild Watch CLI.

Watches a project directory, rebuilds it on every change and reports
each outcome.
Requires Python 3.11+.

Usage:
    python scripts/watch_project.py /path/to/project --command "make" --watcher polling
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from reporting.analytics import LogAnalytics, NullAnalytics
from reporting.ui import ConsoleUI
from utils.config import get_settings
from utils.logger import configure_logging, get_logger
from watcher.builder import CommandBuilder
from watcher.coordinator import WatchCoordinator
from watcher.exceptions import WatchError
from watcher.file_watcher import create_watcher_factory
from watcher.options import OptionsResolver


async def watch_project(
    root_path: Path,
    command: str,
    watcher: str,
    verbose: bool,
    analytics_enabled: bool,
) -> None:
    """
    Run a watch session until interrupted.

    Args:
        root_path: Project directory
        command: Build command run on every change
        watcher: "events" or "polling"
        verbose: Verbose watcher output
        analytics_enabled: Whether analytics are emitted
    """
    settings = get_settings()

    resolver = OptionsResolver(
        config={"watcher": watcher},
        verbose=verbose,
        daemon_command=settings.watcher.native_daemon_command,
    )
    builder = CommandBuilder(command, cwd=settings.build.cwd or root_path)
    coordinator = WatchCoordinator(
        ui=ConsoleUI(),
        analytics=LogAnalytics() if analytics_enabled else NullAnalytics(),
        watcher_factory=create_watcher_factory(root_path, builder),
        resolver=resolver,
    )

    await coordinator.start()
    try:
        await coordinator.wait_stopped()
    finally:
        await coordinator.stop()


def main() -> None:
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Rebuild a project whenever its files change",
    )
    parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=Path.cwd(),
        help="Project directory to watch",
    )
    parser.add_argument(
        "--command",
        default=settings.build.command,
        help=f"Build command (default: {settings.build.command})",
    )
    parser.add_argument(
        "--watcher",
        default=settings.watcher.strategy,
        choices=["events", "polling"],
        help="Change notification strategy",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=settings.watcher.verbose,
        help="Verbose output",
    )
    parser.add_argument(
        "--no-analytics",
        action="store_true",
        help="Disable analytics",
    )

    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else None)
    logger = get_logger("watch_project")

    root_path = args.path.resolve()
    logger.info("watch_requested", path=str(root_path), command=args.command)

    try:
        asyncio.run(
            watch_project(
                root_path=root_path,
                command=args.command,
                watcher=args.watcher,
                verbose=args.verbose,
                analytics_enabled=settings.analytics.enabled and not args.no_analytics,
            )
        )
    except KeyboardInterrupt:
        pass
    except WatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
