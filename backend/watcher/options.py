"""
Rebuild Watch Build-Options Resolver.

Resolves the options bundle handed to the external file watcher.
Requires Python 3.11+.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from utils.logger import LoggerMixin
from watcher.capability import DEFAULT_DAEMON_COMMAND, ExecCommand, native_daemon_available, run_command
from watcher.strategy import polling


@dataclass(frozen=True, slots=True)
class WatchOptions:
    """Immutable options bundle for the external file watcher."""

    use_polling: bool
    verbose: bool
    use_native_daemon: bool

    def __post_init__(self) -> None:
        if self.use_polling and self.use_native_daemon:
            raise ValueError("polling and the native daemon are mutually exclusive")


class OptionsResolver(LoggerMixin):
    """
    Builds WatchOptions from the watcher config, verbosity and a daemon availability check.

    `config` and `verbose` are plain attributes so callers can change them
    between sessions.
    """

    def __init__(
        self,
        config: Any = None,
        verbose: bool = False,
        exec_command: ExecCommand = run_command,
        daemon_command: Sequence[str] = DEFAULT_DAEMON_COMMAND,
    ) -> None:
        self.config = config
        self.verbose = verbose
        self.exec_command = exec_command
        self.daemon_command = tuple(daemon_command)

    def polling(self) -> bool:
        """Check whether the current config selects the polling strategy."""
        return polling(self.config)

    async def build_options(self) -> WatchOptions:
        """
        Resolve the watch options.

        Never raises: a failed daemon check resolves to
        `use_native_daemon=False`. The check is skipped entirely
        when polling is selected.
        """
        verbose = bool(self.verbose)

        if self.polling():
            options = WatchOptions(use_polling=True, verbose=verbose, use_native_daemon=False)
        else:
            try:
                available = await native_daemon_available(self.exec_command, self.daemon_command)
            except Exception as e:
                self.log.debug("native_daemon_check_failed", error=str(e))
                available = False
            options = WatchOptions(
                use_polling=False,
                verbose=verbose,
                use_native_daemon=available,
            )

        self.log.debug(
            "watch_options_resolved",
            use_polling=options.use_polling,
            verbose=options.verbose,
            use_native_daemon=options.use_native_daemon,
        )
        return options
