"""
Rebuild Watch Command Builder.

Runs the project's build command and turns failures into BuildErrors.
Requires Python 3.11+.
"""

import re
import shlex
import time
from pathlib import Path

from reporting.formatter import BuildError
from utils.logger import LoggerMixin
from watcher.exceptions import BuildFailedError, CommandFailedError
from watcher.capability import ExecCommand, run_command

# path/to/file.ext:12:5: message  or  path/to/file.ext:12: message
_LOCATION_RE = re.compile(
    r"^(?P<file>[^\s:][^:\n]*?):(?P<line>\d+)(?::(?P<col>\d+))?:?\s*(?P<message>.*)$",
    re.MULTILINE,
)


def parse_build_error(output: str, returncode: int | None = None) -> BuildError:
    """
    Extract a BuildError from build output.

    Uses the first `file:line[:col]` location found; otherwise the last
    non-empty output line becomes the message.
    """
    stack = output or None
    match = _LOCATION_RE.search(output)
    if match:
        return BuildError(
            message=match.group("message").strip() or output.strip(),
            file=match.group("file"),
            line=int(match.group("line")),
            col=int(match.group("col")) if match.group("col") else None,
            stack=stack,
        )

    lines = [line.strip() for line in output.splitlines() if line.strip()]
    if lines:
        message = lines[-1]
    elif returncode is not None:
        message = f"Build command exited with status {returncode}"
    else:
        message = "Build failed"
    return BuildError(message=message, stack=stack)


class CommandBuilder(LoggerMixin):
    """Runs a shell-style build command and times it."""

    def __init__(
        self,
        command: str,
        cwd: Path | None = None,
        exec_command: ExecCommand | None = None,
    ) -> None:
        self.command = command
        self.cwd = cwd
        self._exec_command = exec_command

    async def build(self) -> int:
        """
        Run the build once.

        Returns:
            Total build time in nanoseconds

        Raises:
            BuildFailedError: If the command cannot run or exits non-zero
        """
        argv = shlex.split(self.command)
        started = time.perf_counter_ns()

        try:
            if self._exec_command is not None:
                await self._exec_command(argv)
            else:
                await run_command(argv, cwd=str(self.cwd) if self.cwd else None)
        except CommandFailedError as e:
            raise BuildFailedError(parse_build_error(e.output, e.returncode)) from e
        except OSError as e:
            raise BuildFailedError(BuildError(message=str(e))) from e

        elapsed = time.perf_counter_ns() - started
        self.log.debug("build_finished", command=self.command, elapsed_ns=elapsed)
        return elapsed
