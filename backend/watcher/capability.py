"""
Rebuild Watch Capability Check.

Checks whether the optional native watch daemon can be used on this host.
Requires Python 3.11+.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from utils.logger import get_logger
from watcher.exceptions import CommandFailedError

logger = get_logger(__name__)

ExecCommand = Callable[[Sequence[str]], Awaitable[str]]

DEFAULT_DAEMON_COMMAND = ("watchman", "version")


async def run_command(command: Sequence[str], cwd: str | None = None) -> str:
    """
    Run a command and wait for it to finish.

    The process is killed if the caller is cancelled while it runs.

    Args:
        command: Program and arguments
        cwd: Working directory for the process

    Returns:
        Combined stdout/stderr output

    Raises:
        OSError: If the program cannot be executed
        CommandFailedError: If the process exits with a non-zero status
    """
    process = await asyncio.create_subprocess_exec(
        *command,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
    )
    try:
        stdout, _ = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise
    output = stdout.decode("utf-8", errors="replace")

    if process.returncode != 0:
        raise CommandFailedError(list(command), process.returncode, output)
    return output


async def native_daemon_available(
    exec_command: ExecCommand = run_command,
    command: Sequence[str] = DEFAULT_DAEMON_COMMAND,
) -> bool:
    """
    Check that the native watch daemon answers its version command.

    A missing binary and a failing daemon are both reported as False.
    """
    try:
        await exec_command(list(command))
    except Exception as e:
        logger.debug("native_daemon_unavailable", command=list(command), error=str(e))
        return False

    logger.debug("native_daemon_available", command=list(command))
    return True
