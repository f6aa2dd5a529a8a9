"""
Tests for the command builder.

Requires Python 3.11+.
"""

import asyncio
import shutil

import pytest

from fakes import wait_for
from reporting.formatter import BuildError
from watcher.builder import CommandBuilder, parse_build_error
from watcher.capability import run_command
from watcher.exceptions import BuildFailedError, CommandFailedError


class TestParseBuildError:
    """Test cases for parse_build_error."""

    def test_file_line_column(self):
        """file:line:col prefixes give a full location."""
        output = "compiling...\nsrc/app.js:24:80: Unexpected token\n"
        error = parse_build_error(output, 1)

        assert error.file == "src/app.js"
        assert error.line == 24
        assert error.col == 80
        assert error.message == "Unexpected token"
        assert error.stack == output

    def test_file_line(self):
        """file:line prefixes give a location without column."""
        error = parse_build_error("main.c:7: error: missing ';'", 2)

        assert error.file == "main.c"
        assert error.line == 7
        assert error.col is None
        assert error.message == "error: missing ';'"

    def test_no_location_uses_last_line(self):
        """Output without a location uses its last line as message."""
        error = parse_build_error("step 1\nstep 2 failed\n", 1)

        assert error == BuildError(message="step 2 failed", stack="step 1\nstep 2 failed\n")

    def test_make_trailer_is_not_a_location(self):
        """make's trailing error line is not taken as a location."""
        error = parse_build_error("make: *** [Makefile:3: all] Error 1", 2)

        assert error.file is None
        assert error.message == "make: *** [Makefile:3: all] Error 1"

    def test_empty_output(self):
        """Empty output still yields a message."""
        error = parse_build_error("", 3)

        assert error.message == "Build command exited with status 3"
        assert error.stack is None


class TestCommandBuilder:
    """Test cases for CommandBuilder.build."""

    @pytest.mark.asyncio
    async def test_success_returns_duration(self):
        """A zero exit returns a positive duration in nanoseconds."""
        seen = []

        async def exec_ok(command):
            seen.append(command)
            return ""

        builder = CommandBuilder("npm run build -- --prod", exec_command=exec_ok)
        elapsed = await builder.build()

        assert elapsed >= 0
        assert seen == [["npm", "run", "build", "--", "--prod"]]

    @pytest.mark.asyncio
    async def test_failure_raises_build_error(self):
        """A non-zero exit raises BuildFailedError parsed from the output."""
        async def exec_fail(command):
            raise CommandFailedError(command, 1, "lib/a.py:3:1: bad indent\n")

        builder = CommandBuilder("make", exec_command=exec_fail)

        with pytest.raises(BuildFailedError) as exc_info:
            await builder.build()

        assert exc_info.value.error.file == "lib/a.py"
        assert exc_info.value.error.line == 3
        assert str(exc_info.value) == "bad indent"

    @pytest.mark.asyncio
    async def test_missing_program(self):
        """An unknown program raises BuildFailedError."""
        async def exec_missing(command):
            raise FileNotFoundError(2, "No such file or directory", command[0])

        builder = CommandBuilder("nonexistent-build-tool", exec_command=exec_missing)

        with pytest.raises(BuildFailedError) as exc_info:
            await builder.build()

        assert "nonexistent-build-tool" in exc_info.value.error.message


@pytest.mark.skipif(shutil.which("sleep") is None, reason="needs the sleep utility")
class TestRunCommand:
    """Test cases for run_command."""

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self):
        """A failing command raises CommandFailedError with its status."""
        with pytest.raises(CommandFailedError) as exc_info:
            await run_command(["sh", "-c", "echo broken; exit 2"])

        assert exc_info.value.returncode == 2
        assert "broken" in exc_info.value.output

    @pytest.mark.asyncio
    async def test_cancel_kills_process(self, monkeypatch: pytest.MonkeyPatch):
        """Cancelling the caller kills the child process."""
        processes = []
        create = asyncio.create_subprocess_exec

        async def recording_exec(*args, **kwargs):
            process = await create(*args, **kwargs)
            processes.append(process)
            return process

        monkeypatch.setattr(asyncio, "create_subprocess_exec", recording_exec)

        task = asyncio.create_task(run_command(["sleep", "30"]))
        await wait_for(lambda: bool(processes))
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert processes[0].returncode is not None
