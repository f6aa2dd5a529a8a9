"""
Tests for the Report Formatter.

Requires Python 3.11+.
"""

import pytest

from reporting.formatter import (
    BuildError,
    ChangeEvent,
    Color,
    colorize,
    format_change_report,
    format_error_report,
)


def red(text: str) -> str:
    return colorize(text, Color.ERROR)


class TestChangeReport:
    """Test cases for format_change_report."""

    @pytest.fixture
    def report(self):
        return format_change_report(ChangeEvent(total_time=12344000000))

    def test_line(self, report):
        """The success line carries the duration in milliseconds."""
        assert report.line == "[green]Build successful - 12344ms.[/green]"

    def test_analytics_event(self, report):
        """The analytics event names the rebuild time."""
        assert report.analytics_event == {
            "name": "ember rebuild",
            "message": "broccoli rebuild time: 12344ms",
        }

    def test_timing_event(self, report):
        """The timing event carries the integer millisecond value."""
        assert report.timing_event == {
            "category": "rebuild",
            "variable": "rebuild time",
            "label": "broccoli rebuild time",
            "value": 12344,
        }

    def test_millis_truncate(self):
        """Durations are truncated, never rounded."""
        report = format_change_report(ChangeEvent(total_time=1_999_999))
        assert report.timing_event["value"] == 1
        assert "Build successful - 1ms." in report.line

    def test_zero_duration(self):
        """A zero duration formats as 0ms."""
        report = format_change_report(ChangeEvent(total_time=0))
        assert report.timing_event["value"] == 0

    def test_negative_duration_rejected(self):
        """Negative durations raise ValueError."""
        with pytest.raises(ValueError):
            ChangeEvent(total_time=-1)

    def test_from_watcher_payload(self):
        """Watcher payloads in either key style are accepted."""
        assert ChangeEvent.from_payload({"totalTime": 12344000000}).total_millis == 12344
        assert ChangeEvent.from_payload({"total_time": 5_000_000}).total_millis == 5


class TestErrorReport:
    """Test cases for format_error_report."""

    def test_file_only(self):
        """A file without a line shows just the file."""
        report = format_error_report(BuildError(file="someFile", message="buildFailed"))
        assert report.lines == [red("File: someFile"), red("buildFailed")]

    def test_file_with_line(self):
        """A line number is shown in parentheses."""
        report = format_error_report(BuildError(file="someFile", line=24, message="buildFailed"))
        assert report.lines == [red("File: someFile (24)"), red("buildFailed")]

    def test_column_without_line_is_dropped(self):
        """A column alone is not shown."""
        report = format_error_report(BuildError(file="someFile", col=80, message="buildFailed"))
        assert report.lines == [red("File: someFile"), red("buildFailed")]

    def test_file_with_line_and_column(self):
        """Line and column are shown as line:col."""
        report = format_error_report(
            BuildError(file="someFile", line=24, col=80, message="buildFailed")
        )
        assert report.lines == [red("File: someFile (24:80)"), red("buildFailed")]

    def test_without_file(self):
        """Without a file only the message line is written."""
        report = format_error_report(BuildError(message="buildFailed", line=3))
        assert report.lines == [red("buildFailed")]

    def test_lines_are_red(self):
        """Every error line is colored as an error."""
        report = format_error_report(BuildError(file="someFile", message="buildFailed"))
        assert report.lines[0] == "[red]File: someFile[/red]"

    @pytest.mark.parametrize(
        "error",
        [
            BuildError(message="foo"),
            BuildError(message="foo", file="a.js"),
            BuildError(message="foo", file="a.js", line=1, col=2, stack="Traceback"),
            BuildError(message="foo", col=2),
        ],
    )
    def test_analytics_only_carry_message(self, error):
        """Analytics receive only the error message."""
        assert format_error_report(error).analytics_event == {"description": "foo"}

    def test_markup_in_message_is_escaped(self):
        """Markup characters in messages are printed literally."""
        report = format_error_report(BuildError(message="expected [red] token"))
        assert report.lines == ["[red]expected \\[red] token[/red]"]


class TestBuildErrorPayload:
    """Test cases for BuildError.from_payload."""

    def test_plain_message_and_stack(self):
        """Message and stack come from a mapping payload."""
        error = BuildError.from_payload({"message": "foo", "stack": "at x"})
        assert error == BuildError(message="foo", stack="at x")

    def test_column_alias(self):
        """`column` is accepted in place of `col`."""
        error = BuildError.from_payload({"message": "foo", "file": "f", "line": 1, "column": 9})
        assert error.col == 9

    def test_exception(self):
        """Exceptions are normalized through their attributes."""
        error = BuildError.from_payload(RuntimeError("boom"))
        assert error.message == "boom"
        assert error.file is None

    def test_passthrough(self):
        """BuildError instances are returned unchanged."""
        error = BuildError(message="foo")
        assert BuildError.from_payload(error) is error
