"""
Rebuild Watch Reporting Package.

Formats rebuild outcomes for the terminal and analytics.
Requires Python 3.11+.
"""

from reporting.analytics import Analytics, LogAnalytics, NullAnalytics, RecordingAnalytics
from reporting.formatter import (
    BuildError,
    ChangeEvent,
    ChangeReport,
    Color,
    ErrorReport,
    colorize,
    format_change_report,
    format_error_report,
)
from reporting.ui import UI, ConsoleUI, MemoryUI

__all__ = [
    "Analytics",
    "LogAnalytics",
    "NullAnalytics",
    "RecordingAnalytics",
    "BuildError",
    "ChangeEvent",
    "ChangeReport",
    "Color",
    "ErrorReport",
    "colorize",
    "format_change_report",
    "format_error_report",
    "UI",
    "ConsoleUI",
    "MemoryUI",
]
