"""Kestrel output renderers: Rich console display and JSON reports."""

from kestrel.output.console import KestrelConsoleOutput
from kestrel.output.report import KestrelReportGenerator

__all__ = ["KestrelConsoleOutput", "KestrelReportGenerator"]
