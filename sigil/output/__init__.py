"""Sigil output renderers: Rich console display and JSON reports."""

from sigil.output.console import SigilConsoleOutput
from sigil.output.report import SigilReportGenerator

__all__ = ["SigilConsoleOutput", "SigilReportGenerator"]
