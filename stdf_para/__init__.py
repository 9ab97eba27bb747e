"""Parametric CSV reports from STDF test data"""

from .config import ReportOptions
from .pipeline import FileResult, RunSummary, build_reports, run

__all__ = ["ReportOptions", "FileResult", "RunSummary", "build_reports", "run"]
__version__ = "0.1.0"
