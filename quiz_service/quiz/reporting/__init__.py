"""Reporting over graded results"""

from .analytics import PerformanceAnalytics, PerformanceSummary, result_insights
from .report import build_text_report, format_clock, format_duration

__all__ = [
    "PerformanceAnalytics",
    "PerformanceSummary",
    "build_text_report",
    "format_clock",
    "format_duration",
    "result_insights",
]
