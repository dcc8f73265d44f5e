"""
Text Reports - Plain-text performance report for export
"""

from typing import Optional, Sequence

from ..models import GradedResult, TerminationReason
from .analytics import PerformanceAnalytics


def format_clock(seconds: int) -> str:
    """Countdown display, e.g. 125 -> '2:05'"""
    seconds = max(int(seconds), 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


def format_duration(seconds: float) -> str:
    """Elapsed display, e.g. 125 -> '2m 5s'"""
    seconds = max(int(seconds), 0)
    return f"{seconds // 60}m {seconds % 60}s"


def build_text_report(
    results: Sequence[GradedResult],
    title: str = "PERFORMANCE REPORT",
    pass_mark: Optional[int] = None
) -> str:
    """
    Render the performance report for a history of graded results.

    Args:
        results: Graded results, any order
        title: Report heading
        pass_mark: Accuracy counted towards the streak

    Returns:
        The report as plain text
    """
    analytics = PerformanceAnalytics(results, pass_mark=pass_mark)
    summary = analytics.summary()

    lines = [
        title,
        "=" * len(title),
        "",
        "Summary Statistics:",
        f"- Total Quizzes Completed: {summary.total_quizzes}",
        f"- Average Score: {summary.average_score}%",
        f"- Best Score: {summary.best_score}%",
        f"- Current Streak: {summary.current_streak}",
        f"- Total Learning Time: {int(summary.total_time_seconds // 3600)}h",
        "",
        "Quiz Results:",
    ]

    for index, result in enumerate(analytics.results, start=1):
        date = result.completed_at.strftime("%Y-%m-%d") if result.completed_at else "unknown"
        lines.append(f"- Quiz {index}: {result.accuracy}% ({result.score}/{result.total_questions})")
        lines.append(f"  Date: {date}")
        lines.append(f"  Time: {format_duration(result.elapsed_seconds)}")
        lines.append(f"  Difficulty: {result.difficulty.value}")
        if result.terminated_by != TerminationReason.USER:
            lines.append(f"  Ended by: {result.terminated_by.value}")

    lines.extend(["", "LEARNING INSIGHTS", "=================", "", "Strengths:"])
    lines.extend(f"- {s}" for s in summary.strengths or ["None yet"])
    lines.extend(["", "Recommendations:"])
    lines.extend(f"- {r}" for r in summary.recommendations)

    return "\n".join(lines) + "\n"
