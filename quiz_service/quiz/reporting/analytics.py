"""
Performance Analytics - Read-only aggregations over graded quiz results

Derived from persisted results only; never touches live session state.
"""

import logging
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Dict, List, Optional, Sequence

from ...config import settings
from ..models import Difficulty, GradedResult

logger = logging.getLogger(__name__)


@dataclass
class PerformanceSummary:
    """Aggregate statistics across quiz attempts"""
    total_quizzes: int = 0
    average_score: int = 0
    best_score: int = 0
    total_time_seconds: float = 0.0
    current_streak: int = 0
    difficulty_distribution: Dict[str, int] = field(default_factory=dict)
    strengths: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "total_quizzes": self.total_quizzes,
            "average_score": self.average_score,
            "best_score": self.best_score,
            "total_time_seconds": round(self.total_time_seconds, 3),
            "current_streak": self.current_streak,
            "difficulty_distribution": dict(self.difficulty_distribution),
            "strengths": list(self.strengths),
            "recommendations": list(self.recommendations),
        }


class PerformanceAnalytics:
    """
    Computes dashboard statistics from a history of graded results.

    Results are ordered by completion time when every result carries one;
    otherwise the given order is kept.
    """

    # Insight thresholds (percent / count)
    HIGH_PERFORMANCE = 80
    LOW_PERFORMANCE = 70
    REGULAR_PARTICIPATION = 5

    def __init__(self, results: Sequence[GradedResult], pass_mark: Optional[int] = None):
        self.results = self._ordered(results)
        self.pass_mark = settings.PASS_MARK_PERCENT if pass_mark is None else pass_mark

    @staticmethod
    def _ordered(results: Sequence[GradedResult]) -> List[GradedResult]:
        if all(r.completed_at is not None for r in results):
            return sorted(results, key=lambda r: r.completed_at)
        return list(results)

    def average_score(self) -> int:
        """Mean of per-quiz percentages, rounded half-up; 0 with no history"""
        if not self.results:
            return 0
        total = sum(Fraction(100 * r.score, r.total_questions) for r in self.results)
        return int(total / len(self.results) + Fraction(1, 2))

    def best_score(self) -> int:
        return max((r.accuracy for r in self.results), default=0)

    def total_time_seconds(self) -> float:
        return sum(r.elapsed_seconds for r in self.results)

    def current_streak(self) -> int:
        """Consecutive most recent attempts at or above the pass mark"""
        streak = 0
        for result in reversed(self.results):
            if result.accuracy < self.pass_mark:
                break
            streak += 1
        return streak

    def difficulty_distribution(self) -> Dict[str, int]:
        counts = {d.value: 0 for d in Difficulty}
        for result in self.results:
            counts[result.difficulty.value] += 1
        return counts

    def strengths(self) -> List[str]:
        if not self.results:
            return []
        found = []
        if self.average_score() >= self.HIGH_PERFORMANCE:
            found.append("Consistently high performance")
        if len(self.results) >= self.REGULAR_PARTICIPATION:
            found.append("Regular quiz participation")
        if not found:
            found.append("Active participation in learning")
        return found

    def recommendations(self) -> List[str]:
        if not self.results:
            return ["Complete your first quiz to get personalized recommendations"]
        found = []
        if self.average_score() < self.LOW_PERFORMANCE:
            found.append("Focus on fundamental concepts")
        if all(r.difficulty == Difficulty.EASY for r in self.results):
            found.append("Challenge yourself with harder difficulty levels")
        if not found:
            found.append("Maintain balanced difficulty progression")
        return found

    def summary(self) -> PerformanceSummary:
        summary = PerformanceSummary(
            total_quizzes=len(self.results),
            average_score=self.average_score(),
            best_score=self.best_score(),
            total_time_seconds=self.total_time_seconds(),
            current_streak=self.current_streak(),
            difficulty_distribution=self.difficulty_distribution(),
            strengths=self.strengths(),
            recommendations=self.recommendations(),
        )
        logger.debug(f"Computed performance summary over {summary.total_quizzes} quizzes")
        return summary


def result_insights(result: GradedResult) -> Dict[str, List[str]]:
    """
    Strengths and areas for improvement for a single graded quiz.

    Uses the per-question timing recorded during the session: a correct
    answer within QUICK_RESPONSE_SECONDS counts as quick, any question over
    SLOW_RESPONSE_SECONDS counts as slow.

    Args:
        result: A graded quiz result

    Returns:
        Dict with "strengths" and "improvements" lists
    """
    strengths = []
    improvements = []

    if result.accuracy >= PerformanceAnalytics.HIGH_PERFORMANCE:
        strengths.append("Excellent overall performance")
    if any(r.is_correct and r.elapsed_seconds <= settings.QUICK_RESPONSE_SECONDS for r in result.results):
        strengths.append("Quick and accurate responses")

    if result.accuracy < PerformanceAnalytics.LOW_PERFORMANCE:
        improvements.append("Focus on fundamental concepts")
    if any(r.elapsed_seconds > settings.SLOW_RESPONSE_SECONDS for r in result.results):
        improvements.append("Work on response speed")

    return {"strengths": strengths, "improvements": improvements}
