"""Scoring modules"""

from .grader import score_session, is_correct, normalize_answer, answers_summary
from .performance import performance_band, round_half_up_percent

__all__ = [
    "score_session",
    "is_correct",
    "normalize_answer",
    "answers_summary",
    "performance_band",
    "round_half_up_percent",
]
