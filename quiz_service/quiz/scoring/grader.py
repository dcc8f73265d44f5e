"""
Answer Grader - Pure scoring of a question set against submitted answers

Correctness is exact-match only; there is no semantic grading.
"""

import logging
from datetime import datetime
from typing import Dict, Mapping, Optional, Sequence, AbstractSet

from ..errors import EmptyQuestionSetError
from ..models import (
    Difficulty,
    GradedResult,
    Question,
    QuestionKind,
    QuestionResult,
    TerminationReason,
)
from .performance import performance_band, round_half_up_percent

logger = logging.getLogger(__name__)


def normalize_answer(question: Question, value: str) -> str:
    """
    Canonical form used for comparison.

    - single-choice: the option string as given
    - binary: lowercase, trimmed ("true"/"false")
    - fill-in / free-text: trimmed raw text, case preserved
    """
    if question.kind == QuestionKind.SINGLE_CHOICE:
        return value
    if question.kind == QuestionKind.BINARY:
        return value.strip().lower()
    return value.strip()


def is_correct(question: Question, answer: Optional[str]) -> bool:
    """Whether a submitted answer matches the question's reference value."""
    if answer is None:
        return False
    return normalize_answer(question, answer) == normalize_answer(question, question.correct_answer)


def score_session(
    questions: Sequence[Question],
    answers: Mapping[str, str],
    elapsed_by_question: Optional[Mapping[str, float]] = None,
    elapsed_seconds: float = 0.0,
    flagged: AbstractSet[str] = frozenset(),
    terminated_by: TerminationReason = TerminationReason.USER,
    difficulty: Difficulty = Difficulty.MEDIUM,
    completed_at: Optional[datetime] = None
) -> GradedResult:
    """
    Grade every question and aggregate the score.

    Args:
        questions: Ordered question sequence
        answers: Question id -> submitted answer text
        elapsed_by_question: Question id -> seconds spent on it
        elapsed_seconds: Total wall-clock seconds for the session
        flagged: Question ids the taker flagged for review
        terminated_by: Which path ended the session
        difficulty: Difficulty of the quiz as configured
        completed_at: When the session was graded

    Returns:
        GradedResult with per-question outcomes and accuracy percentage

    Raises:
        EmptyQuestionSetError: if there are no questions
    """
    if not questions:
        raise EmptyQuestionSetError()

    elapsed_by_question = elapsed_by_question or {}
    results = []
    score = 0

    for question in questions:
        submitted = answers.get(question.id)
        correct = is_correct(question, submitted)
        if correct:
            score += 1
        results.append(QuestionResult(
            question_id=question.id,
            submitted_answer=submitted,
            correct_answer=question.correct_answer,
            is_correct=correct,
            elapsed_seconds=float(elapsed_by_question.get(question.id, 0.0)),
            flagged=question.id in flagged,
        ))

    total = len(questions)
    accuracy = round_half_up_percent(score, total)

    logger.debug(f"Scored {score}/{total} ({accuracy}%)")

    return GradedResult(
        results=tuple(results),
        score=score,
        total_questions=total,
        accuracy=accuracy,
        elapsed_seconds=elapsed_seconds,
        performance_band=performance_band(accuracy),
        terminated_by=terminated_by,
        difficulty=difficulty,
        completed_at=completed_at,
    )


def answers_summary(result: GradedResult) -> Dict[str, int]:
    """Counts of correct, incorrect and unanswered questions"""
    unanswered = sum(1 for r in result.results if r.submitted_answer is None)
    return {
        "correct": result.score,
        "incorrect": result.total_questions - result.score - unanswered,
        "unanswered": unanswered,
    }
