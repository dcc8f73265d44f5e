"""
Quiz Module

Runs a quiz session from setup to grading:
- Countdown timer driving the time limit
- Integrity monitor for clipboard, context-menu and visibility signals
- Session state machine holding answers and flags
- Exact-match scoring engine
"""

from .errors import (
    EmptyQuestionSetError,
    InvalidQuestionSetError,
    InvalidTransitionError,
    QuizSessionError,
    UnknownQuestionError,
)
from .integrity import IntegrityMonitor
from .models import (
    Difficulty,
    GradedResult,
    Question,
    QuestionKind,
    QuestionResult,
    QuizConfig,
    SessionState,
    TerminationReason,
    ViolationKind,
    ViolationRecord,
    ViolationSeverity,
)
from .scoring import score_session
from .session import QuizSession
from .signals import EnvironmentSignal, SignalSource
from .timer import CountdownTimer

__all__ = [
    "CountdownTimer",
    "Difficulty",
    "EmptyQuestionSetError",
    "EnvironmentSignal",
    "GradedResult",
    "IntegrityMonitor",
    "InvalidQuestionSetError",
    "InvalidTransitionError",
    "Question",
    "QuestionKind",
    "QuestionResult",
    "QuizConfig",
    "QuizSession",
    "QuizSessionError",
    "SessionState",
    "SignalSource",
    "TerminationReason",
    "UnknownQuestionError",
    "ViolationKind",
    "ViolationRecord",
    "ViolationSeverity",
    "score_session",
]
