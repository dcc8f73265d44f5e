"""
Quiz Models - Questions, configuration, violations and graded results
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class QuestionKind(str, Enum):
    """Answer format of a question"""
    SINGLE_CHOICE = "single-choice"
    BINARY = "binary"
    FILL_IN = "fill-in"
    FREE_TEXT = "free-text"

    @classmethod
    def parse(cls, value: str) -> "QuestionKind":
        """Accept canonical kinds and the generator's legacy names."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in KIND_ALIASES:
            return KIND_ALIASES[key]
        return cls(key)


KIND_ALIASES: Dict[str, QuestionKind] = {
    "mcq": QuestionKind.SINGLE_CHOICE,
    "true-false": QuestionKind.BINARY,
    "fill-blank": QuestionKind.FILL_IN,
    "short-answer": QuestionKind.FREE_TEXT,
}


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuizSource(str, Enum):
    """Where the question set came from"""
    VIDEO_SUMMARY = "video-summary"
    CUSTOM_TOPIC = "custom-topic"
    MANUAL = "manual"


class SessionState(str, Enum):
    SETUP = "setup"
    ACTIVE = "active"
    GRADED = "graded"


class ViolationKind(str, Enum):
    CLIPBOARD_USE = "clipboard-use"
    CONTEXT_MENU_USE = "context-menu-use"
    VISIBILITY_LOSS = "visibility-loss"


class ViolationSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    FATAL = "fatal"


class TerminationReason(str, Enum):
    """Which path drove the session into the graded state"""
    USER = "user"
    TIMER = "timer"
    INTEGRITY = "integrity"


# ============== Question Set ==============

@dataclass(frozen=True)
class Question:
    """A single quiz question. Immutable once a session starts."""
    id: str
    kind: QuestionKind
    prompt: str
    correct_answer: str
    choices: Tuple[str, ...] = ()
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM

    def __post_init__(self):
        # Normalize loose inputs without breaking immutability
        object.__setattr__(self, "kind", QuestionKind.parse(self.kind))
        object.__setattr__(self, "difficulty", Difficulty(self.difficulty))
        object.__setattr__(self, "choices", tuple(self.choices or ()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "prompt": self.prompt,
            "choices": list(self.choices),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "difficulty": self.difficulty.value,
        }


@dataclass(frozen=True)
class QuizConfig:
    """Configuration supplied by the question source alongside the questions"""
    time_limit_minutes: float = 15
    difficulty: Difficulty = Difficulty.MEDIUM
    question_count: Optional[int] = None
    topic: str = ""
    source: QuizSource = QuizSource.CUSTOM_TOPIC

    @property
    def duration_seconds(self) -> int:
        return int(round(self.time_limit_minutes * 60))


# ============== Integrity ==============

@dataclass(frozen=True)
class ViolationRecord:
    """One detected integrity signal"""
    kind: ViolationKind
    timestamp: datetime
    severity: ViolationSeverity = ViolationSeverity.INFO
    detail: str = ""

    @property
    def is_fatal(self) -> bool:
        return self.severity == ViolationSeverity.FATAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "severity": self.severity.value,
            "detail": self.detail,
        }


# ============== Results ==============

@dataclass(frozen=True)
class QuestionResult:
    """Graded outcome for one question"""
    question_id: str
    submitted_answer: Optional[str]
    correct_answer: str
    is_correct: bool
    elapsed_seconds: float = 0.0
    flagged: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "submitted_answer": self.submitted_answer,
            "correct_answer": self.correct_answer,
            "is_correct": self.is_correct,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "flagged": self.flagged,
        }


@dataclass(frozen=True)
class GradedResult:
    """Scored output of a completed session"""
    results: Tuple[QuestionResult, ...]
    score: int
    total_questions: int
    accuracy: int
    elapsed_seconds: float
    performance_band: str
    terminated_by: TerminationReason = TerminationReason.USER
    difficulty: Difficulty = Difficulty.MEDIUM
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "total_questions": self.total_questions,
            "accuracy": self.accuracy,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "performance_band": self.performance_band,
            "terminated_by": self.terminated_by.value,
            "difficulty": self.difficulty.value,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "results": [r.to_dict() for r in self.results],
        }


def questions_from_dicts(items: List[Dict[str, Any]]) -> List[Question]:
    """
    Build questions from generator payloads.

    Accepts both snake_case and the generator's camelCase keys
    (``correctAnswer``, ``options``, ``type``, ``question``).
    """
    questions = []
    for item in items:
        questions.append(Question(
            id=str(item["id"]),
            kind=item.get("kind") or item.get("type"),
            prompt=item.get("prompt") or item.get("question", ""),
            correct_answer=str(item.get("correct_answer", item.get("correctAnswer", ""))),
            choices=tuple(item.get("choices") or item.get("options") or ()),
            explanation=item.get("explanation", ""),
            difficulty=item.get("difficulty", Difficulty.MEDIUM),
        ))
    return questions
