"""
Quiz Session - Lifecycle of a single timed quiz

setup -> active -> graded. While active the session owns a countdown
timer and an integrity monitor; both report back through callbacks and
only the session writes its own state.
"""

import logging
import time
import uuid
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..config import settings
from .errors import (
    EmptyQuestionSetError,
    InvalidQuestionSetError,
    InvalidTransitionError,
    UnknownQuestionError,
)
from .integrity import IntegrityMonitor
from .models import (
    GradedResult,
    Question,
    QuestionKind,
    QuizConfig,
    SessionState,
    TerminationReason,
    ViolationRecord,
)
from .navigation import QuestionNavigator
from .reporting.report import format_clock
from .scoring import score_session
from .signals import SignalSource
from .timer import CountdownTimer
from .utils.logging import (
    log_critical_event,
    log_session_end,
    log_session_start,
    log_violation,
)

logger = logging.getLogger(__name__)


class QuizSession:
    """
    Manages a single quiz session.

    All mutation goes through begin(), submit_answer(), toggle_flag()
    and finish(); navigation only moves the per-question clock.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        signal_source: Optional[SignalSource] = None,
        loop: Any = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = datetime.utcnow,
        tick_interval: Optional[float] = None,
        max_visibility_warnings: Optional[int] = None,
        on_graded: Optional[Callable[["QuizSession"], None]] = None
    ):
        """
        Initialize a quiz session in the setup state.

        Args:
            session_id: Optional custom session ID (auto-generated if not provided)
            signal_source: Environment signals to monitor (a private source if None)
            loop: Scheduler for timer ticks (the running asyncio loop if None)
            clock: Monotonic clock used for elapsed time
            wall_clock: Clock used for timestamps
            tick_interval: Real seconds per timer tick
            max_visibility_warnings: Visibility losses tolerated before termination
            on_graded: Called once after the session reaches graded
        """
        self.id = session_id or f"QZ_{uuid.uuid4().hex[:6].upper()}"
        self.signals = signal_source or SignalSource()
        self.state = SessionState.SETUP
        self.config: Optional[QuizConfig] = None
        self.remaining_seconds = 0
        self.created_at = wall_clock()
        self.started_at: Optional[datetime] = None
        self.ended_at: Optional[datetime] = None
        self.on_graded = on_graded

        self._clock = clock
        self._wall_clock = wall_clock
        self._started_mono: Optional[float] = None
        self._elapsed_final: Optional[float] = None

        self._questions: Tuple[Question, ...] = ()
        self._by_id: Dict[str, Question] = {}
        self._answers: Dict[str, str] = {}
        self._flagged: Set[str] = set()
        self._violations: List[ViolationRecord] = []
        self._navigator: Optional[QuestionNavigator] = None
        self._result: Optional[GradedResult] = None

        self._timer = CountdownTimer(
            on_tick=self._on_tick,
            on_expire=self._on_timer_expired,
            interval=tick_interval,
            loop=loop
        )
        self._monitor = IntegrityMonitor(
            self.signals,
            sink=self._record_violation,
            on_fatal_violation=self._on_fatal_violation,
            max_visibility_warnings=max_visibility_warnings,
            clock=wall_clock
        )

    # ============== Read-only Views ==============

    @property
    def questions(self) -> Tuple[Question, ...]:
        return self._questions

    @property
    def answers(self) -> Mapping[str, str]:
        return MappingProxyType(self._answers)

    @property
    def flagged(self) -> frozenset:
        return frozenset(self._flagged)

    @property
    def violations(self) -> Tuple[ViolationRecord, ...]:
        return tuple(self._violations)

    @property
    def result(self) -> Optional[GradedResult]:
        return self._result

    @property
    def timer(self) -> CountdownTimer:
        return self._timer

    @property
    def monitor(self) -> IntegrityMonitor:
        return self._monitor

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def is_graded(self) -> bool:
        return self.state == SessionState.GRADED

    @property
    def elapsed_seconds(self) -> float:
        if self._elapsed_final is not None:
            return self._elapsed_final
        if self._started_mono is None:
            return 0.0
        return self._clock() - self._started_mono

    @property
    def current_index(self) -> int:
        return self._navigator.index if self._navigator else 0

    @property
    def current_question(self) -> Optional[Question]:
        if self._navigator is None:
            return None
        return self._by_id[self._navigator.current_id]

    @property
    def answered_count(self) -> int:
        return len(self._answers)

    @property
    def progress(self) -> float:
        """Position through the quiz as a percentage (1-based)"""
        if not self._questions:
            return 0.0
        return (self.current_index + 1) / len(self._questions) * 100

    @property
    def is_low_time(self) -> bool:
        return self.is_active and self.remaining_seconds < settings.LOW_TIME_THRESHOLD_SECONDS

    # ============== Lifecycle ==============

    def begin(self, questions: Iterable[Question], config: Optional[QuizConfig] = None) -> None:
        """
        Start the quiz: fix the question set, start the timer, attach the monitor.

        Args:
            questions: Ordered question sequence
            config: Quiz configuration (default time limit if None)

        Raises:
            InvalidTransitionError: if the session is not in setup
            EmptyQuestionSetError: if no questions were given
            InvalidQuestionSetError: on duplicate ids or choice questions without choices
        """
        if self.state != SessionState.SETUP:
            raise InvalidTransitionError("begin", self.state.value)

        questions = tuple(questions or ())
        if not questions:
            raise EmptyQuestionSetError()
        self._validate_questions(questions)

        config = config or QuizConfig(time_limit_minutes=settings.DEFAULT_TIME_LIMIT_MINUTES)
        navigator = QuestionNavigator([q.id for q in questions], clock=self._clock)

        duration = self._timer.start(config.duration_seconds)
        try:
            self._monitor.attach()
        except Exception:
            self._timer.stop()
            raise

        self._questions = questions
        self._by_id = {q.id: q for q in questions}
        self.config = config
        self.remaining_seconds = duration
        self.started_at = self._wall_clock()
        self._started_mono = self._clock()
        self._navigator = navigator
        navigator.open()
        self.state = SessionState.ACTIVE

        log_session_start(self.id, len(questions), duration)

    def submit_answer(self, question_id: str, value: str) -> None:
        """Record an answer; the last write for a question wins."""
        self._require_active("submit an answer")
        self._require_known(question_id)
        self._answers[question_id] = value

    def toggle_flag(self, question_id: str) -> bool:
        """
        Toggle the review flag on a question.

        Returns:
            True if the question is now flagged
        """
        self._require_active("flag a question")
        self._require_known(question_id)
        if question_id in self._flagged:
            self._flagged.discard(question_id)
            return False
        self._flagged.add(question_id)
        return True

    def finish(self, reason: TerminationReason = TerminationReason.USER) -> GradedResult:
        """
        Grade the session. Reached by user submission, timer expiry or a
        fatal violation; calling it again once graded returns the same result.

        Raises:
            InvalidTransitionError: if the session never began
        """
        if self.state == SessionState.GRADED:
            return self._result
        if self.state != SessionState.ACTIVE:
            raise InvalidTransitionError("finish", self.state.value)

        reason = TerminationReason(reason)

        # Release timer and listeners before anything else can run
        self._timer.stop()
        self._monitor.detach()
        self._navigator.close()

        self._elapsed_final = self._clock() - self._started_mono
        self.ended_at = self._wall_clock()

        self._result = score_session(
            self._questions,
            self._answers,
            elapsed_by_question=self._navigator.elapsed_by_question(),
            elapsed_seconds=self._elapsed_final,
            flagged=self._flagged,
            terminated_by=reason,
            difficulty=self.config.difficulty,
            completed_at=self.ended_at,
        )
        self.state = SessionState.GRADED

        log_session_end(
            self.id,
            self._result.score,
            self._result.total_questions,
            reason.value,
            len(self._violations)
        )

        if self.on_graded is not None:
            self.on_graded(self)

        return self._result

    # ============== Navigation ==============

    def go_to(self, index: int) -> int:
        self._require_active("navigate")
        return self._navigator.go_to(index)

    def next_question(self) -> int:
        self._require_active("navigate")
        return self._navigator.next()

    def previous_question(self) -> int:
        self._require_active("navigate")
        return self._navigator.previous()

    # ============== Callbacks ==============

    def _on_tick(self, remaining: int) -> None:
        if self.state != SessionState.ACTIVE:
            return
        self.remaining_seconds = min(self.remaining_seconds, remaining)

    def _on_timer_expired(self) -> None:
        if self.state != SessionState.ACTIVE:
            return
        self.remaining_seconds = 0
        logger.info(f"Time limit reached for session {self.id}")
        self.finish(TerminationReason.TIMER)

    def _record_violation(self, record: ViolationRecord) -> None:
        if self.state != SessionState.ACTIVE:
            return
        self._violations.append(record)
        log_violation(self.id, record.kind.value, record.severity.value, record.detail)

    def _on_fatal_violation(self, record: ViolationRecord) -> None:
        if self.state != SessionState.ACTIVE:
            return
        log_critical_event(self.id, "integrity_termination", {"kind": record.kind.value})
        self.finish(TerminationReason.INTEGRITY)

    # ============== Helpers ==============

    def _require_active(self, operation: str) -> None:
        if self.state != SessionState.ACTIVE:
            raise InvalidTransitionError(operation, self.state.value)

    def _require_known(self, question_id: str) -> None:
        if question_id not in self._by_id:
            raise UnknownQuestionError(question_id)

    @staticmethod
    def _validate_questions(questions: Tuple[Question, ...]) -> None:
        seen = set()
        for question in questions:
            if question.id in seen:
                raise InvalidQuestionSetError(f"Duplicate question id {question.id!r}")
            seen.add(question.id)
            if question.kind == QuestionKind.SINGLE_CHOICE and not question.choices:
                raise InvalidQuestionSetError(f"Question {question.id!r} has no choices")

    def snapshot(self) -> Dict[str, Any]:
        """
        JSON-serializable view of the session for clients and reporting.
        """
        current = self.current_question
        return {
            "session_id": self.id,
            "state": self.state.value,
            "remaining_seconds": self.remaining_seconds,
            "remaining_clock": format_clock(self.remaining_seconds),
            "is_low_time": self.is_low_time,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "question_count": len(self._questions),
            "current_index": self.current_index,
            "current_question_id": current.id if current else None,
            "answered_count": self.answered_count,
            "progress": round(self.progress, 1),
            "answers": dict(self._answers),
            "flagged": sorted(self._flagged),
            "violations": [v.to_dict() for v in self._violations],
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "result": self._result.to_dict() if self._result else None,
        }
