"""
Quiz API - FastAPI endpoints for timed quiz sessions

Endpoints:
- POST /api/quiz/start - Start a quiz session with a question set
- POST /api/quiz/{session_id}/answer - Record an answer
- POST /api/quiz/{session_id}/flag - Toggle a review flag
- POST /api/quiz/{session_id}/navigate - Move between questions
- POST /api/quiz/{session_id}/signal - Report a browser integrity signal
- POST /api/quiz/{session_id}/finish - Submit and grade the quiz
- GET /api/quiz/{session_id} - Session snapshot
- GET /api/quiz/{session_id}/result - Graded result
- GET /api/quiz/{session_id}/violations - Violation log
- GET /api/quiz/history/summary - Performance statistics
- GET /api/quiz/history/report - Plain-text performance report
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from ..config import settings
from .errors import QuizSessionError
from .models import Difficulty, Question, QuestionKind, QuizConfig, QuizSource
from .registry import RegistryFullError, SessionRegistry
from .reporting import PerformanceAnalytics, build_text_report, result_insights
from .session import QuizSession
from .signals import SIGNAL_TYPES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/quiz", tags=["Quiz"])

# In-memory session storage
_registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return _registry


# Error code -> HTTP status
ERROR_STATUS: Dict[str, int] = {
    "invalid-transition": 409,
    "unknown-question-reference": 404,
    "empty-question-set": 400,
    "invalid-question-set": 400,
}


def error_detail(exc: QuizSessionError) -> Dict[str, str]:
    return {"code": exc.code, "message": exc.message}


def raise_http(exc: QuizSessionError):
    raise HTTPException(status_code=ERROR_STATUS.get(exc.code, 400), detail=error_detail(exc))


# ============== Request/Response Models ==============

class QuestionPayload(BaseModel):
    """A question as produced by the question source"""
    id: str
    kind: QuestionKind = Field(..., description="single-choice, binary, fill-in or free-text (mcq, true-false, fill-blank, short-answer accepted)")
    prompt: str
    correct_answer: str
    choices: List[str] = Field(default_factory=list)
    explanation: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, value):
        return QuestionKind.parse(value)

    def to_question(self) -> Question:
        return Question(
            id=self.id,
            kind=self.kind,
            prompt=self.prompt,
            correct_answer=self.correct_answer,
            choices=tuple(self.choices),
            explanation=self.explanation,
            difficulty=self.difficulty,
        )


class StartQuizRequest(BaseModel):
    """Request to start a quiz session"""
    questions: List[QuestionPayload]
    time_limit_minutes: float = Field(
        settings.DEFAULT_TIME_LIMIT_MINUTES,
        gt=0,
        le=settings.MAX_TIME_LIMIT_MINUTES,
        allow_inf_nan=False,
        description="Time limit in minutes"
    )
    difficulty: Difficulty = Difficulty.MEDIUM
    question_count: Optional[int] = None
    topic: str = ""
    source: QuizSource = QuizSource.CUSTOM_TOPIC


class StartQuizResponse(BaseModel):
    """Response after starting a session"""
    session_id: str
    state: str
    remaining_seconds: int
    question_count: int


class AnswerRequest(BaseModel):
    question_id: str
    value: str


class AnswerResponse(BaseModel):
    recorded: bool
    answered_count: int


class FlagRequest(BaseModel):
    question_id: str


class FlagResponse(BaseModel):
    question_id: str
    flagged: bool


class NavigateRequest(BaseModel):
    """Jump to an index or step in a direction"""
    index: Optional[int] = None
    direction: Optional[Literal["next", "previous"]] = None


class NavigateResponse(BaseModel):
    current_index: int
    question_id: str
    progress: float


class SignalRequest(BaseModel):
    """A browser event seen by the quiz client"""
    type: str = Field(..., description="copy, cut, paste, contextmenu or visibilitychange")
    hidden: bool = False

    @field_validator("type")
    @classmethod
    def known_type(cls, value):
        if value not in SIGNAL_TYPES:
            raise ValueError(f"type must be one of {', '.join(SIGNAL_TYPES)}")
        return value


class SignalResponse(BaseModel):
    """Whether to suppress the default action, and what was recorded"""
    suppress: bool
    violation: Optional[Dict[str, Any]] = None
    state: str
    terminated: bool = False


class QuestionResultModel(BaseModel):
    question_id: str
    submitted_answer: Optional[str]
    correct_answer: str
    is_correct: bool
    elapsed_seconds: float
    flagged: bool


class GradedResultResponse(BaseModel):
    """Final quiz results"""
    session_id: str
    score: int
    total_questions: int
    accuracy: int
    elapsed_seconds: float
    performance_band: str
    terminated_by: str
    difficulty: str
    completed_at: Optional[str]
    results: List[QuestionResultModel]
    insights: Dict[str, List[str]]


# ============== Helpers ==============

def _get_session(registry: SessionRegistry, session_id: str) -> QuizSession:
    session = registry.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _result_response(session: QuizSession) -> GradedResultResponse:
    return GradedResultResponse(
        session_id=session.id,
        insights=result_insights(session.result),
        **session.result.to_dict()
    )


# ============== Reporting Endpoints ==============

@router.get("/history/summary")
async def history_summary(registry: SessionRegistry = Depends(get_registry)):
    """
    Aggregate statistics over every graded session.
    """
    return PerformanceAnalytics(registry.history()).summary().to_dict()


@router.get("/history/report", response_class=PlainTextResponse)
async def history_report(registry: SessionRegistry = Depends(get_registry)):
    """
    Plain-text performance report over every graded session.
    """
    return PlainTextResponse(build_text_report(registry.history()))


# ============== Session Endpoints ==============

@router.post("/start", response_model=StartQuizResponse)
async def start_quiz(request: StartQuizRequest, registry: SessionRegistry = Depends(get_registry)):
    """
    Start a new quiz session.

    Fixes the question set, starts the countdown and begins
    integrity monitoring.
    """
    if len(request.questions) > settings.MAX_QUESTION_COUNT:
        raise HTTPException(
            status_code=400,
            detail={"code": "too-many-questions", "message": f"At most {settings.MAX_QUESTION_COUNT} questions"}
        )

    config = QuizConfig(
        time_limit_minutes=request.time_limit_minutes,
        difficulty=request.difficulty,
        question_count=request.question_count,
        topic=request.topic,
        source=request.source,
    )

    questions = [q.to_question() for q in request.questions]

    try:
        session = registry.create()
    except RegistryFullError as e:
        logger.error(f"Failed to start quiz session: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    try:
        session.begin(questions, config)
    except QuizSessionError as e:
        registry.remove(session.id)
        raise_http(e)
    except Exception:
        registry.remove(session.id)
        raise

    logger.info(f"Started quiz session: {session.id}")

    return StartQuizResponse(
        session_id=session.id,
        state=session.state.value,
        remaining_seconds=session.remaining_seconds,
        question_count=len(session.questions)
    )


@router.post("/{session_id}/answer", response_model=AnswerResponse)
async def submit_answer(session_id: str, request: AnswerRequest, registry: SessionRegistry = Depends(get_registry)):
    """Record an answer; a later answer for the same question replaces it."""
    session = _get_session(registry, session_id)
    try:
        session.submit_answer(request.question_id, request.value)
    except QuizSessionError as e:
        raise_http(e)
    return AnswerResponse(recorded=True, answered_count=session.answered_count)


@router.post("/{session_id}/flag", response_model=FlagResponse)
async def toggle_flag(session_id: str, request: FlagRequest, registry: SessionRegistry = Depends(get_registry)):
    session = _get_session(registry, session_id)
    try:
        flagged = session.toggle_flag(request.question_id)
    except QuizSessionError as e:
        raise_http(e)
    return FlagResponse(question_id=request.question_id, flagged=flagged)


@router.post("/{session_id}/navigate", response_model=NavigateResponse)
async def navigate(session_id: str, request: NavigateRequest, registry: SessionRegistry = Depends(get_registry)):
    session = _get_session(registry, session_id)
    try:
        if request.index is not None:
            session.go_to(request.index)
        elif request.direction == "next":
            session.next_question()
        elif request.direction == "previous":
            session.previous_question()
        else:
            raise HTTPException(status_code=422, detail="Provide index or direction")
    except QuizSessionError as e:
        raise_http(e)
    return NavigateResponse(
        current_index=session.current_index,
        question_id=session.current_question.id,
        progress=round(session.progress, 1)
    )


@router.post("/{session_id}/signal", response_model=SignalResponse)
async def report_signal(session_id: str, request: SignalRequest, registry: SessionRegistry = Depends(get_registry)):
    """
    Report a browser event.

    Called by the client for clipboard, context-menu and visibility
    events. The response tells it whether to cancel the default action.
    """
    session = _get_session(registry, session_id)
    was_active = session.is_active
    before = len(session.violations)

    signal = session.signals.publish(request.type, hidden=request.hidden)

    violations = session.violations
    violation = violations[-1].to_dict() if len(violations) > before else None

    return SignalResponse(
        suppress=signal.default_prevented,
        violation=violation,
        state=session.state.value,
        terminated=was_active and session.is_graded
    )


@router.post("/{session_id}/finish", response_model=GradedResultResponse)
async def finish_quiz(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """
    Submit the quiz and return graded results.

    Submitting an already graded quiz returns the same result.
    """
    session = _get_session(registry, session_id)
    try:
        session.finish()
    except QuizSessionError as e:
        raise_http(e)
    return _result_response(session)


@router.get("/{session_id}")
async def get_session_status(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """
    Get current state of a quiz session.
    """
    return _get_session(registry, session_id).snapshot()


@router.get("/{session_id}/result", response_model=GradedResultResponse)
async def get_result(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = _get_session(registry, session_id)
    if not session.is_graded:
        raise HTTPException(
            status_code=409,
            detail={"code": "not-graded", "message": "Session has not been graded yet"}
        )
    return _result_response(session)


@router.get("/{session_id}/violations")
async def get_violations(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    session = _get_session(registry, session_id)
    return {
        "session_id": session.id,
        "violations": [v.to_dict() for v in session.violations]
    }
