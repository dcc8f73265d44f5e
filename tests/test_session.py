"""
Tests for the quiz session state machine.

Tests:
1. begin() validation and state transitions
2. Answer and flag mutation rules
3. finish() idempotence and resource release
4. Timer-driven auto-submit
5. Integrity-driven termination
6. Per-question timing from navigation
"""
from unittest.mock import Mock

import pytest

from quiz_service.quiz.errors import (
    EmptyQuestionSetError,
    InvalidQuestionSetError,
    InvalidTransitionError,
    UnknownQuestionError,
)
from quiz_service.quiz.models import (
    Question,
    QuestionKind,
    QuizConfig,
    SessionState,
    TerminationReason,
    ViolationKind,
)
from quiz_service.quiz.signals import CONTEXT_MENU, COPY, SIGNAL_TYPES, VISIBILITY_CHANGE


@pytest.fixture
def session(make_session):
    return make_session()


@pytest.fixture
def active(session, two_questions):
    session.begin(two_questions, QuizConfig(time_limit_minutes=1))
    return session


# ============================================================================
# Begin
# ============================================================================

class TestBegin:
    """Entering the active state"""

    def test_new_session_is_in_setup(self, session):
        assert session.state == SessionState.SETUP
        assert session.id.startswith("QZ_")
        assert session.result is None

    def test_begin_activates(self, active, signals):
        assert active.state == SessionState.ACTIVE
        assert active.remaining_seconds == 60
        assert active.timer.running
        assert active.monitor.attached
        assert signals.subscriber_count() == len(SIGNAL_TYPES)
        assert active.current_question.id == "Q1"

    def test_begin_empty_rejected(self, session, signals):
        with pytest.raises(EmptyQuestionSetError) as exc_info:
            session.begin([])

        assert exc_info.value.code == "empty-question-set"
        assert session.state == SessionState.SETUP
        assert not session.timer.running
        assert signals.subscriber_count() == 0

    def test_begin_twice_rejected(self, active, two_questions):
        with pytest.raises(InvalidTransitionError):
            active.begin(two_questions)

        assert active.state == SessionState.ACTIVE

    def test_duplicate_ids_rejected(self, session):
        questions = [
            Question(id="A", kind=QuestionKind.BINARY, prompt="x", correct_answer="true"),
            Question(id="A", kind=QuestionKind.BINARY, prompt="y", correct_answer="false"),
        ]

        with pytest.raises(InvalidQuestionSetError):
            session.begin(questions)

        assert session.state == SessionState.SETUP

    def test_choice_question_without_choices_rejected(self, session):
        questions = [Question(id="A", kind=QuestionKind.SINGLE_CHOICE, prompt="x", correct_answer="B")]

        with pytest.raises(InvalidQuestionSetError):
            session.begin(questions)

    def test_default_time_limit(self, session, two_questions):
        session.begin(two_questions)

        assert session.remaining_seconds == 15 * 60

    def test_question_sequence_is_immutable(self, active, two_questions):
        two_questions.append(
            Question(id="Q3", kind=QuestionKind.BINARY, prompt="z", correct_answer="true")
        )

        assert [q.id for q in active.questions] == ["Q1", "Q2"]
        with pytest.raises(UnknownQuestionError):
            active.submit_answer("Q3", "true")


# ============================================================================
# Answers and Flags
# ============================================================================

class TestAnswers:
    """submit_answer() and toggle_flag()"""

    def test_submit_before_begin_rejected(self, session):
        with pytest.raises(InvalidTransitionError) as exc_info:
            session.submit_answer("Q1", "B")

        assert exc_info.value.code == "invalid-transition"

    def test_last_write_wins(self, active):
        active.submit_answer("Q1", "A")
        active.submit_answer("Q1", "B")

        assert active.answers["Q1"] == "B"
        assert active.answered_count == 1

    def test_answers_view_is_read_only(self, active):
        with pytest.raises(TypeError):
            active.answers["Q1"] = "B"

    def test_unknown_question_rejected(self, active):
        with pytest.raises(UnknownQuestionError) as exc_info:
            active.submit_answer("Q9", "B")

        assert exc_info.value.code == "unknown-question-reference"
        assert dict(active.answers) == {}

    def test_toggle_flag(self, active):
        assert active.toggle_flag("Q2") is True
        assert active.flagged == frozenset({"Q2"})
        assert active.toggle_flag("Q2") is False
        assert active.flagged == frozenset()

    def test_flag_unknown_question_rejected(self, active):
        with pytest.raises(UnknownQuestionError):
            active.toggle_flag("nope")

    def test_mutation_after_graded_rejected(self, active):
        active.submit_answer("Q1", "B")
        active.finish()

        with pytest.raises(InvalidTransitionError):
            active.submit_answer("Q1", "A")
        with pytest.raises(InvalidTransitionError):
            active.toggle_flag("Q1")
        with pytest.raises(InvalidTransitionError):
            active.next_question()

        assert active.answers["Q1"] == "B"


# ============================================================================
# Finish
# ============================================================================

class TestFinish:
    """Grading and idempotence"""

    def test_two_question_example(self, active):
        active.submit_answer("Q1", "B")
        active.submit_answer("Q2", "false")

        result = active.finish()

        assert result.score == 1
        assert result.total_questions == 2
        assert result.accuracy == 50
        assert result.terminated_by == TerminationReason.USER
        assert active.state == SessionState.GRADED

    def test_finish_before_begin_rejected(self, session):
        with pytest.raises(InvalidTransitionError):
            session.finish()

        assert session.state == SessionState.SETUP

    def test_finish_is_idempotent(self, active, signals):
        first = active.finish()
        second = active.finish()
        third = active.finish(TerminationReason.TIMER)

        assert first is second is third
        assert active.timer.stop_count == 1
        assert active.monitor.detach_count == 1
        assert signals.subscriber_count() == 0

    def test_finish_releases_timer_and_listeners(self, active, loop, signals):
        active.finish()

        assert not active.timer.running
        assert loop.pending == []
        assert signals.subscriber_count() == 0

    def test_no_tick_after_graded(self, active, loop):
        active.finish()
        remaining = active.remaining_seconds

        loop.advance(120)

        assert active.remaining_seconds == remaining
        assert active.result.terminated_by == TerminationReason.USER

    def test_unanswered_questions_are_incorrect(self, active):
        result = active.finish()

        assert result.score == 0
        assert all(r.submitted_answer is None for r in result.results)

    def test_elapsed_and_timestamps(self, active, clock):
        clock.advance(12.5)

        result = active.finish()

        assert result.elapsed_seconds == pytest.approx(12.5)
        assert active.ended_at > active.started_at
        assert result.completed_at == active.ended_at

    def test_on_graded_called_once(self, make_session, two_questions):
        on_graded = Mock()
        session = make_session(on_graded=on_graded)
        session.begin(two_questions)

        session.finish()
        session.finish()

        on_graded.assert_called_once_with(session)

    def test_attach_failure_leaves_session_in_setup(self, make_session, two_questions, loop):
        session = make_session()
        session.monitor.attach = Mock(side_effect=RuntimeError("listener registration failed"))

        with pytest.raises(RuntimeError):
            session.begin(two_questions)

        assert session.state == SessionState.SETUP
        assert not session.timer.running
        assert loop.pending == []


# ============================================================================
# Timer Expiry
# ============================================================================

class TestTimerExpiry:
    """Auto-submit when time runs out"""

    def test_auto_finish_after_five_ticks(self, session, two_questions, loop, five_second_config):
        remaining = []
        session.begin(two_questions, five_second_config)
        session.submit_answer("Q1", "B")

        for _ in range(5):
            loop.advance(1)
            remaining.append(session.remaining_seconds)

        assert remaining == [4, 3, 2, 1, 0]
        assert session.state == SessionState.GRADED
        assert session.elapsed_seconds >= 5
        assert session.result.terminated_by == TerminationReason.TIMER
        assert session.result.score == 1

    def test_remaining_never_increases(self, session, two_questions, loop):
        session.begin(two_questions, QuizConfig(time_limit_minutes=0.5))
        previous = session.remaining_seconds

        for _ in range(40):
            loop.advance(1)
            assert session.remaining_seconds <= previous
            previous = session.remaining_seconds

        assert session.remaining_seconds == 0

    def test_user_finish_wins_over_expiry(self, session, two_questions, loop, five_second_config):
        session.begin(two_questions, five_second_config)
        loop.advance(3)

        result = session.finish()
        loop.advance(10)

        assert session.result is result
        assert result.terminated_by == TerminationReason.USER
        assert session.remaining_seconds == 2

    def test_low_time_flag(self, session, two_questions, loop):
        session.begin(two_questions, QuizConfig(time_limit_minutes=6))
        assert not session.is_low_time

        loop.advance(61)

        assert session.is_low_time


# ============================================================================
# Integrity
# ============================================================================

class TestIntegrity:
    """Violations recorded by the session"""

    def test_two_context_menu_events(self, active, signals):
        signals.publish(CONTEXT_MENU)
        signals.publish(CONTEXT_MENU)

        assert [v.kind for v in active.violations] == [ViolationKind.CONTEXT_MENU_USE] * 2
        assert not active.monitor.fatal_signalled
        assert active.state == SessionState.ACTIVE

    def test_second_visibility_loss_terminates(self, active, signals, loop):
        active.submit_answer("Q1", "B")
        signals.publish(VISIBILITY_CHANGE, hidden=True)
        assert active.state == SessionState.ACTIVE

        signals.publish(VISIBILITY_CHANGE, hidden=True)

        assert active.state == SessionState.GRADED
        assert active.result.terminated_by == TerminationReason.INTEGRITY
        assert active.result.score == 1
        assert len(active.violations) == 2
        assert active.violations[-1].is_fatal
        assert loop.pending == []
        assert signals.subscriber_count() == 0

    def test_signals_after_graded_are_ignored(self, active, signals):
        active.finish()

        signal = signals.publish(COPY)

        assert not signal.default_prevented
        assert active.violations == ()

    def test_violation_log_is_snapshot(self, active, signals):
        signals.publish(COPY)
        log = active.violations
        signals.publish(COPY)

        assert len(log) == 1
        assert len(active.violations) == 2


# ============================================================================
# Navigation
# ============================================================================

class TestNavigation:
    """Per-question timing and position"""

    def test_time_attributed_to_visible_question(self, active, clock):
        clock.advance(4)
        active.next_question()
        clock.advance(6)
        active.previous_question()
        clock.advance(1)

        result = active.finish()
        by_id = {r.question_id: r.elapsed_seconds for r in result.results}

        assert by_id["Q1"] == pytest.approx(5)
        assert by_id["Q2"] == pytest.approx(6)

    def test_go_to_clamps(self, active):
        assert active.go_to(10) == 1
        assert active.go_to(-4) == 0

    def test_progress(self, active):
        assert active.progress == 50.0
        active.next_question()
        assert active.progress == 100.0


# ============================================================================
# Snapshot
# ============================================================================

class TestSnapshot:
    """Serializable view of the session"""

    def test_active_snapshot(self, active):
        active.submit_answer("Q2", "true")
        active.toggle_flag("Q1")

        snap = active.snapshot()

        assert snap["state"] == "active"
        assert snap["answers"] == {"Q2": "true"}
        assert snap["flagged"] == ["Q1"]
        assert snap["result"] is None
        assert snap["ended_at"] is None

    def test_graded_snapshot_includes_result(self, active):
        active.submit_answer("Q1", "B")
        active.finish()

        snap = active.snapshot()

        assert snap["state"] == "graded"
        assert snap["result"]["score"] == 1
        assert snap["result"]["terminated_by"] == "user"
