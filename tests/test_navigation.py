"""
Tests for question navigation and per-question timing.
"""
import pytest

from quiz_service.quiz.navigation import QuestionNavigator


@pytest.fixture
def navigator(clock):
    nav = QuestionNavigator(["a", "b", "c"], clock=clock)
    nav.open()
    return nav


class TestQuestionNavigator:
    """Position and time accounting"""

    def test_starts_on_first_question(self, navigator):
        assert navigator.index == 0
        assert navigator.current_id == "a"
        assert navigator.is_first
        assert not navigator.is_last

    def test_next_and_previous_clamp(self, navigator):
        navigator.previous()
        assert navigator.index == 0

        navigator.next()
        navigator.next()
        navigator.next()
        assert navigator.index == 2
        assert navigator.is_last

    def test_visits_recorded(self, navigator):
        navigator.go_to(2)
        navigator.go_to(2)
        navigator.previous()

        assert navigator.visits == [0, 2, 1]

    def test_open_interval_counts_for_current_question(self, navigator, clock):
        clock.advance(3)

        assert navigator.elapsed_for("a") == pytest.approx(3)
        assert navigator.elapsed_for("b") == 0.0

    def test_revisits_accumulate(self, navigator, clock):
        clock.advance(2)
        navigator.next()
        clock.advance(5)
        navigator.previous()
        clock.advance(1)
        navigator.close()

        assert navigator.elapsed_by_question() == {
            "a": pytest.approx(3),
            "b": pytest.approx(5),
            "c": 0.0,
        }

    def test_close_stops_timing(self, navigator, clock):
        clock.advance(2)
        navigator.close()
        clock.advance(100)

        assert navigator.elapsed_for("a") == pytest.approx(2)
