"""
Pytest Configuration for Quiz Service Tests

Provides a deterministic clock and a fake event loop so countdowns can
be advanced without real waiting.
"""
import os
import sys
from datetime import datetime, timedelta

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quiz_service.quiz.models import Question, QuestionKind, QuizConfig, Difficulty
from quiz_service.quiz.session import QuizSession
from quiz_service.quiz.signals import SignalSource


EPOCH = datetime(2026, 1, 1, 9, 0, 0)


class FakeClock:
    """Monotonic clock under test control"""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.origin = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds

    def wall(self) -> datetime:
        return EPOCH + timedelta(seconds=self.now - self.origin)


class FakeHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Implements call_later against a FakeClock"""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self._handles = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.clock.now + delay, lambda: callback(*args))
        self._handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds: float):
        """Run every callback due within the next `seconds`, in time order."""
        target = self.clock.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.when <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._handles.remove(handle)
            self.clock.now = max(self.clock.now, handle.when)
            handle.callback()
        self.clock.now = target


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def loop(clock):
    return FakeLoop(clock)


@pytest.fixture
def signals():
    return SignalSource()


@pytest.fixture
def make_session(clock, loop, signals):
    """Factory for sessions wired to the fake clock and loop"""
    def factory(**kwargs):
        options = {
            "signal_source": signals,
            "loop": loop,
            "clock": clock,
            "wall_clock": clock.wall,
            "tick_interval": 1.0,
        }
        options.update(kwargs)
        return QuizSession(**options)
    return factory


@pytest.fixture
def two_questions():
    """Q1 single-choice correct "B", Q2 binary correct "true" """
    return [
        Question(
            id="Q1",
            kind=QuestionKind.SINGLE_CHOICE,
            prompt="Pick B",
            correct_answer="B",
            choices=("A", "B", "C", "D"),
            explanation="B is right",
        ),
        Question(
            id="Q2",
            kind=QuestionKind.BINARY,
            prompt="The sky is blue",
            correct_answer="true",
            explanation="It is",
        ),
    ]


@pytest.fixture
def mixed_questions():
    return [
        Question(
            id="mcq-1",
            kind=QuestionKind.SINGLE_CHOICE,
            prompt="What is machine learning primarily used for?",
            correct_answer="Pattern recognition and prediction",
            choices=("Data storage", "Pattern recognition and prediction", "File compression", "Network security"),
            difficulty=Difficulty.EASY,
        ),
        Question(
            id="tf-1",
            kind=QuestionKind.BINARY,
            prompt="Neural networks are inspired by the brain.",
            correct_answer="true",
        ),
        Question(
            id="fill-1",
            kind=QuestionKind.FILL_IN,
            prompt="The process of training on labeled data is ____ learning.",
            correct_answer="supervised",
            difficulty=Difficulty.MEDIUM,
        ),
        Question(
            id="short-1",
            kind=QuestionKind.FREE_TEXT,
            prompt="Name the algorithm that minimizes loss by following the negative gradient.",
            correct_answer="Gradient descent",
            difficulty=Difficulty.HARD,
        ),
    ]


@pytest.fixture
def five_second_config():
    return QuizConfig(time_limit_minutes=5 / 60)
