"""
Question Navigator - Current position and per-question time tracking

Time is attributed to the question on screen: every navigation event
closes the interval for the question being left.
"""

import time
from typing import Callable, Dict, List, Optional


class QuestionNavigator:
    """Tracks the current question index and time spent on each question."""

    def __init__(self, question_ids: List[str], clock: Callable[[], float] = time.monotonic):
        self.question_ids = list(question_ids)
        self._clock = clock
        self._index = 0
        self._entered_at: Optional[float] = None
        self._elapsed: Dict[str, float] = {qid: 0.0 for qid in self.question_ids}
        self.visits: List[int] = []

    @property
    def index(self) -> int:
        return self._index

    @property
    def current_id(self) -> str:
        return self.question_ids[self._index]

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index == len(self.question_ids) - 1

    def open(self) -> None:
        """Start timing the first question."""
        self._index = 0
        self._entered_at = self._clock()
        self.visits.append(0)

    def go_to(self, index: int) -> int:
        """
        Move to a question, clamped to the valid range.

        Returns:
            The index actually shown
        """
        target = min(max(int(index), 0), len(self.question_ids) - 1)
        if target == self._index:
            return target
        self._close_interval()
        self._index = target
        self._entered_at = self._clock()
        self.visits.append(target)
        return target

    def next(self) -> int:
        return self.go_to(self._index + 1)

    def previous(self) -> int:
        return self.go_to(self._index - 1)

    def close(self) -> None:
        """Stop timing; called once when the session is graded."""
        self._close_interval()
        self._entered_at = None

    def elapsed_for(self, question_id: str) -> float:
        total = self._elapsed.get(question_id, 0.0)
        if self._entered_at is not None and question_id == self.current_id:
            total += self._clock() - self._entered_at
        return total

    def elapsed_by_question(self) -> Dict[str, float]:
        return {qid: self.elapsed_for(qid) for qid in self.question_ids}

    def _close_interval(self) -> None:
        if self._entered_at is None:
            return
        now = self._clock()
        self._elapsed[self.current_id] += max(now - self._entered_at, 0.0)
        self._entered_at = now
