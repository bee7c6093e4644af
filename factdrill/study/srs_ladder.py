"""
Fixed-ladder spaced repetition.

Each (user, fact) pair sits on one rung of an ascending ladder of review
intervals. A correct answer climbs one rung, a wrong answer drops straight
back to the bottom. The bottom rung has a learning buffer: the fact must be
answered correctly ``learning_buffer`` times there before its first
promotion.

Default ladder: 1 → 2 → 3 → 4 → 7 → 14 → 30 days. The top rung is the
steady "mastered" state and never grows.

This module is pure; MasteryStore compiles the same rules into a single
SQL upsert.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from config import Settings, get_settings
from factdrill.core.errors import InvalidConfigurationError

DEFAULT_LADDER: tuple[int, ...] = (1, 2, 3, 4, 7, 14, 30)
DEFAULT_LEARNING_BUFFER = 2


@dataclass(frozen=True)
class MasteryState:
    """Scheduling state of one (user, fact) pair."""

    interval_days: int
    repetitions: int
    next_review_date: date

    def is_due(self, today: date) -> bool:
        return self.next_review_date <= today


@dataclass(frozen=True)
class IntervalLadder:
    """Ladder of review intervals plus the first-rung learning buffer."""

    intervals: tuple[int, ...] = DEFAULT_LADDER
    learning_buffer: int = DEFAULT_LEARNING_BUFFER

    def __post_init__(self) -> None:
        intervals = tuple(self.intervals)
        object.__setattr__(self, "intervals", intervals)
        if not intervals:
            raise InvalidConfigurationError("Interval ladder must not be empty")
        if intervals[0] < 1:
            raise InvalidConfigurationError("Ladder intervals must be at least one day")
        if any(b <= a for a, b in zip(intervals, intervals[1:])):
            raise InvalidConfigurationError(f"Ladder must be strictly ascending: {intervals}")
        if self.learning_buffer < 1:
            raise InvalidConfigurationError("Learning buffer must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> IntervalLadder:
        settings = settings or get_settings()
        return cls(tuple(settings.srs_ladder_days), settings.srs_learning_buffer)

    @property
    def first_interval(self) -> int:
        return self.intervals[0]

    @property
    def mastered_interval(self) -> int:
        return self.intervals[-1]

    @property
    def top_index(self) -> int:
        return len(self.intervals) - 1

    def index_of(self, interval_days: int | None) -> int:
        """Rung of an interval; intervals not on the ladder count as the bottom rung."""
        if interval_days is None:
            return 0
        try:
            return self.intervals.index(interval_days)
        except ValueError:
            return 0

    def promoted_interval(self, interval_days: int | None, repetitions: int) -> int:
        """Interval after a correct answer from (interval_days, repetitions)."""
        current = self.index_of(interval_days)
        new_reps = repetitions + 1
        if current == 0 and new_reps < self.learning_buffer:
            return self.intervals[0]
        return self.intervals[min(current + 1, self.top_index)]

    def transition(
        self,
        state: MasteryState | None,
        is_correct: bool,
        today: date,
    ) -> MasteryState:
        """
        Apply one answer to a mastery state.

        Args:
            state: Current state, or None when the fact was never attempted
            is_correct: Whether the answer was right
            today: Reference date for the next review

        Returns:
            New MasteryState
        """
        if not is_correct:
            return self.lapse(today)

        interval = state.interval_days if state is not None else None
        repetitions = state.repetitions if state is not None else 0
        new_interval = self.promoted_interval(interval, repetitions)
        return MasteryState(
            interval_days=new_interval,
            repetitions=repetitions + 1,
            next_review_date=today + timedelta(days=new_interval),
        )

    def lapse(self, today: date) -> MasteryState:
        """Full demotion after a wrong answer: bottom rung, review tomorrow."""
        return MasteryState(
            interval_days=self.first_interval,
            repetitions=0,
            next_review_date=today + timedelta(days=self.first_interval),
        )
