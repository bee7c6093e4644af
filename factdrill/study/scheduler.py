"""
Spaced-Repetition Scheduler.

Per-(user, fact) mastery state machine over a fixed interval ladder.

States are rungs 0..6 of [1, 2, 3, 4, 7, 14, 30] days:
- correct: climb one rung (rung 0 needs two correct answers first)
- incorrect: back to rung 0, repetitions reset, review tomorrow
- rung 6 (30 days) is the steady "mastered" state

"Due" is computed on demand by comparing next_review_date with today;
nothing in this module runs on a timer.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Protocol

from loguru import logger

from factdrill.core.dates import local_today
from factdrill.core.errors import InternalConsistencyError, InvalidFactError
from factdrill.core.facts import Fact, Operation
from factdrill.study.srs_ladder import IntervalLadder, MasteryState


class MasteryRecordStore(Protocol):
    """Storage contract: one atomic upsert per answer plus due-date reads."""

    def record_answer(self, user_id: str, fact: Fact, is_correct: bool, today: date) -> MasteryState: ...

    def due_facts(self, user_id: str, today: date, limit: int | None = None) -> list[Fact]: ...

    def count_due(self, user_id: str, today: date) -> int: ...


def coerce_fact(value: Fact | tuple | dict) -> Fact:
    """
    Accept a Fact, an (a, b, operation) tuple or a {num1, num2, operation} dict.

    Raises:
        InvalidFactError: Unknown operation tag or operands that do not form a fact
    """
    if isinstance(value, Fact):
        return value
    try:
        if isinstance(value, dict):
            operand_a, operand_b, tag = value["num1"], value["num2"], value["operation"]
        else:
            operand_a, operand_b, tag = value
        return Fact(int(operand_a), int(operand_b), Operation.parse(tag))
    except InvalidFactError:
        raise
    except (InternalConsistencyError, KeyError, TypeError, ValueError) as e:
        raise InvalidFactError(f"Not a valid fact: {value!r} ({e})") from e


class SpacedRepetitionScheduler:
    """
    Applies answers to mastery records and answers "what is due today".

    The scheduler never reads a record and writes it back; every answer is a
    single store.record_answer call.
    """

    def __init__(
        self,
        store: MasteryRecordStore,
        ladder: IntervalLadder | None = None,
        clock: Callable[[], date] | None = None,
    ):
        """
        Initialize scheduler.

        Args:
            store: Mastery record store (MasteryStore in production)
            ladder: Interval ladder (defaults to settings)
            clock: Returns today's date (defaults to the configured timezone)
        """
        self.store = store
        self.ladder = ladder or IntervalLadder.from_settings()
        self.clock = clock or local_today

    def today(self) -> date:
        return self.clock()

    def transition(
        self,
        state: MasteryState | None,
        is_correct: bool,
        today: date | None = None,
    ) -> MasteryState:
        """Pure state transition, without touching the store."""
        return self.ladder.transition(state, is_correct, today or self.today())

    def record_answer(self, user_id: str, fact: Fact | tuple | dict, is_correct: bool) -> MasteryState:
        """
        Apply one answer to the learner's record for ``fact``.

        Args:
            user_id: Learner identifier
            fact: Answered fact
            is_correct: Whether the answer was right

        Returns:
            New MasteryState

        Raises:
            InvalidFactError: If the fact is malformed or has an unknown operation
        """
        fact = coerce_fact(fact)
        state = self.store.record_answer(user_id, fact, is_correct, self.today())
        if state.interval_days == self.ladder.mastered_interval and is_correct:
            logger.info(f"{user_id} has mastered {fact} ({state.repetitions} correct in a row)")
        return state

    def get_due_facts(self, user_id: str, limit: int | None = None) -> list[Fact]:
        """Facts whose next review date is today or earlier."""
        return self.store.due_facts(user_id, self.today(), limit)

    def get_due_count(self, user_id: str) -> int:
        return self.store.count_due(user_id, self.today())
