"""
Unit tests for the fixed-ladder spaced-repetition rules and the scheduler.

The scheduler tests use an in-memory store so no database is required.
"""

from datetime import date, timedelta

import pytest

from factdrill.core.errors import InvalidConfigurationError, InvalidFactError
from factdrill.core.facts import Fact, Operation
from factdrill.study.scheduler import SpacedRepetitionScheduler, coerce_fact
from factdrill.study.srs_ladder import IntervalLadder, MasteryState

TODAY = date(2026, 3, 2)


class InMemoryMasteryStore:
    """Dict-backed store applying the pure ladder."""

    def __init__(self, ladder: IntervalLadder):
        self.ladder = ladder
        self.rows: dict[tuple, MasteryState] = {}

    def record_answer(self, user_id, fact, is_correct, today):
        key = (user_id, fact.key)
        state = self.ladder.transition(self.rows.get(key), is_correct, today)
        self.rows[key] = state
        return state

    def due_facts(self, user_id, today, limit=None):
        due = [
            Fact(a, b, Operation(op))
            for (uid, (op, a, b)), state in self.rows.items()
            if uid == user_id and state.is_due(today)
        ]
        return due[:limit] if limit is not None else due

    def count_due(self, user_id, today):
        return len(self.due_facts(user_id, today))


class TestIntervalLadder:
    """Tests for ladder transitions."""

    def test_full_progression(self):
        """Correct answers walk 1, 2, 3, 4, 7, 14, 30 and stay at 30."""
        ladder = IntervalLadder()
        state = None
        intervals = []
        for _ in range(10):
            state = ladder.transition(state, True, TODAY)
            intervals.append(state.interval_days)

        assert intervals == [1, 2, 3, 4, 7, 14, 30, 30, 30, 30]
        assert state.repetitions == 10

    def test_first_answer_creates_record_due_tomorrow(self):
        state = IntervalLadder().transition(None, True, TODAY)
        assert state == MasteryState(1, 1, TODAY + timedelta(days=1))

    def test_learning_buffer_holds_first_rung(self):
        """With a buffer of 3 the fact needs three correct answers before leaving day 1."""
        ladder = IntervalLadder(learning_buffer=3)
        state = None
        intervals = []
        for _ in range(4):
            state = ladder.transition(state, True, TODAY)
            intervals.append(state.interval_days)
        assert intervals == [1, 1, 2, 3]

    def test_lapse_resets_to_bottom(self):
        ladder = IntervalLadder()
        state = MasteryState(14, 6, TODAY)
        lapsed = ladder.transition(state, False, TODAY)

        assert lapsed.interval_days == 1
        assert lapsed.repetitions == 0
        assert lapsed.next_review_date == TODAY + timedelta(days=1)

    def test_wrong_first_answer(self):
        state = IntervalLadder().transition(None, False, TODAY)
        assert state == MasteryState(1, 0, TODAY + timedelta(days=1))

    def test_relearning_after_lapse_uses_buffer_again(self):
        ladder = IntervalLadder()
        state = ladder.transition(MasteryState(30, 9, TODAY), False, TODAY)
        state = ladder.transition(state, True, TODAY)
        assert state.interval_days == 1
        state = ladder.transition(state, True, TODAY)
        assert state.interval_days == 2

    def test_off_ladder_interval_treated_as_bottom_rung(self):
        state = IntervalLadder().transition(MasteryState(5, 3, TODAY), True, TODAY)
        assert state.interval_days == 2

    def test_mastered_state_is_steady(self):
        ladder = IntervalLadder()
        state = ladder.transition(MasteryState(30, 7, TODAY), True, TODAY)
        assert state.interval_days == ladder.mastered_interval == 30
        assert state.next_review_date == TODAY + timedelta(days=30)

    def test_is_due(self):
        state = MasteryState(1, 1, TODAY)
        assert state.is_due(TODAY)
        assert state.is_due(TODAY + timedelta(days=3))
        assert not state.is_due(TODAY - timedelta(days=1))

    @pytest.mark.parametrize(
        "intervals,buffer",
        [((), 2), ((0, 1), 2), ((1, 3, 2), 2), ((1, 2), 0)],
    )
    def test_invalid_ladders_rejected(self, intervals, buffer):
        with pytest.raises(InvalidConfigurationError):
            IntervalLadder(intervals, buffer)


class TestCoerceFact:
    def test_accepts_tuple(self):
        assert coerce_fact((7, 8, "multiplication")) == Fact.multiplication(7, 8)

    def test_accepts_dict(self):
        assert coerce_fact({"num1": 56, "num2": 8, "operation": "division"}) == Fact.division(7, 8)

    def test_unknown_operation(self):
        with pytest.raises(InvalidFactError):
            coerce_fact((7, 8, "power"))

    def test_malformed_operands(self):
        with pytest.raises(InvalidFactError):
            coerce_fact({"num1": 7})
        with pytest.raises(InvalidFactError):
            coerce_fact((55, 8, "division"))


class TestSpacedRepetitionScheduler:
    """Tests for the scheduler over an in-memory store."""

    @pytest.fixture
    def store(self):
        return InMemoryMasteryStore(IntervalLadder())

    def test_new_fact_due_tomorrow_not_today(self, store):
        scheduler = SpacedRepetitionScheduler(store, clock=lambda: TODAY)
        scheduler.record_answer("alice", Fact.multiplication(7, 8), True)

        assert scheduler.get_due_facts("alice") == []
        tomorrow = SpacedRepetitionScheduler(store, clock=lambda: TODAY + timedelta(days=1))
        assert tomorrow.get_due_facts("alice") == [Fact.multiplication(7, 8)]
        assert tomorrow.get_due_count("alice") == 1

    def test_users_are_independent(self, store):
        scheduler = SpacedRepetitionScheduler(store, clock=lambda: TODAY)
        scheduler.record_answer("alice", Fact.multiplication(7, 8), True)

        later = SpacedRepetitionScheduler(store, clock=lambda: TODAY + timedelta(days=5))
        assert later.get_due_facts("bob") == []

    def test_unknown_operation_rejected_before_store(self, store):
        scheduler = SpacedRepetitionScheduler(store, clock=lambda: TODAY)
        with pytest.raises(InvalidFactError):
            scheduler.record_answer("alice", (7, 8, "power"), True)
        assert store.rows == {}

    def test_transition_is_pure(self, store):
        scheduler = SpacedRepetitionScheduler(store, clock=lambda: TODAY)
        state = scheduler.transition(None, True)
        assert state.next_review_date == TODAY + timedelta(days=1)
        assert store.rows == {}
