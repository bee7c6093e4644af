"""
Unit tests for the weighted question generator.

No database required; every test uses a seeded Random.
"""

import random
from collections import Counter

import pytest

from factdrill.core.errors import InvalidConfigurationError
from factdrill.core.facts import Fact, Operation, Question
from factdrill.core.session_config import SessionConfig
from factdrill.generation.question_generator import (
    WeightedQuestionGenerator,
    pool_copies,
    take_unique,
    value_weight,
)

ALL_TABLES = list(range(1, 11))


class TestWeights:
    """Tests for value weights and pool copies."""

    @pytest.mark.parametrize("value", [1, 2, 10])
    def test_easy_values(self, value):
        assert value_weight(value) == 0.5

    @pytest.mark.parametrize("value", [3, 4, 5, 6, 7, 8, 9])
    def test_hard_values(self, value):
        assert value_weight(value) == 5

    @pytest.mark.parametrize("value", [0, 11, 12])
    def test_values_outside_the_range_are_medium(self, value):
        assert value_weight(value) == 1

    def test_pool_copies(self):
        assert pool_copies(7, 8) == 25  # hard × hard
        assert pool_copies(7, 10) == 3  # 2.5 rounds half-up
        assert pool_copies(1, 2) == 1  # 0.25 never drops to zero
        assert pool_copies(11, 10) == 1  # 0.5 rounds up


class TestTakeUnique:
    def test_skips_repeats_and_updates_taken(self):
        a, b = Fact.multiplication(3, 4), Fact.multiplication(4, 3)
        taken = {a.key}
        picked = take_unique([a, b, b, a], 5, taken)
        assert picked == [b]
        assert taken == {a.key, b.key}

    def test_stops_at_count(self):
        facts = [Fact.multiplication(m, 3) for m in range(1, 11)]
        assert len(take_unique(facts, 4)) == 4


class TestGenerateQuestions:
    """Tests for full-session generation."""

    def test_exact_count_without_duplicates(self, rng):
        """Tables 1-10 easily supply 20 distinct facts."""
        generator = WeightedQuestionGenerator(rng=rng)
        questions = generator.generate_questions(ALL_TABLES, [Operation.MULTIPLY], 20)

        assert len(questions) == 20
        assert len({q.key for q in questions}) == 20

    def test_answers_are_correct(self, rng):
        generator = WeightedQuestionGenerator(rng=rng)
        questions = generator.generate_questions(ALL_TABLES, ["multiply", "divide"], 50)

        for question in questions:
            if question.operation is Operation.MULTIPLY:
                assert question.answer == question.num1 * question.num2
            else:
                assert question.num1 % question.num2 == 0
                assert question.answer == question.num1 // question.num2

    def test_only_allowed_tables_and_operations(self, rng):
        generator = WeightedQuestionGenerator(rng=rng)
        questions = generator.generate_questions([3, 8], [Operation.DIVIDE], 15)

        assert {q.fact.table for q in questions} <= {3, 8}
        assert {q.operation for q in questions} == {Operation.DIVIDE}

    def test_hard_facts_dominate(self):
        """Across many sessions the 3-9 block is drawn far more often than ×1/×2/×10."""
        generator = WeightedQuestionGenerator(rng=random.Random(42))
        tables = Counter()
        for _ in range(200):
            for question in generator.generate_questions(ALL_TABLES, [Operation.MULTIPLY], 10):
                tables[question.fact.table] += 1

        hard = sum(tables[t] for t in range(3, 10)) / 7
        easy = sum(tables[t] for t in (1, 2, 10)) / 3
        assert hard > 3 * easy

    def test_small_table_set_falls_back_to_duplicates(self, rng):
        """One table has only ten distinct facts; 25 questions are still returned."""
        generator = WeightedQuestionGenerator(rng=rng, max_attempts=50)
        questions = generator.generate_questions([7], [Operation.MULTIPLY], 25)

        assert len(questions) == 25
        assert len({q.key for q in questions}) == 10

    def test_same_seed_same_session(self):
        first = WeightedQuestionGenerator(rng=random.Random(7)).generate_questions(ALL_TABLES, ["x"], 20)
        second = WeightedQuestionGenerator(rng=random.Random(7)).generate_questions(ALL_TABLES, ["x"], 20)
        assert first == second

    def test_empty_tables_rejected(self, rng):
        with pytest.raises(InvalidConfigurationError):
            WeightedQuestionGenerator(rng=rng).generate_questions([], [Operation.MULTIPLY], 10)

    def test_empty_operations_rejected(self, rng):
        with pytest.raises(InvalidConfigurationError):
            WeightedQuestionGenerator(rng=rng).generate_questions([3], [], 10)

    @pytest.mark.parametrize("count", [0, -3])
    def test_non_positive_count_rejected(self, rng, count):
        with pytest.raises(InvalidConfigurationError):
            WeightedQuestionGenerator(rng=rng).generate_questions([3], [Operation.MULTIPLY], count)

    def test_division_by_table_zero_rejected(self, rng):
        with pytest.raises(InvalidConfigurationError):
            WeightedQuestionGenerator(rng=rng).generate_questions([0, 3], [Operation.DIVIDE], 5)


class TestQuestionsForConfig:
    def test_pre_generated_questions_bypass_generation(self, rng):
        fixed = [Fact.multiplication(9, 9).to_question(), Fact.division(3, 3).to_question()]
        config = SessionConfig(questions=fixed)

        assert WeightedQuestionGenerator(rng=rng).questions_for_config(config) == fixed

    def test_generates_from_config(self, rng):
        config = SessionConfig(allowed_tables=(2, 5), question_count=8)
        questions = WeightedQuestionGenerator(rng=rng).questions_for_config(config)

        assert len(questions) == 8
        assert all(isinstance(q, Question) for q in questions)

    def test_generate_question_single_draw(self, rng):
        question = WeightedQuestionGenerator(rng=rng).generate_question([6], [Operation.MULTIPLY])
        assert question.fact.table == 6
        assert 1 <= question.fact.multiplier <= 10
