"""
Unit tests for session configuration, presets and game scoring rules.
"""

import pytest

from config import Settings
from factdrill.core.errors import InvalidConfigurationError
from factdrill.core.facts import Fact, Operation
from factdrill.core.scoring import calculate_accuracy, calculate_score, time_for_question
from factdrill.core.session_config import DEFAULT_TABLES, SessionConfig, get_preset


class TestSessionConfig:
    """Tests for SessionConfig normalization and validation."""

    def test_defaults(self):
        config = SessionConfig()
        assert config.allowed_tables == (1, 2, 3, 4, 5, 8, 10)
        assert config.question_count == 20
        assert config.operations == frozenset({Operation.MULTIPLY})

    def test_tables_sorted_and_deduplicated(self):
        assert SessionConfig(allowed_tables=(8, 3, 8)).allowed_tables == (3, 8)

    def test_operation_tags_parsed(self):
        config = SessionConfig(operations=frozenset({"divide", "x"}))
        assert config.operations == frozenset({Operation.DIVIDE, Operation.MULTIPLY})

    def test_empty_tables_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            SessionConfig(allowed_tables=()).validate()

    def test_empty_operations_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            SessionConfig(operations=frozenset()).validate()

    @pytest.mark.parametrize("count", [0, -1])
    def test_non_positive_count_rejected(self, count):
        with pytest.raises(InvalidConfigurationError):
            SessionConfig(question_count=count).validate()

    def test_count_above_maximum_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            SessionConfig(question_count=101).validate(max_question_count=100)
        SessionConfig(question_count=100).validate(max_question_count=100)

    def test_empty_pre_generated_list_rejected(self):
        with pytest.raises(InvalidConfigurationError):
            SessionConfig(questions=[]).validate()

    def test_pre_generated_list_skips_table_checks(self):
        config = SessionConfig(allowed_tables=(), questions=[Fact.multiplication(2, 2).to_question()])
        assert config.validate() is config

    def test_from_settings(self):
        settings = Settings(default_tables=[6, 7], default_question_count=12)
        config = SessionConfig.from_settings(settings, operations=["divide"])

        assert config.allowed_tables == (6, 7)
        assert config.question_count == 12
        assert config.operations == frozenset({Operation.DIVIDE})


class TestPresets:
    def test_child_preset(self):
        config = get_preset("child")
        assert config.allowed_tables == DEFAULT_TABLES
        assert config.time_per_question == 60
        assert config.decrease_time is False

    def test_parent_preset(self):
        config = get_preset("PARENT")
        assert config.time_per_question == 5
        assert config.decrease_time is True

    def test_presets_are_copies(self):
        get_preset("child").question_count = 99
        assert get_preset("child").question_count == 20

    def test_unknown_preset(self):
        with pytest.raises(InvalidConfigurationError):
            get_preset("expert")


class TestScoring:
    """Tests for timing, accuracy and score rules."""

    def test_constant_time(self):
        assert time_for_question(15, 60, decrease_time=False) == 60

    def test_decreasing_time(self):
        assert time_for_question(0, 5, decrease_time=True) == 5
        assert time_for_question(10, 5, decrease_time=True) == pytest.approx(3.0)

    def test_decreasing_time_floor(self):
        assert time_for_question(19, 5, decrease_time=True) == 2

    @pytest.mark.parametrize(
        "correct,total,expected",
        [(0, 0, 0), (2, 8, 25), (1, 8, 13), (20, 20, 100), (2, 3, 67)],
    )
    def test_accuracy(self, correct, total, expected):
        assert calculate_accuracy(correct, total) == expected

    def test_score(self):
        assert calculate_score(correct_answers=15, combo=4, time_bonus=30) == 200
