"""
Weighted Question Generator.

Builds practice sessions from table and multiplier weights so that the
"hard" part of the times tables (3 through 9) dominates and trivial facts
(×1, ×2, ×10) still show up now and then.

Weights:
- easy values (1, 2, 10): 0.5
- hard values (3-9): 5
- anything else (11, 12, ...): 1

Algorithm:
1. Every (multiplier, table, operation) combination is copied into a pool
   round(table_weight * multiplier_weight) times, at least once
2. The pool is shuffled and walked, keeping the first fact seen for each
   canonical key
3. If the pool runs dry, bounded weighted redraws look for more unique facts;
   after the ceiling duplicates are accepted so the session is never short
4. The result is shuffled again so pool order never leaks into the session
"""

from __future__ import annotations

import math
import random
from collections.abc import Collection, Iterable

from loguru import logger

from config import get_settings
from factdrill.core.errors import InvalidConfigurationError
from factdrill.core.facts import Fact, FactKey, Operation, Question
from factdrill.core.session_config import SessionConfig

EASY_VALUES = frozenset({1, 2, 10})
HARD_VALUES = frozenset(range(3, 10))

EASY_WEIGHT = 0.5
MEDIUM_WEIGHT = 1.0
HARD_WEIGHT = 5.0

DEFAULT_MULTIPLIER_RANGE = (1, 10)


def value_weight(value: int) -> float:
    """Sampling weight of a table or multiplier."""
    if value in EASY_VALUES:
        return EASY_WEIGHT
    if value in HARD_VALUES:
        return HARD_WEIGHT
    return MEDIUM_WEIGHT


def pool_copies(multiplier: int, table: int) -> int:
    """Copies of a combination in the sampling pool (half-up, never zero)."""
    return max(1, math.floor(value_weight(table) * value_weight(multiplier) + 0.5))


def take_unique(
    pool: Iterable[Fact],
    count: int,
    taken: set[FactKey] | None = None,
) -> list[Fact]:
    """
    Walk ``pool`` and keep up to ``count`` facts whose keys are not in ``taken``.

    ``taken`` is updated in place with every key kept.
    """
    taken = taken if taken is not None else set()
    picked: list[Fact] = []
    for fact in pool:
        if len(picked) >= count:
            break
        if fact.key in taken:
            continue
        picked.append(fact)
        taken.add(fact.key)
    return picked


class WeightedQuestionGenerator:
    """
    Generates arithmetic questions with a deliberate skew toward hard facts.

    Pass a seeded ``random.Random`` for reproducible sessions.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        max_attempts: int | None = None,
    ):
        """
        Initialize generator.

        Args:
            rng: Random source (defaults to a fresh unseeded Random)
            max_attempts: Weighted redraws allowed before duplicates are accepted
        """
        self.rng = rng or random.Random()
        self.max_attempts = (
            max_attempts if max_attempts is not None else get_settings().generator_max_attempts
        )

    # ========================================
    # Pool construction
    # ========================================

    def build_pool(
        self,
        allowed_tables: Iterable[int],
        multipliers: Iterable[int],
        operations: Iterable[Operation],
    ) -> list[Fact]:
        """Materialize every combination proportionally to its weight."""
        pool: list[Fact] = []
        ordered_ops = sorted(operations, key=lambda op: op.value)
        ordered_tables = sorted(allowed_tables)
        for multiplier in multipliers:
            for table in ordered_tables:
                copies = pool_copies(multiplier, table)
                for operation in ordered_ops:
                    fact = Fact.build(multiplier, table, operation)
                    pool.extend([fact] * copies)
        return pool

    # ========================================
    # Session generation
    # ========================================

    def generate_questions(
        self,
        allowed_tables: Collection[int],
        operations: Collection[Operation | str],
        count: int,
        multiplier_range: tuple[int, int] = DEFAULT_MULTIPLIER_RANGE,
    ) -> list[Question]:
        """
        Generate exactly ``count`` questions, avoiding repeated facts.

        Args:
            allowed_tables: Tables to draw from
            operations: Operations to draw from
            count: Number of questions
            multiplier_range: Inclusive (low, high) multiplier bounds

        Returns:
            Shuffled list of questions

        Raises:
            InvalidConfigurationError: On empty tables/operations or count <= 0
        """
        tables, ops, multipliers = self._validated(allowed_tables, operations, multiplier_range)
        if count <= 0:
            raise InvalidConfigurationError(f"Question count must be positive, got {count}")

        pool = self.build_pool(tables, multipliers, ops)
        self.rng.shuffle(pool)

        taken: set[FactKey] = set()
        facts = take_unique(pool, count, taken)

        if len(facts) < count:
            facts.extend(self._redraw(tables, multipliers, ops, count - len(facts), taken))

        questions = [fact.to_question() for fact in facts]
        self.rng.shuffle(questions)
        return questions

    def generate_question(
        self,
        allowed_tables: Collection[int],
        operations: Collection[Operation | str],
        multiplier_range: tuple[int, int] = DEFAULT_MULTIPLIER_RANGE,
    ) -> Question:
        """Draw one question uniformly, ignoring the weighted pool."""
        tables, ops, multipliers = self._validated(allowed_tables, operations, multiplier_range)
        operation = self.rng.choice(ops)
        multiplier = self.rng.choice(multipliers)
        table = self.rng.choice(tables)
        return Fact.build(multiplier, table, operation).to_question()

    def questions_for_config(self, config: SessionConfig) -> list[Question]:
        """Use the config's pre-generated questions, or generate a fresh set."""
        config.validate()
        if config.questions is not None:
            return list(config.questions)
        return self.generate_questions(
            config.allowed_tables,
            config.operations,
            config.question_count,
            config.multiplier_range,
        )

    def weighted_draw(
        self,
        tables: list[int],
        multipliers: list[int],
        operations: list[Operation],
    ) -> Fact:
        """One fact drawn with table and multiplier weights, uniform operation."""
        table = self.rng.choices(tables, weights=[value_weight(t) for t in tables])[0]
        multiplier = self.rng.choices(multipliers, weights=[value_weight(m) for m in multipliers])[0]
        operation = self.rng.choice(operations)
        return Fact.build(multiplier, table, operation)

    # ========================================
    # Internals
    # ========================================

    def _redraw(
        self,
        tables: list[int],
        multipliers: list[int],
        operations: list[Operation],
        needed: int,
        taken: set[FactKey],
    ) -> list[Fact]:
        """Bounded weighted redraws; duplicates are accepted once the ceiling is hit."""
        extra: list[Fact] = []
        attempts = 0
        while len(extra) < needed and attempts < self.max_attempts:
            attempts += 1
            fact = self.weighted_draw(tables, multipliers, operations)
            if fact.key not in taken:
                extra.append(fact)
                taken.add(fact.key)

        shortfall = needed - len(extra)
        if shortfall > 0:
            logger.warning(
                f"Only {len(taken)} unique facts reachable for tables {tables}; "
                f"repeating {shortfall} fact(s) after {attempts} redraws"
            )
            extra.extend(
                self.weighted_draw(tables, multipliers, operations) for _ in range(shortfall)
            )
        return extra

    @staticmethod
    def _validated(
        allowed_tables: Collection[int],
        operations: Collection[Operation | str],
        multiplier_range: tuple[int, int],
    ) -> tuple[list[int], list[Operation], list[int]]:
        if not allowed_tables:
            raise InvalidConfigurationError("At least one table must be selected")
        if not operations:
            raise InvalidConfigurationError("At least one operation must be selected")

        tables = sorted(set(allowed_tables))
        ops = sorted({Operation.parse(op) for op in operations}, key=lambda op: op.value)
        if Operation.DIVIDE in ops and 0 in tables:
            raise InvalidConfigurationError("Table 0 cannot be used for division")

        low, high = multiplier_range
        if low > high:
            raise InvalidConfigurationError(f"Empty multiplier range {low}..{high}")
        return tables, ops, list(range(low, high + 1))
