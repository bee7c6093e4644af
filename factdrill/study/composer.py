"""
Adaptive Session Composer.

Blends weak facts, due facts and normally generated facts into one
session's question list.

Adaptive sessions (weak-area practice):
- ~70% of the questions come from the learner's weak facts, sampled from a
  pool where each fact is repeated by severity:
    accuracy < 50%  -> 10 copies
    accuracy < 75%  -> 5 copies
    accuracy < 90%  -> 3 copies
    otherwise       -> 1 copy
- the rest come from the weighted generator, for variety
- single-question draws top the session up if deduplication left it short
- no fact appears twice unless the configuration cannot supply enough
  distinct facts

Due sessions ("review what's due today") turn each due fact straight into
a question, capped at the session size.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from config import get_settings
from factdrill.core.facts import Fact, FactKey, Question
from factdrill.core.session_config import SessionConfig
from factdrill.generation.question_generator import WeightedQuestionGenerator, take_unique
from factdrill.study.weak_facts import WeakFactSummary

# (accuracy upper bound, pool copies), checked in order
SEVERITY_WEIGHTS: tuple[tuple[float, int], ...] = (
    (0.5, 10),
    (0.75, 5),
    (0.9, 3),
)
BASE_SEVERITY_WEIGHT = 1


def severity_weight(accuracy_rate: float) -> int:
    """Pool copies for a weak fact with the given accuracy."""
    for upper_bound, weight in SEVERITY_WEIGHTS:
        if accuracy_rate < upper_bound:
            return weight
    return BASE_SEVERITY_WEIGHT


@dataclass
class SessionComposition:
    """Questions of an adaptive session grouped by where they came from."""

    weak: list[Question] = field(default_factory=list)
    generated: list[Question] = field(default_factory=list)
    top_up: list[Question] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.weak) + len(self.generated) + len(self.top_up)

    def all_questions(self) -> list[Question]:
        return self.weak + self.generated + self.top_up

    def summary(self) -> dict:
        total = self.total
        return {
            "total_questions": total,
            "weak_questions": len(self.weak),
            "generated_questions": len(self.generated),
            "top_up_questions": len(self.top_up),
            "weak_ratio": len(self.weak) / total if total > 0 else 0,
        }


class SessionComposer:
    """
    Builds adaptive and due-review sessions.

    The algorithm:
    1. Without weak facts, delegate to the weighted generator
    2. Sample unique weak facts from a severity-weighted pool
    3. Fill the remainder from the weighted generator, skipping repeats
    4. Top up with single draws if still short
    5. Shuffle
    """

    def __init__(
        self,
        generator: WeightedQuestionGenerator | None = None,
        weak_ratio: float | None = None,
        max_attempts: int | None = None,
    ):
        """
        Initialize composer.

        Args:
            generator: Question generator (shares its random source with the composer)
            weak_ratio: Share of the session drawn from weak facts (default 0.7)
            max_attempts: Single-draw top-ups tried before repeats are accepted
        """
        settings = get_settings()
        self.generator = generator or WeightedQuestionGenerator()
        self.weak_ratio = weak_ratio if weak_ratio is not None else settings.adaptive_weak_ratio
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.generator_max_attempts
        )

    @property
    def rng(self) -> random.Random:
        return self.generator.rng

    # ========================================
    # Adaptive (weak-area) sessions
    # ========================================

    def weak_target(self, question_count: int, weak_fact_count: int) -> int:
        """Questions to draw from weak facts (half-up rounding, capped by what exists)."""
        return min(int(question_count * self.weak_ratio + 0.5), weak_fact_count)

    def build_weak_pool(self, weak_facts: Sequence[WeakFactSummary]) -> list[Fact]:
        pool: list[Fact] = []
        for summary in weak_facts:
            pool.extend([summary.fact] * severity_weight(summary.accuracy_rate))
        return pool

    def build_adaptive_composition(
        self,
        config: SessionConfig,
        weak_facts: Sequence[WeakFactSummary],
    ) -> SessionComposition:
        """Select an adaptive session's questions, grouped by source (unshuffled)."""
        config.validate()
        composition = SessionComposition()

        if config.questions is not None or not weak_facts:
            composition.generated = self.generator.questions_for_config(config)
            return composition

        count = config.question_count
        taken: set[FactKey] = set()

        pool = self.build_weak_pool(weak_facts)
        self.rng.shuffle(pool)
        target = self.weak_target(count, len({s.fact.key for s in weak_facts}))
        composition.weak = [fact.to_question() for fact in take_unique(pool, target, taken)]

        remaining = count - len(composition.weak)
        if remaining > 0:
            generated = self.generator.generate_questions(
                config.allowed_tables,
                config.operations,
                remaining,
                config.multiplier_range,
            )
            for question in generated:
                if question.key not in taken:
                    composition.generated.append(question)
                    taken.add(question.key)

        composition.top_up = self._top_up(config, count - composition.total, taken)

        logger.info(
            f"Composed adaptive session: {len(composition.weak)} weak, "
            f"{len(composition.generated)} generated, {len(composition.top_up)} top-up "
            f"(from {len(weak_facts)} weak facts)"
        )
        return composition

    def compose_adaptive_session(
        self,
        config: SessionConfig,
        weak_facts: Sequence[WeakFactSummary],
    ) -> list[Question]:
        """
        Build a weak-area practice session.

        Args:
            config: Session configuration
            weak_facts: Ranked weak facts (may be empty)

        Returns:
            Shuffled list of config.question_count questions

        Raises:
            InvalidConfigurationError: If the configuration is invalid
        """
        questions = self.build_adaptive_composition(config, weak_facts).all_questions()
        self.rng.shuffle(questions)
        return questions

    # ========================================
    # Due-review sessions
    # ========================================

    def compose_due_session(self, config: SessionConfig, due_facts: Sequence[Fact]) -> list[Question]:
        """
        Turn due facts into a review session.

        Each due fact becomes one question in its stored direction; the list
        is capped at config.question_count and shuffled. No due facts means an
        empty session.
        """
        config.validate()
        taken: set[FactKey] = set()
        facts = take_unique(due_facts, config.question_count, taken)
        questions = [Question.from_fact(fact) for fact in facts]
        self.rng.shuffle(questions)

        logger.info(f"Composed due session: {len(questions)} of {len(due_facts)} due facts")
        return questions

    # ========================================
    # Internals
    # ========================================

    def _top_up(self, config: SessionConfig, needed: int, taken: set[FactKey]) -> list[Question]:
        extra: list[Question] = []
        attempts = 0
        while len(extra) < needed and attempts < self.max_attempts:
            attempts += 1
            question = self.generator.generate_question(
                config.allowed_tables, config.operations, config.multiplier_range
            )
            if question.key not in taken:
                extra.append(question)
                taken.add(question.key)

        shortfall = needed - len(extra)
        if shortfall > 0:
            logger.warning(
                f"Adaptive session short of {shortfall} distinct fact(s) after {attempts} draws; "
                f"repeating facts"
            )
            extra.extend(
                self.generator.generate_question(
                    config.allowed_tables, config.operations, config.multiplier_range
                )
                for _ in range(shortfall)
            )
        return extra
