"""
Practice Service.

Provides high-level operations for the CLI and the surrounding app:
- Compose plain, adaptive (weak-area) and due-review sessions
- Record answers into the attempt log and the spaced-repetition schedule
- Report whether review is needed today

Storage failures while fetching weak or due facts are treated as transient:
the session falls back to plain weighted practice instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from config import Settings, get_settings
from factdrill.core.facts import Fact, Question
from factdrill.core.session_config import SessionConfig
from factdrill.db.attempt_log import AttemptLog
from factdrill.db.mastery_store import MasteryStore
from factdrill.generation.question_generator import WeightedQuestionGenerator
from factdrill.study.composer import SessionComposer
from factdrill.study.scheduler import SpacedRepetitionScheduler, coerce_fact
from factdrill.study.srs_ladder import IntervalLadder, MasteryState
from factdrill.study.weak_facts import WeakFactAggregator, WeakFactSummary


@dataclass
class PracticeSession:
    """Questions for one session plus how they were chosen."""

    mode: str  # 'plain', 'adaptive', 'due'
    questions: list[Question]
    requested_mode: str
    fallback_reason: str | None = None
    weak_facts: list[WeakFactSummary] = field(default_factory=list)

    @property
    def is_fallback(self) -> bool:
        return self.mode != self.requested_mode


@dataclass
class AnswerOutcome:
    """Result of recording one answer."""

    fact: Fact
    is_correct: bool
    mastery: MasteryState


@dataclass
class LearningStatus:
    """What the home screen needs to decide which practice to offer."""

    user_id: str
    date: date
    due_count: int
    weak_fact_count: int
    has_enough_data: bool

    @property
    def learning_needed(self) -> bool:
        return self.due_count > 0


class PracticeService:
    """
    High-level service for practice operations.

    Coordinates between the attempt log, mastery store, generator and composer.
    """

    def __init__(
        self,
        attempt_log: AttemptLog | None = None,
        mastery_store: MasteryStore | None = None,
        generator: WeightedQuestionGenerator | None = None,
        settings: Settings | None = None,
        scheduler: SpacedRepetitionScheduler | None = None,
    ):
        """
        Initialize practice service.

        Args:
            attempt_log: Attempt log (defaults to the configured database)
            mastery_store: Mastery store (defaults to the configured database)
            generator: Question generator (seed its Random for reproducible sessions)
            settings: Application settings
            scheduler: Scheduler (defaults to one wrapping mastery_store)
        """
        self.settings = settings or get_settings()
        ladder = IntervalLadder.from_settings(self.settings)

        self.attempt_log = attempt_log or AttemptLog()
        self.mastery_store = mastery_store or MasteryStore(ladder=ladder)
        self.generator = generator or WeightedQuestionGenerator(
            max_attempts=self.settings.generator_max_attempts
        )
        self.composer = SessionComposer(
            self.generator,
            weak_ratio=self.settings.adaptive_weak_ratio,
            max_attempts=self.settings.generator_max_attempts,
        )
        self.scheduler = scheduler or SpacedRepetitionScheduler(self.mastery_store, ladder)
        self.aggregator = WeakFactAggregator(
            self.attempt_log,
            min_seen=self.settings.weak_fact_min_seen,
            min_weak_facts=self.settings.weak_fact_min_count,
        )

    # ========================================
    # Sessions
    # ========================================

    def plain_session(self, config: SessionConfig) -> PracticeSession:
        config.validate(self.settings.max_question_count)
        return PracticeSession(
            mode="plain",
            requested_mode="plain",
            questions=self.generator.questions_for_config(config),
        )

    def adaptive_session(self, user_id: str, config: SessionConfig) -> PracticeSession:
        """
        Weak-area session, or plain practice when there is not enough history.

        Args:
            user_id: Learner identifier
            config: Session configuration

        Returns:
            PracticeSession (mode 'plain' when it fell back)
        """
        config.validate(self.settings.max_question_count)
        try:
            ranked = self.aggregator.get_weak_facts(user_id, None)
        except SQLAlchemyError as e:
            logger.warning(f"Weak facts unavailable for {user_id}, using plain practice: {e}")
            return self._fallback(config, "adaptive", "storage_error")

        if len(ranked) < self.aggregator.min_weak_facts:
            logger.info(
                f"{user_id} has {len(ranked)} ranked facts "
                f"(need {self.aggregator.min_weak_facts}); using plain practice"
            )
            return self._fallback(config, "adaptive", "not_enough_data")

        weak_facts = ranked[: self.settings.weak_fact_limit]
        return PracticeSession(
            mode="adaptive",
            requested_mode="adaptive",
            questions=self.composer.compose_adaptive_session(config, weak_facts),
            weak_facts=weak_facts,
        )

    def due_session(self, user_id: str, config: SessionConfig) -> PracticeSession:
        """Review session of today's due facts (plain practice if the store fails)."""
        config.validate(self.settings.max_question_count)
        try:
            due = self.scheduler.get_due_facts(user_id)
        except SQLAlchemyError as e:
            logger.warning(f"Due facts unavailable for {user_id}, using plain practice: {e}")
            return self._fallback(config, "due", "storage_error")

        return PracticeSession(
            mode="due",
            requested_mode="due",
            questions=self.composer.compose_due_session(config, due),
        )

    def _fallback(self, config: SessionConfig, requested: str, reason: str) -> PracticeSession:
        return PracticeSession(
            mode="plain",
            requested_mode=requested,
            questions=self.generator.questions_for_config(config),
            fallback_reason=reason,
        )

    # ========================================
    # Answers
    # ========================================

    def record_answer(
        self,
        user_id: str,
        question: Question | Fact | tuple | dict,
        user_answer: int | None = None,
        is_correct: bool | None = None,
        latency: float | None = None,
        session_id: str | None = None,
    ) -> AnswerOutcome:
        """
        Log an answered question and move its fact on the review ladder.

        Pass either ``user_answer`` (checked against the fact) or ``is_correct``.
        """
        fact = question.fact if isinstance(question, Question) else coerce_fact(question)
        if is_correct is None:
            is_correct = user_answer is not None and user_answer == fact.answer

        self.attempt_log.append_attempt(
            user_id,
            fact,
            is_correct,
            latency=latency,
            user_answer=user_answer,
            session_id=session_id,
        )
        mastery = self.scheduler.record_answer(user_id, fact, is_correct)
        return AnswerOutcome(fact=fact, is_correct=is_correct, mastery=mastery)

    # ========================================
    # Status
    # ========================================

    def learning_status(self, user_id: str) -> LearningStatus:
        due_count = self.scheduler.get_due_count(user_id)
        ranked = self.aggregator.get_weak_facts(user_id, None)
        return LearningStatus(
            user_id=user_id,
            date=self.scheduler.today(),
            due_count=due_count,
            weak_fact_count=len(ranked),
            has_enough_data=len(ranked) >= self.aggregator.min_weak_facts,
        )
