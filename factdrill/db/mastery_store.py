"""
Mastery store.

Persists one FactMastery row per (user, fact). Every answer is applied with
a single ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING`` statement whose
SET clause evaluates the ladder transition from the row's current columns,
so two answers to the same fact processed at the same time (a second device,
a retried request) can never overwrite each other.

Supported dialects: SQLite (3.35+) and PostgreSQL.
"""

from __future__ import annotations

from datetime import date, timedelta

from loguru import logger
from sqlalchemy import Date, and_, case, func, literal, or_, select
from sqlalchemy.orm import Session, sessionmaker

from factdrill.core.facts import Fact, Operation
from factdrill.db.database import session_scope
from factdrill.db.models import FactMastery
from factdrill.study.srs_ladder import IntervalLadder, MasteryState

_CONFLICT_COLUMNS = ["user_id", "operand_a", "operand_b", "operation"]


def _dialect_insert(dialect_name: str):
    if dialect_name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect_name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"Atomic mastery upsert is not available for {dialect_name}")
    return insert


class MasteryStore:
    """SQLAlchemy-backed mastery records."""

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        ladder: IntervalLadder | None = None,
    ):
        self.session_factory = session_factory
        self.ladder = ladder or IntervalLadder.from_settings()

    # ========================================
    # Writes
    # ========================================

    def record_answer(
        self,
        user_id: str,
        fact: Fact,
        is_correct: bool,
        today: date,
    ) -> MasteryState:
        """
        Apply one answer to the (user, fact) record in a single statement.

        Args:
            user_id: Learner identifier
            fact: The answered fact
            is_correct: Whether the answer was right
            today: Reference date for the next review

        Returns:
            The MasteryState now stored
        """
        # Values used when the row does not exist yet
        first = self.ladder.transition(None, is_correct, today)

        with session_scope(self.session_factory) as session:
            insert = _dialect_insert(session.get_bind().dialect.name)
            stmt = insert(FactMastery).values(
                user_id=user_id,
                operand_a=fact.operand_a,
                operand_b=fact.operand_b,
                operation=fact.operation.value,
                interval_days=first.interval_days,
                repetitions=first.repetitions,
                next_review_date=first.next_review_date,
                last_reviewed_at=func.now(),
            )

            if is_correct:
                interval_expr, next_review_expr = self._promotion_expressions(today)
                set_ = {
                    "interval_days": interval_expr,
                    "repetitions": FactMastery.repetitions + 1,
                    "next_review_date": next_review_expr,
                    "last_reviewed_at": func.now(),
                }
            else:
                # A lapse does not depend on the current row
                set_ = {
                    "interval_days": stmt.excluded.interval_days,
                    "repetitions": stmt.excluded.repetitions,
                    "next_review_date": stmt.excluded.next_review_date,
                    "last_reviewed_at": func.now(),
                }

            stmt = stmt.on_conflict_do_update(index_elements=_CONFLICT_COLUMNS, set_=set_).returning(
                FactMastery.interval_days,
                FactMastery.repetitions,
                FactMastery.next_review_date,
            )
            row = session.execute(stmt).one()

        state = MasteryState(
            interval_days=row.interval_days,
            repetitions=row.repetitions,
            next_review_date=row.next_review_date,
        )
        logger.debug(
            f"Mastery {user_id} {fact}: interval={state.interval_days} "
            f"reps={state.repetitions} next={state.next_review_date}"
        )
        return state

    def _promotion_expressions(self, today: date):
        """
        CASE expressions for (interval_days, next_review_date) after a correct answer.

        Mirrors IntervalLadder.promoted_interval branch for branch.
        """
        ladder = self.ladder.intervals
        top = self.ladder.top_index
        current = FactMastery.interval_days

        on_first_rung = or_(current == ladder[0], current.notin_(ladder))
        branches = [
            (and_(on_first_rung, FactMastery.repetitions + 1 < self.ladder.learning_buffer), ladder[0]),
        ]
        branches.extend((current == value, ladder[min(index + 1, top)]) for index, value in enumerate(ladder))
        # Off-ladder interval whose buffer is satisfied: promote from the bottom rung
        fallback = ladder[min(1, top)]

        interval_expr = case(*[(cond, literal(target)) for cond, target in branches], else_=literal(fallback))
        next_review_expr = case(
            *[(cond, literal(today + timedelta(days=target), Date())) for cond, target in branches],
            else_=literal(today + timedelta(days=fallback), Date()),
        )
        return interval_expr, next_review_expr

    # ========================================
    # Reads
    # ========================================

    def get_state(self, user_id: str, fact: Fact) -> MasteryState | None:
        with session_scope(self.session_factory) as session:
            row = session.scalar(
                select(FactMastery).where(
                    FactMastery.user_id == user_id,
                    FactMastery.operand_a == fact.operand_a,
                    FactMastery.operand_b == fact.operand_b,
                    FactMastery.operation == fact.operation.value,
                )
            )
            if row is None:
                return None
            return MasteryState(row.interval_days, row.repetitions, row.next_review_date)

    def due_facts(self, user_id: str, today: date, limit: int | None = None) -> list[Fact]:
        """Facts whose next review date is today or earlier, most overdue first."""
        query = (
            select(FactMastery.operand_a, FactMastery.operand_b, FactMastery.operation)
            .where(FactMastery.user_id == user_id, FactMastery.next_review_date <= today)
            .order_by(FactMastery.next_review_date.asc(), FactMastery.interval_days.asc(), FactMastery.id)
        )
        if limit is not None:
            query = query.limit(limit)

        with session_scope(self.session_factory) as session:
            rows = session.execute(query).all()
        return [Fact(row.operand_a, row.operand_b, Operation.parse(row.operation)) for row in rows]

    def count_due(self, user_id: str, today: date) -> int:
        with session_scope(self.session_factory) as session:
            return session.scalar(
                select(func.count(FactMastery.id)).where(
                    FactMastery.user_id == user_id,
                    FactMastery.next_review_date <= today,
                )
            ) or 0
