"""
Attempt log repository.

Append-only access to the question_stats table. Rows are inserted once per
answered question and never updated or deleted here.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger
from sqlalchemy import Float, case, cast, func, select
from sqlalchemy.orm import Session, sessionmaker

from factdrill.core.facts import Fact, Operation
from factdrill.core.records import AttemptRecord
from factdrill.db.database import session_scope
from factdrill.db.models import QuestionStat
from factdrill.study.weak_facts import WeakFactSummary


class AttemptLog:
    """SQLAlchemy-backed attempt log."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None):
        self.session_factory = session_factory

    def append_attempt(
        self,
        user_id: str,
        fact: Fact,
        is_correct: bool,
        latency: float | None = None,
        user_answer: int | None = None,
        session_id: str | None = None,
        attempted_at: datetime | None = None,
    ) -> AttemptRecord:
        """
        Append one answered question.

        Args:
            user_id: Learner identifier
            fact: The fact that was asked
            is_correct: Whether the answer was right
            latency: Seconds taken to answer
            user_answer: The learner's answer (None when time ran out)
            session_id: Game session, or None for practice-only attempts
            attempted_at: Timestamp (defaults to the database clock)

        Returns:
            The stored AttemptRecord
        """
        row = QuestionStat(
            user_id=user_id,
            session_id=session_id,
            operand_a=fact.operand_a,
            operand_b=fact.operand_b,
            operation=fact.operation.value,
            correct_answer=fact.answer,
            user_answer=user_answer,
            is_correct=is_correct,
            time_taken=latency,
        )
        if attempted_at is not None:
            row.created_at = attempted_at

        with session_scope(self.session_factory) as session:
            session.add(row)
            session.flush()
            session.refresh(row)
            record = self._to_record(row)

        logger.debug(f"Logged attempt {fact} for {user_id}: {'correct' if is_correct else 'wrong'}")
        return record

    def attempts_for_user(self, user_id: str) -> list[AttemptRecord]:
        """All attempts by a user, oldest first."""
        with session_scope(self.session_factory) as session:
            rows = session.scalars(
                select(QuestionStat)
                .where(QuestionStat.user_id == user_id)
                .order_by(QuestionStat.created_at, QuestionStat.id)
            ).all()
            return [self._to_record(row) for row in rows]

    def weak_fact_summaries(
        self,
        user_id: str,
        min_seen: int = 2,
        limit: int | None = None,
    ) -> list[WeakFactSummary]:
        """
        Aggregate a user's attempts per fact in the database.

        Ordering: accuracy ascending, then incorrect count descending.

        Args:
            user_id: Learner identifier
            min_seen: Facts attempted fewer times are left out
            limit: Maximum rows (None = all)

        Returns:
            Ranked WeakFactSummary list
        """
        times_seen = func.count(QuestionStat.id)
        times_correct = func.sum(case((QuestionStat.is_correct, 1), else_=0))
        times_incorrect = func.sum(case((QuestionStat.is_correct, 0), else_=1))
        accuracy = cast(times_correct, Float) / times_seen
        avg_latency = func.avg(QuestionStat.time_taken)

        query = (
            select(
                QuestionStat.operand_a,
                QuestionStat.operand_b,
                QuestionStat.operation,
                times_seen.label("times_seen"),
                times_correct.label("times_correct"),
                times_incorrect.label("times_incorrect"),
                avg_latency.label("avg_latency"),
            )
            .where(QuestionStat.user_id == user_id)
            .group_by(QuestionStat.operand_a, QuestionStat.operand_b, QuestionStat.operation)
            .having(times_seen >= min_seen)
            .order_by(
                accuracy.asc(),
                times_incorrect.desc(),
                QuestionStat.operation,
                QuestionStat.operand_a,
                QuestionStat.operand_b,
            )
        )
        if limit is not None:
            query = query.limit(limit)

        with session_scope(self.session_factory) as session:
            rows = session.execute(query).all()

        return [
            WeakFactSummary(
                fact=Fact(row.operand_a, row.operand_b, Operation.parse(row.operation)),
                times_seen=int(row.times_seen),
                times_incorrect=int(row.times_incorrect),
                accuracy_rate=int(row.times_correct) / int(row.times_seen),
                avg_latency=float(row.avg_latency) if row.avg_latency is not None else None,
            )
            for row in rows
        ]

    @staticmethod
    def _to_record(row: QuestionStat) -> AttemptRecord:
        return AttemptRecord(
            user_id=row.user_id,
            fact=row.fact,
            is_correct=row.is_correct,
            latency=row.time_taken,
            timestamp=row.created_at,
            user_answer=row.user_answer,
            session_id=row.session_id,
        )
