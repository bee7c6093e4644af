"""
Practice models.

- QuestionStat: append-only attempt log, one row per answered question
- FactMastery: spaced-repetition state, one row per (user, fact)

Facts are not a table of their own; both models carry the fact inline as
(operand_a, operand_b, operation) with the same orientation as
factdrill.core.facts.Fact.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Float, Index, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from factdrill.core.facts import Fact, Operation

from .base import Base


class QuestionStat(Base):
    """
    One answered question.

    A null session_id marks a practice-only attempt that feeds adaptive
    learning without counting toward game scores.
    """

    __tablename__ = "question_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    session_id: Mapped[str | None] = mapped_column(Text)

    operand_a: Mapped[int] = mapped_column(Integer, nullable=False)
    operand_b: Mapped[int] = mapped_column(Integer, nullable=False)
    operation: Mapped[str] = mapped_column(Text, nullable=False)  # 'multiplication', 'division'

    correct_answer: Mapped[int] = mapped_column(Integer, nullable=False)
    user_answer: Mapped[int | None] = mapped_column(Integer)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
    time_taken: Mapped[float | None] = mapped_column(Float)  # seconds

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_question_stats_user_id", "user_id"),
        Index("idx_question_stats_session_id", "session_id"),
    )

    @property
    def fact(self) -> Fact:
        return Fact(self.operand_a, self.operand_b, Operation.parse(self.operation))

    def __repr__(self) -> str:
        return f"<QuestionStat user={self.user_id} fact={self.operand_a} {self.operation} {self.operand_b} correct={self.is_correct}>"


class FactMastery(Base):
    """
    Spaced-repetition state for one learner and one fact.

    Written only through MasteryStore.record_answer, which upserts the row in
    a single statement.
    """

    __tablename__ = "fact_mastery"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)

    operand_a: Mapped[int] = mapped_column(Integer, nullable=False)
    operand_b: Mapped[int] = mapped_column(Integer, nullable=False)
    operation: Mapped[str] = mapped_column(Text, nullable=False)

    interval_days: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    repetitions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_review_date: Mapped[date] = mapped_column(Date, nullable=False)
    last_reviewed_at: Mapped[datetime | None] = mapped_column(DateTime)

    __table_args__ = (
        UniqueConstraint("user_id", "operand_a", "operand_b", "operation", name="uq_fact_mastery_user_fact"),
        Index("idx_fact_mastery_due", "user_id", "next_review_date"),
    )

    @property
    def fact(self) -> Fact:
        return Fact(self.operand_a, self.operand_b, Operation.parse(self.operation))

    def __repr__(self) -> str:
        return f"<FactMastery user={self.user_id} fact={self.operand_a} {self.operation} {self.operand_b} interval={self.interval_days}>"
