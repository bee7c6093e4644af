"""
Fact Model.

A fact is one arithmetic combination a learner can practice, such as
``7 × 8`` or ``56 ÷ 8``. Facts are value objects: they are never stored on
their own, only referenced by attempts and mastery records through their
canonical key.

Orientation:
- multiplication: operand_a is the multiplier, operand_b the table
- division: operand_a is the product, operand_b the table, and the
  answer is the implied multiplier
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from factdrill.core.errors import InternalConsistencyError, InvalidFactError

FactKey = tuple[str, int, int]


class Operation(str, Enum):
    """Arithmetic operation of a fact (values match the attempt log tags)."""

    MULTIPLY = "multiplication"
    DIVIDE = "division"

    @classmethod
    def parse(cls, tag: str | Operation) -> Operation:
        """
        Resolve an operation tag from storage, config or the command line.

        Args:
            tag: An Operation or one of its aliases ("multiply", "x", "÷", ...)

        Returns:
            Matching Operation

        Raises:
            InvalidFactError: If the tag is not a known operation
        """
        if isinstance(tag, Operation):
            return tag
        normalized = str(tag).strip().lower()
        for operation, aliases in _ALIASES.items():
            if normalized in aliases:
                return operation
        raise InvalidFactError(f"Unknown operation tag: {tag!r}")

    @property
    def symbol(self) -> str:
        return "×" if self is Operation.MULTIPLY else "÷"


_ALIASES: dict[Operation, set[str]] = {
    Operation.MULTIPLY: {"multiplication", "multiply", "mul", "x", "*", "×"},
    Operation.DIVIDE: {"division", "divide", "div", "/", ":", "÷"},
}


@dataclass(frozen=True)
class Fact:
    """A canonical (operand_a, operand_b, operation) combination."""

    operand_a: int
    operand_b: int
    operation: Operation

    def __post_init__(self) -> None:
        if not isinstance(self.operation, Operation):
            object.__setattr__(self, "operation", Operation.parse(self.operation))
        if self.operation is Operation.DIVIDE:
            if self.operand_b == 0 or self.operand_a % self.operand_b != 0:
                raise InternalConsistencyError(
                    f"Division fact {self.operand_a} ÷ {self.operand_b} has no integer answer"
                )

    @classmethod
    def multiplication(cls, multiplier: int, table: int) -> Fact:
        return cls(multiplier, table, Operation.MULTIPLY)

    @classmethod
    def division(cls, multiplier: int, table: int) -> Fact:
        """Build ``(multiplier * table) ÷ table``."""
        return cls(multiplier * table, table, Operation.DIVIDE)

    @classmethod
    def build(cls, multiplier: int, table: int, operation: Operation) -> Fact:
        """Build a fact of either direction from its multiplier and table."""
        if operation is Operation.DIVIDE:
            return cls.division(multiplier, table)
        return cls.multiplication(multiplier, table)

    @property
    def table(self) -> int:
        return self.operand_b

    @property
    def multiplier(self) -> int:
        if self.operation is Operation.DIVIDE:
            return self.operand_a // self.operand_b
        return self.operand_a

    @property
    def answer(self) -> int:
        if self.operation is Operation.DIVIDE:
            return self.operand_a // self.operand_b
        return self.operand_a * self.operand_b

    @property
    def key(self) -> FactKey:
        """Direction-sensitive deduplication key."""
        return (self.operation.value, self.operand_a, self.operand_b)

    def to_question(self) -> Question:
        return Question(self, self.answer)

    def __str__(self) -> str:
        return f"{self.operand_a} {self.operation.symbol} {self.operand_b}"


@dataclass(frozen=True)
class Question:
    """A fact plus its expected answer, handed to the session runner."""

    fact: Fact
    answer: int

    def __post_init__(self) -> None:
        if self.answer != self.fact.answer:
            raise InternalConsistencyError(
                f"Question {self.fact} carries answer {self.answer}, expected {self.fact.answer}"
            )

    @classmethod
    def from_fact(cls, fact: Fact) -> Question:
        return cls(fact, fact.answer)

    @property
    def num1(self) -> int:
        return self.fact.operand_a

    @property
    def num2(self) -> int:
        return self.fact.operand_b

    @property
    def operation(self) -> Operation:
        return self.fact.operation

    @property
    def key(self) -> FactKey:
        return self.fact.key

    def is_correct(self, response: int | None) -> bool:
        return response is not None and response == self.answer

    def to_dict(self) -> dict:
        """Plain representation for the session runner and JSON output."""
        return {
            "num1": self.num1,
            "num2": self.num2,
            "operation": self.operation.value,
            "answer": self.answer,
        }

    def __str__(self) -> str:
        return f"{self.fact} = {self.answer}"
