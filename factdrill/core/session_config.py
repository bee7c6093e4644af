"""
Session configuration supplied by the game runner.

A session config names the tables and operations to drill, how many
questions to ask and how much time each one gets. When the caller already
holds a question list (for example a parent-authored test), it can pass it
through ``questions`` and the generator is bypassed entirely.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from config import Settings, get_settings
from factdrill.core.errors import InvalidConfigurationError
from factdrill.core.facts import Operation, Question

# Tables offered by default in both game modes
DEFAULT_TABLES: tuple[int, ...] = (1, 2, 3, 4, 5, 8, 10)


@dataclass
class SessionConfig:
    """Configuration for one practice session."""

    allowed_tables: tuple[int, ...] = DEFAULT_TABLES
    question_count: int = 20
    time_per_question: float = 60.0  # seconds
    decrease_time: bool = False
    operations: frozenset[Operation] = frozenset({Operation.MULTIPLY})
    multiplier_range: tuple[int, int] = (1, 10)
    questions: list[Question] | None = None

    def __post_init__(self) -> None:
        self.allowed_tables = tuple(sorted(set(self.allowed_tables)))
        self.operations = frozenset(Operation.parse(op) for op in self.operations)

    @property
    def multipliers(self) -> range:
        low, high = self.multiplier_range
        return range(low, high + 1)

    def validate(self, max_question_count: int | None = None) -> SessionConfig:
        """
        Reject configurations that cannot produce a session.

        Args:
            max_question_count: Upper bound on question_count (None = unbounded)

        Returns:
            self, for chaining

        Raises:
            InvalidConfigurationError: On empty tables/operations or a bad count
        """
        if self.questions is not None:
            if not self.questions:
                raise InvalidConfigurationError("Pre-generated question list is empty")
            return self

        if not self.allowed_tables:
            raise InvalidConfigurationError("At least one table must be selected")
        if not self.operations:
            raise InvalidConfigurationError("At least one operation must be selected")
        if self.question_count <= 0:
            raise InvalidConfigurationError(
                f"Question count must be positive, got {self.question_count}"
            )
        if max_question_count is not None and self.question_count > max_question_count:
            raise InvalidConfigurationError(
                f"Question count must be at most {max_question_count}, got {self.question_count}"
            )
        if 0 in self.allowed_tables and Operation.DIVIDE in self.operations:
            raise InvalidConfigurationError("Table 0 cannot be used for division")

        low, high = self.multiplier_range
        if low > high:
            raise InvalidConfigurationError(f"Empty multiplier range {low}..{high}")
        if self.time_per_question <= 0:
            raise InvalidConfigurationError("Time per question must be positive")
        return self

    def with_count(self, question_count: int) -> SessionConfig:
        return replace(self, question_count=question_count)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        tables: Iterable[int] | None = None,
        operations: Iterable[Operation | str] | None = None,
        question_count: int | None = None,
    ) -> SessionConfig:
        """Build a config from application settings plus explicit overrides."""
        settings = settings or get_settings()
        return cls(
            allowed_tables=tuple(tables) if tables is not None else tuple(settings.default_tables),
            question_count=(
                question_count if question_count is not None else settings.default_question_count
            ),
            time_per_question=settings.default_time_per_question,
            operations=frozenset(operations) if operations is not None else frozenset({Operation.MULTIPLY}),
        )


@dataclass(frozen=True)
class DifficultyPreset:
    """Named game mode."""

    name: str
    description: str
    config: SessionConfig = field(compare=False)


DIFFICULTY_PRESETS: dict[str, DifficultyPreset] = {
    "child": DifficultyPreset(
        name="child",
        description="Relaxed pace: a full minute per question",
        config=SessionConfig(
            allowed_tables=DEFAULT_TABLES,
            question_count=20,
            time_per_question=60,
            decrease_time=False,
        ),
    ),
    "parent": DifficultyPreset(
        name="parent",
        description="Five seconds per question, shrinking as the session goes on",
        config=SessionConfig(
            allowed_tables=DEFAULT_TABLES,
            question_count=20,
            time_per_question=5,
            decrease_time=True,
        ),
    ),
}


def get_preset(name: str) -> SessionConfig:
    """Return a fresh copy of a preset's config."""
    try:
        preset = DIFFICULTY_PRESETS[name.lower()]
    except KeyError:
        known = ", ".join(sorted(DIFFICULTY_PRESETS))
        raise InvalidConfigurationError(f"Unknown preset {name!r} (known: {known})") from None
    return replace(preset.config)
