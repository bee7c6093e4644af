"""
Core Module - Shared domain models.

Components:
- facts: Fact, Question and Operation value objects
- session_config: SessionConfig and the child/parent presets
- scoring: Timing, accuracy and score rules
- errors: Exception hierarchy

All domain modules (generation/, study/, db/) import from factdrill.core
rather than redefining facts or configuration.
"""

from factdrill.core.errors import (
    InternalConsistencyError,
    InvalidConfigurationError,
    InvalidFactError,
    PracticeEngineError,
)
from factdrill.core.facts import Fact, FactKey, Operation, Question
from factdrill.core.session_config import (
    DEFAULT_TABLES,
    DIFFICULTY_PRESETS,
    SessionConfig,
    get_preset,
)

__all__ = [
    # Facts
    "Fact",
    "FactKey",
    "Operation",
    "Question",
    # Configuration
    "DEFAULT_TABLES",
    "DIFFICULTY_PRESETS",
    "SessionConfig",
    "get_preset",
    # Errors
    "PracticeEngineError",
    "InvalidConfigurationError",
    "InvalidFactError",
    "InternalConsistencyError",
]
