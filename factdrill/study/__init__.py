"""
Study Module for times-table practice.

Provides:
- Weak-fact ranking from the attempt log
- Fixed-ladder spaced repetition per (user, fact)
- Adaptive and due-review session composition

PracticeService (factdrill.study.practice_service) wires these to the
database; it is not imported here because the db layer depends on this
package.
"""

from factdrill.study.composer import SessionComposer, SessionComposition, severity_weight
from factdrill.study.scheduler import SpacedRepetitionScheduler, coerce_fact
from factdrill.study.srs_ladder import IntervalLadder, MasteryState
from factdrill.study.weak_facts import (
    WeakFactAggregator,
    WeakFactSummary,
    summarize_attempts,
)

__all__ = [
    "IntervalLadder",
    "MasteryState",
    "SpacedRepetitionScheduler",
    "coerce_fact",
    "WeakFactAggregator",
    "WeakFactSummary",
    "summarize_attempts",
    "SessionComposer",
    "SessionComposition",
    "severity_weight",
]
