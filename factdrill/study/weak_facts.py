"""
Weak-Fact Aggregator.

Ranks a learner's facts by historical accuracy so adaptive sessions can
target what they get wrong most.

Rules:
- facts seen fewer than twice are not ranked (one slip is not a pattern)
- order: accuracy ascending, then number of wrong answers descending
- adaptive sessions are offered only once five or more facts are ranked
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from config import get_settings
from factdrill.core.facts import Fact, FactKey
from factdrill.core.records import AttemptRecord

DEFAULT_MIN_SEEN = 2
DEFAULT_MIN_WEAK_FACTS = 5


@dataclass(frozen=True)
class WeakFactSummary:
    """Accuracy statistics for one fact, derived from the attempt log."""

    fact: Fact
    times_seen: int
    times_incorrect: int
    accuracy_rate: float  # 0-1
    avg_latency: float | None  # seconds

    @property
    def times_correct(self) -> int:
        return self.times_seen - self.times_incorrect

    @property
    def severity(self) -> str:
        """Display band: 'critical' (<50%), 'struggling' (<75%) or 'ok'."""
        if self.accuracy_rate < 0.5:
            return "critical"
        if self.accuracy_rate < 0.75:
            return "struggling"
        return "ok"


class AttemptSource(Protocol):
    """Anything that can rank a user's facts (AttemptLog in production)."""

    def weak_fact_summaries(
        self, user_id: str, min_seen: int = 2, limit: int | None = None
    ) -> list[WeakFactSummary]: ...


def rank_key(summary: WeakFactSummary) -> tuple:
    """Sort key: lowest accuracy first, then most wrong answers, then the fact itself."""
    return (summary.accuracy_rate, -summary.times_incorrect, summary.fact.key)


def summarize_attempts(
    attempts: Iterable[AttemptRecord],
    min_seen: int = DEFAULT_MIN_SEEN,
    limit: int | None = None,
) -> list[WeakFactSummary]:
    """
    Rank facts from an in-memory attempt list.

    Args:
        attempts: Attempt records (any users; group by fact only)
        min_seen: Facts attempted fewer times are left out
        limit: Maximum summaries to return (None = all)

    Returns:
        Ranked WeakFactSummary list
    """
    seen: dict[FactKey, int] = defaultdict(int)
    wrong: dict[FactKey, int] = defaultdict(int)
    latencies: dict[FactKey, list[float]] = defaultdict(list)
    facts: dict[FactKey, Fact] = {}

    for attempt in attempts:
        key = attempt.fact.key
        facts[key] = attempt.fact
        seen[key] += 1
        if not attempt.is_correct:
            wrong[key] += 1
        if attempt.latency is not None:
            latencies[key].append(attempt.latency)

    summaries = []
    for key, times_seen in seen.items():
        if times_seen < min_seen:
            continue
        times_incorrect = wrong[key]
        samples = latencies[key]
        summaries.append(
            WeakFactSummary(
                fact=facts[key],
                times_seen=times_seen,
                times_incorrect=times_incorrect,
                accuracy_rate=(times_seen - times_incorrect) / times_seen,
                avg_latency=sum(samples) / len(samples) if samples else None,
            )
        )

    summaries.sort(key=rank_key)
    return summaries[:limit] if limit is not None else summaries


class WeakFactAggregator:
    """Store-backed weak-fact ranking."""

    def __init__(
        self,
        source: AttemptSource,
        min_seen: int | None = None,
        min_weak_facts: int | None = None,
    ):
        """
        Initialize aggregator.

        Args:
            source: Attempt log to aggregate
            min_seen: Attempts needed before a fact is ranked
            min_weak_facts: Ranked facts needed for has_enough_data
        """
        settings = get_settings()
        self.source = source
        self.min_seen = min_seen if min_seen is not None else settings.weak_fact_min_seen
        self.min_weak_facts = (
            min_weak_facts if min_weak_facts is not None else settings.weak_fact_min_count
        )

    def get_weak_facts(self, user_id: str, limit: int | None = None) -> list[WeakFactSummary]:
        """Ranked facts for a user; ``limit=None`` returns every ranked fact."""
        return self.source.weak_fact_summaries(user_id, min_seen=self.min_seen, limit=limit)

    def has_enough_data(self, user_id: str) -> bool:
        """True when enough facts are ranked to make an adaptive session worthwhile."""
        return len(self.get_weak_facts(user_id, None)) >= self.min_weak_facts
