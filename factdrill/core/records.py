"""
Records exchanged with the storage layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from factdrill.core.facts import Fact


@dataclass(frozen=True)
class AttemptRecord:
    """One answered question from the append-only attempt log."""

    user_id: str
    fact: Fact
    is_correct: bool
    latency: float | None  # seconds
    timestamp: datetime
    user_answer: int | None = None
    session_id: str | None = None
