"""
Persistence for the practice engine.

- AttemptLog: append-only question_stats table
- MasteryStore: fact_mastery table with a single-statement upsert per answer
"""

from factdrill.db.attempt_log import AttemptLog
from factdrill.db.database import get_engine, get_session_factory, init_db, session_scope
from factdrill.db.mastery_store import MasteryStore

__all__ = [
    "AttemptLog",
    "MasteryStore",
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_scope",
]
