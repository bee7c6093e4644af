"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import random
import sys
from datetime import date, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from factdrill.core.facts import Fact  # noqa: E402
from factdrill.core.records import AttemptRecord  # noqa: E402

FIXED_TODAY = date(2026, 3, 2)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def today():
    """A fixed 'today' so due dates are deterministic."""
    return FIXED_TODAY


@pytest.fixture
def rng():
    """Seeded random source for reproducible sessions."""
    return random.Random(1234)


@pytest.fixture
def make_attempts():
    """Build AttemptRecords for one fact from a string like 'CCXC' (C=correct, X=wrong)."""

    def _make(fact: Fact, pattern: str, user_id: str = "alice", latency: float = 3.0):
        return [
            AttemptRecord(
                user_id=user_id,
                fact=fact,
                is_correct=mark == "C",
                latency=latency,
                timestamp=None,
            )
            for mark in pattern
        ]

    return _make


# =============================================================================
# Database fixtures (SQLite file per test)
# =============================================================================

@pytest.fixture
def db_url(tmp_path):
    """SQLite database file unique to the test."""
    return f"sqlite:///{tmp_path / 'factdrill.db'}"


@pytest.fixture
def engine(db_url):
    """Engine with every table created."""
    from factdrill.db.database import create_db_engine, init_db

    engine = create_db_engine(db_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    from sqlalchemy.orm import sessionmaker

    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def attempt_log(session_factory):
    from factdrill.db.attempt_log import AttemptLog

    return AttemptLog(session_factory)


@pytest.fixture
def mastery_store(session_factory):
    from factdrill.db.mastery_store import MasteryStore
    from factdrill.study.srs_ladder import IntervalLadder

    return MasteryStore(session_factory, ladder=IntervalLadder())


class MovableClock:
    """Callable clock whose date tests can advance."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def advance(self, days: int) -> None:
        self.today = self.today + timedelta(days=days)


@pytest.fixture
def clock(today):
    return MovableClock(today)


@pytest.fixture
def scheduler(mastery_store, clock):
    """Scheduler over the SQLite store driven by the movable clock."""
    from factdrill.study.scheduler import SpacedRepetitionScheduler

    return SpacedRepetitionScheduler(mastery_store, mastery_store.ladder, clock=clock)
