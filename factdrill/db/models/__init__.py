# SQLAlchemy models
from .base import Base
from .practice import FactMastery, QuestionStat

__all__ = [
    # Base
    "Base",
    # Practice
    "QuestionStat",
    "FactMastery",
]
