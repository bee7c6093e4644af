"""
Question generation.

- WeightedQuestionGenerator: weighted, duplicate-avoiding session builder
"""

from factdrill.generation.question_generator import (
    WeightedQuestionGenerator,
    pool_copies,
    take_unique,
    value_weight,
)

__all__ = [
    "WeightedQuestionGenerator",
    "pool_copies",
    "take_unique",
    "value_weight",
]
