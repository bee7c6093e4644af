"""
Game rules shared by every session type: timing, accuracy and score.
"""

from __future__ import annotations

# Seconds shaved off per question in decreasing-time mode
TIME_DECREASE_PER_QUESTION = 0.2
MIN_TIME_PER_QUESTION = 2.0

POINTS_PER_CORRECT = 10
POINTS_PER_COMBO = 5


def time_for_question(index: int, base_time: float, decrease_time: bool) -> float:
    """
    Seconds allowed for the question at ``index`` (0-based).

    In decreasing-time mode every question gets 0.2s less than the previous
    one, never dropping below two seconds.
    """
    if not decrease_time:
        return base_time
    return max(MIN_TIME_PER_QUESTION, base_time - index * TIME_DECREASE_PER_QUESTION)


def calculate_accuracy(correct: int, total: int) -> int:
    """Rounded accuracy percentage (0 when nothing was answered)."""
    if total == 0:
        return 0
    # Half-up rounding so 2/8 -> 25 and 1/8 -> 13
    return int(correct * 100 / total + 0.5)


def calculate_score(correct_answers: int, combo: int, time_bonus: int) -> int:
    return correct_answers * POINTS_PER_CORRECT + combo * POINTS_PER_COMBO + time_bonus
