"""
Calendar helpers.

Due dates are whole days in the learner's timezone, not UTC, so a review
scheduled for "tomorrow" does not flip at midnight UTC.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

from config import get_settings


def local_today(tz_name: str | None = None) -> date:
    """Today's date in the configured timezone."""
    tz = ZoneInfo(tz_name or get_settings().timezone)
    return datetime.now(tz).date()

