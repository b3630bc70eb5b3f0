"""
Review Day Scheduling.

Maps a confidence score to the day-of-week bucket an item should next be
reviewed in. A score of N means "review again in N days":

    target = (today + score) mod 7

Editing the score of a scheduled item shifts its *current* bucket by the
signed score delta instead of recomputing from today, so a nudge like
"push out by one more day" keeps its meaning.
"""

from __future__ import annotations

from datetime import date

from loguru import logger

from cadence.core.errors import InvalidOrdinal, InvalidScore
from cadence.core.models import DAYS_IN_WEEK, MAX_SCORE, MIN_SCORE


def today_ordinal(day: date | None = None) -> int:
    """
    Day ordinal for a calendar date (Sunday=0 ... Saturday=6).

    Args:
        day: Date to convert (defaults to today)

    Returns:
        Ordinal between 0 and 6
    """
    day = day or date.today()
    return day.isoweekday() % DAYS_IN_WEEK


class ScheduleCalculator:
    """Pure score-to-day arithmetic. Holds no state."""

    @staticmethod
    def validate_score(score: int) -> int:
        """Return ``score`` unchanged or raise InvalidScore."""
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidScore(score)
        if not MIN_SCORE <= score <= MAX_SCORE:
            raise InvalidScore(score)
        return score

    @staticmethod
    def validate_ordinal(ordinal: int) -> int:
        if isinstance(ordinal, bool) or not isinstance(ordinal, int):
            raise InvalidOrdinal(ordinal)
        if not 0 <= ordinal < DAYS_IN_WEEK:
            raise InvalidOrdinal(ordinal)
        return ordinal

    @classmethod
    def target_ordinal(cls, today: int, score: int) -> int:
        """
        Bucket ordinal for a freshly scored item.

        Args:
            today: Current day ordinal (0-6)
            score: Confidence score (1-5)

        Returns:
            Target day ordinal (0-6)
        """
        cls.validate_ordinal(today)
        cls.validate_score(score)
        return (today + score) % DAYS_IN_WEEK

    @classmethod
    def shift_ordinal(cls, current: int, old_score: int, new_score: int) -> int:
        """
        Shift an item's current bucket by the change in its score.

        Args:
            current: Ordinal of the bucket the item is in now
            old_score: Score before the edit
            new_score: Score after the edit

        Returns:
            New day ordinal (0-6)
        """
        cls.validate_ordinal(current)
        cls.validate_score(old_score)
        cls.validate_score(new_score)

        delta = new_score - old_score
        # Single wrap below only normalises deltas smaller than a full week
        assert abs(delta) < DAYS_IN_WEEK, f"score delta {delta} spans a full week"

        # Python's modulo is already non-negative for a positive divisor
        shifted = (current + delta) % DAYS_IN_WEEK

        logger.debug(f"Shifted day {current} by {delta:+d} -> {shifted}")
        return shifted
