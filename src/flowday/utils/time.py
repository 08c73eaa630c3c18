"""Time utilities for FlowDay.

Conversions between ``HH:MM`` strings and minute offsets, ISO date helpers
with Sunday-first weekday numbering, and the dispersion statistics used by
the pattern analyzers.

The lenient helpers (``time_to_minutes``, ``weekday_of``, ``hour_of``) return
None for missing or malformed input so analyzers can skip the sample;
``parse_time`` is the strict variant for user input.
"""

from __future__ import annotations

import math
import re
import statistics
from collections.abc import Sequence
from datetime import UTC, date, datetime

from flowday.core.errors import InvalidTimeError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

MINUTES_PER_DAY = 24 * 60

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

WEEKEND_DAYS = frozenset({0, 6})


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(UTC)


def parse_time(text: str) -> int:
    """Parse ``HH:MM`` into minutes since midnight.

    Args:
        text: Time of day, zero-padded or not (``9:05`` and ``09:05`` both work).

    Returns:
        Minutes since midnight (0-1439).

    Raises:
        InvalidTimeError: If the text is not a valid time of day.
    """
    match = _TIME_RE.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidTimeError(f"Not a HH:MM time: {text!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeError(f"Time out of range: {text!r}")
    return hours * 60 + minutes


def time_to_minutes(text: str | None) -> int | None:
    """Lenient ``parse_time``: None for missing or malformed input."""
    if not text:
        return None
    try:
        return parse_time(text)
    except InvalidTimeError:
        return None


def minutes_to_time(minutes: float) -> str:
    """Format a minute offset as ``HH:MM``.

    The total is rounded before splitting, so 59.6 minutes past the hour
    carries into the next hour. Hours wrap around midnight.
    """
    total = round_half_up(minutes)
    hours, mins = divmod(total % MINUTES_PER_DAY, 60)
    return f"{hours:02d}:{mins:02d}"


def hour_of(text: str | None) -> int | None:
    """Hour component of an ``HH:MM`` time, or None if unusable."""
    minutes = time_to_minutes(text)
    return None if minutes is None else minutes // 60


def parse_date(text: str) -> date | None:
    """Parse an ISO ``YYYY-MM-DD`` date, returning None when malformed."""
    try:
        return date.fromisoformat(text)
    except (TypeError, ValueError):
        return None


def weekday_of(value: str | date | None) -> int | None:
    """Weekday index with 0 = Sunday through 6 = Saturday.

    Accepts an ISO date string or a date; None for unusable input.
    """
    if value is None:
        return None
    d = value if isinstance(value, date) else parse_date(value)
    if d is None:
        return None
    return (d.weekday() + 1) % 7


def day_name(index: int) -> str:
    """English name of a Sunday-first weekday index."""
    return DAY_NAMES[index]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity.

    Unlike ``round()`` this never rounds 2.5 down to 2, so displayed averages
    do not depend on the parity of the integer part.
    """
    return int(math.floor(value + 0.5))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return statistics.pstdev(values)
