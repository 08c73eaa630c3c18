"""Routine suggestions for pre-filling a day.

Combines persisted frequency patterns (which weekdays a task is done on)
with time patterns (when it is done) into (task, time) proposals for a
target weekday. The suggester only proposes; deduplicating against the
existing schedule and saving accepted proposals is left to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from flowday.core.constants import ROUTINE_DAY_PATTERN_BOOST, ROUTINE_MIN_DAY_SHARE
from flowday.learning.models import (
    FrequencyPattern,
    Pattern,
    RoutineSuggestion,
    Task,
    TimeDayPattern,
    TimePattern,
)
from flowday.utils.time import day_name, weekday_of


def resolve_weekday(day: int | date | str) -> int:
    """Weekday index (0 = Sunday) from an index, a date or an ISO date string.

    Raises:
        ValueError: If the value is not a weekday index or a valid date.
    """
    if isinstance(day, bool):
        raise ValueError(f"Not a weekday: {day!r}")
    if isinstance(day, int):
        if not 0 <= day <= 6:
            raise ValueError(f"Weekday must be between 0 and 6, got {day}")
        return day
    weekday = weekday_of(day)
    if weekday is None:
        raise ValueError(f"Not a YYYY-MM-DD date: {day!r}")
    return weekday


class RoutineSuggester:
    """Proposes tasks and start times for a weekday from persisted patterns.

    Per-period patterns are ignored: they describe atypical spans, not the
    everyday routine.
    """

    def __init__(self, patterns: Iterable[Pattern], tasks: Iterable[Task]) -> None:
        self.tasks = {t.id: t for t in tasks}
        self.frequency: list[FrequencyPattern] = []
        self.time: dict[str, TimePattern] = {}
        self.time_day: dict[tuple[str, int], TimeDayPattern] = {}

        for pattern in patterns:
            if pattern.period_category is not None:
                continue
            if isinstance(pattern, FrequencyPattern):
                self.frequency.append(pattern)
            elif isinstance(pattern, TimeDayPattern):
                self.time_day[(pattern.task_id, pattern.day_of_week)] = pattern
            elif isinstance(pattern, TimePattern):
                self.time[pattern.task_id] = pattern

    def suggest(self, day: int | date | str) -> list[RoutineSuggestion]:
        """Build the suggestion list for a weekday or date.

        Args:
            day: Weekday index (0 = Sunday), a date, or a ``YYYY-MM-DD`` string.

        Returns:
            Suggestions sorted by time, ties by confidence (highest first).
        """
        weekday = resolve_weekday(day)
        suggestions: list[RoutineSuggestion] = []

        for freq in self.frequency:
            share = freq.share_on(weekday)
            if share is None or share.percentage < ROUTINE_MIN_DAY_SHARE:
                continue
            task = self.tasks.get(freq.task_id)
            if task is None:
                continue

            day_pattern = self.time_day.get((freq.task_id, weekday))
            if day_pattern is not None:
                suggested_time = day_pattern.average_time
                confidence = freq.confidence * ROUTINE_DAY_PATTERN_BOOST
                reason = f"Usually done on {day_name(weekday)} at {suggested_time}"
            else:
                general = self.time.get(freq.task_id)
                if general is None:
                    continue
                suggested_time = general.average_time
                confidence = freq.confidence
                reason = f"Habitual time: {suggested_time}"

            suggestions.append(
                RoutineSuggestion(
                    task_id=task.id,
                    task_name=task.name,
                    category=task.category,
                    suggested_time=suggested_time,
                    duration=task.default_duration,
                    confidence=confidence,
                    reason=reason,
                )
            )

        # Zero-padded HH:MM strings order chronologically
        suggestions.sort(key=lambda s: (s.suggested_time, -s.confidence))
        return suggestions
