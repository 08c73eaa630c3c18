"""Pattern analyzers for task history.

Five independent analyses over a list of history entries:
- Time of day: usual start time per task, overall and per weekday
- Duration: drift between planned and actual duration
- Frequency: weekly rate and preferred weekdays
- Sequence: tasks that habitually follow each other on the same day
- Completion: completed vs. skipped tallies (feeds insights only)

Each analysis is a pure function of the history and the task catalog.
Entries whose task is no longer in the catalog, or whose optional fields
are missing or malformed, are skipped rather than treated as errors.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from flowday.core.constants import (
    DURATION_CONFIDENCE_SAMPLES,
    DURATION_MIN_SAMPLES,
    FREQUENCY_CONFIDENCE_SAMPLES,
    FREQUENCY_MIN_DATES,
    FREQUENCY_TOP_DAYS,
    SEQUENCE_CONFIDENCE_SAMPLES,
    SEQUENCE_MAX_GAP_MINUTES,
    SEQUENCE_MAX_PATTERNS,
    SEQUENCE_MIN_COUNT,
    TIME_CONFIDENCE_SAMPLES,
    TIME_DAY_CONFIDENCE_SAMPLES,
    TIME_DAY_MAX_STDDEV_MINUTES,
    TIME_DAY_MIN_SAMPLES,
    TIME_MAX_STDDEV_MINUTES,
    TIME_MIN_SAMPLES,
)
from flowday.learning.models import (
    CompletionStats,
    DurationPattern,
    FrequencyPattern,
    HistoryEntry,
    Pattern,
    PreferredDay,
    SequencePattern,
    Tally,
    Task,
    TimeDayPattern,
    TimePattern,
)
from flowday.utils.time import (
    hour_of,
    mean,
    minutes_to_time,
    parse_date,
    round_half_up,
    standard_deviation,
    time_to_minutes,
    weekday_of,
)


def confidence_for(sample_size: int, saturation: int) -> float:
    """Confidence growing linearly with samples, capped at 1.0."""
    if sample_size <= 0:
        return 0.0
    return min(sample_size / saturation, 1.0)


def _date_then_start(entry: HistoryEntry) -> tuple[str, int]:
    # Unparseable start times sort first within their day
    minutes = time_to_minutes(entry.start_time)
    return entry.date, -1 if minutes is None else minutes


@dataclass
class _StartSample:
    minutes: int
    day_of_week: int


@dataclass
class _Transition:
    from_task_id: str
    to_task_id: str
    count: int = 0
    gaps: list[int] = field(default_factory=list)


class PatternAnalyzer:
    """Mines statistical patterns from task history.

    Analyzes a list of HistoryEntry objects against the task catalog and
    returns typed patterns ready to be persisted.
    """

    def __init__(self, history: Iterable[HistoryEntry], tasks: Iterable[Task]) -> None:
        """Initialize the analyzer.

        Args:
            history: History entries to analyze (already segmented).
            tasks: Task catalog used to resolve names.
        """
        self.history = list(history)
        self.tasks = {t.id: t for t in tasks}

    def detect_all(self) -> list[Pattern]:
        """Run every persisted-pattern analysis.

        Returns:
            Time, duration, frequency and sequence patterns, in that order.
        """
        patterns: list[Pattern] = []
        patterns.extend(self.analyze_time_patterns())
        patterns.extend(self.analyze_duration_patterns())
        patterns.extend(self.analyze_frequency_patterns())
        patterns.extend(self.analyze_sequence_patterns())
        return patterns

    def _completed(self) -> list[HistoryEntry]:
        return [e for e in self.history if e.is_completed]

    def analyze_time_patterns(self) -> list[TimePattern]:
        """Find the usual start time of each task.

        A ``time`` pattern needs at least 3 completions with a spread under
        one hour. Independently, each weekday with 2+ completions and a
        spread under 45 minutes yields a ``time_day`` pattern.

        Returns:
            TimePattern and TimeDayPattern instances.
        """
        samples: dict[str, list[_StartSample]] = {}
        for entry in self._completed():
            minutes = time_to_minutes(entry.start_time)
            day = weekday_of(entry.date)
            if minutes is None or day is None:
                continue
            samples.setdefault(entry.task_id, []).append(_StartSample(minutes, day))

        patterns: list[TimePattern] = []
        for task_id, task_samples in samples.items():
            if len(task_samples) < TIME_MIN_SAMPLES:
                continue
            task = self.tasks.get(task_id)
            if task is None:
                continue

            minutes = [s.minutes for s in task_samples]
            std_dev = standard_deviation(minutes)
            if std_dev < TIME_MAX_STDDEV_MINUTES:
                patterns.append(
                    TimePattern(
                        task_id=task_id,
                        task_name=task.name,
                        average_time=minutes_to_time(mean(minutes)),
                        variance=std_dev,
                        sample_size=len(minutes),
                        confidence=confidence_for(len(minutes), TIME_CONFIDENCE_SAMPLES),
                    )
                )

            by_day: dict[int, list[int]] = {}
            for s in task_samples:
                by_day.setdefault(s.day_of_week, []).append(s.minutes)

            for day in sorted(by_day):
                day_minutes = by_day[day]
                if len(day_minutes) < TIME_DAY_MIN_SAMPLES:
                    continue
                day_std_dev = standard_deviation(day_minutes)
                if day_std_dev >= TIME_DAY_MAX_STDDEV_MINUTES:
                    continue
                patterns.append(
                    TimeDayPattern(
                        task_id=task_id,
                        task_name=task.name,
                        day_of_week=day,
                        average_time=minutes_to_time(mean(day_minutes)),
                        variance=day_std_dev,
                        sample_size=len(day_minutes),
                        confidence=confidence_for(len(day_minutes), TIME_DAY_CONFIDENCE_SAMPLES),
                    )
                )

        return patterns

    def analyze_duration_patterns(self) -> list[DurationPattern]:
        """Compare planned and actual durations per task.

        Only completions carrying both a planned and an actual duration
        count; tasks with fewer than 3 such samples get no pattern.

        Returns:
            One DurationPattern per qualifying task.
        """
        pairs: dict[str, list[tuple[int, int]]] = {}
        for entry in self._completed():
            if not entry.actual_duration or not entry.planned_duration:
                continue
            pairs.setdefault(entry.task_id, []).append(
                (entry.planned_duration, entry.actual_duration)
            )

        patterns: list[DurationPattern] = []
        for task_id, task_pairs in pairs.items():
            if len(task_pairs) < DURATION_MIN_SAMPLES:
                continue
            task = self.tasks.get(task_id)
            if task is None:
                continue

            planned_avg = mean([p for p, _ in task_pairs])
            actual_avg = mean([a for _, a in task_pairs])
            difference = actual_avg - planned_avg
            percent_diff = difference / planned_avg * 100

            patterns.append(
                DurationPattern(
                    task_id=task_id,
                    task_name=task.name,
                    average_actual=round_half_up(actual_avg),
                    average_planned=round_half_up(planned_avg),
                    difference=round_half_up(difference),
                    percent_difference=round_half_up(percent_diff),
                    sample_size=len(task_pairs),
                    confidence=confidence_for(len(task_pairs), DURATION_CONFIDENCE_SAMPLES),
                )
            )

        return patterns

    def analyze_frequency_patterns(self) -> list[FrequencyPattern]:
        """Derive weekly rate and preferred weekdays per task.

        The observation window spans the earliest to the latest history
        date (all statuses); fewer than 2 distinct dates give no patterns.

        Returns:
            One FrequencyPattern per task with at least one completion.
        """
        dates = {d for d in (parse_date(e.date) for e in self.history) if d is not None}
        if len(dates) < FREQUENCY_MIN_DATES:
            return []
        total_days = (max(dates) - min(dates)).days or 1
        total_weeks = total_days / 7

        counts: dict[str, Counter[int]] = {}
        unique_days: dict[str, set[str]] = {}
        for entry in self._completed():
            day = weekday_of(entry.date)
            if day is None:
                continue
            counts.setdefault(entry.task_id, Counter())[day] += 1
            unique_days.setdefault(entry.task_id, set()).add(entry.date)

        patterns: list[FrequencyPattern] = []
        for task_id, weekdays in counts.items():
            task = self.tasks.get(task_id)
            if task is None:
                continue

            total = sum(weekdays.values())
            # Most frequent first; ties keep the earlier weekday
            ranked = sorted(weekdays.items(), key=lambda kv: (-kv[1], kv[0]))
            preferred = [
                PreferredDay(day=day, count=count, percentage=count / total * 100)
                for day, count in ranked[:FREQUENCY_TOP_DAYS]
            ]

            patterns.append(
                FrequencyPattern(
                    task_id=task_id,
                    task_name=task.name,
                    total_occurrences=total,
                    unique_days=len(unique_days[task_id]),
                    times_per_week=round_half_up(total / total_weeks * 10) / 10,
                    preferred_days=preferred,
                    sample_size=total,
                    confidence=confidence_for(total, FREQUENCY_CONFIDENCE_SAMPLES),
                )
            )

        return patterns

    def analyze_sequence_patterns(self) -> list[SequencePattern]:
        """Find tasks that habitually follow one another on the same day.

        Completions are ordered by (date, start time); every adjacent pair
        sharing a date is one transition. Gaps between the previous end and
        the next start are averaged when both times are known and the gap
        is within [0, 240) minutes.

        Returns:
            Up to 20 SequencePatterns, most frequent first.
        """
        ordered = sorted(self._completed(), key=_date_then_start)

        transitions: dict[tuple[str, str], _Transition] = {}
        previous: HistoryEntry | None = None
        for entry in ordered:
            if previous is not None and previous.date == entry.date:
                pair = (previous.task_id, entry.task_id)
                transition = transitions.get(pair)
                if transition is None:
                    transition = transitions[pair] = _Transition(*pair)
                transition.count += 1

                prev_end = time_to_minutes(previous.end_time)
                next_start = time_to_minutes(entry.start_time)
                if prev_end is not None and next_start is not None:
                    gap = next_start - prev_end
                    if 0 <= gap < SEQUENCE_MAX_GAP_MINUTES:
                        transition.gaps.append(gap)
            previous = entry

        patterns: list[SequencePattern] = []
        for transition in transitions.values():
            if transition.count < SEQUENCE_MIN_COUNT:
                continue
            from_task = self.tasks.get(transition.from_task_id)
            to_task = self.tasks.get(transition.to_task_id)
            if from_task is None or to_task is None:
                continue

            patterns.append(
                SequencePattern(
                    from_task_id=from_task.id,
                    from_task_name=from_task.name,
                    to_task_id=to_task.id,
                    to_task_name=to_task.name,
                    count=transition.count,
                    average_gap=(
                        round_half_up(mean(transition.gaps)) if transition.gaps else None
                    ),
                    sample_size=transition.count,
                    confidence=confidence_for(transition.count, SEQUENCE_CONFIDENCE_SAMPLES),
                )
            )

        patterns.sort(key=lambda p: p.count, reverse=True)
        return patterns[:SEQUENCE_MAX_PATTERNS]

    def analyze_completion(self) -> dict[str, CompletionStats]:
        """Tally completed vs. skipped per task, overall and by hour/weekday.

        No sample gate here; the completion insight generator applies its
        own thresholds.

        Returns:
            CompletionStats keyed by task id.
        """
        stats: dict[str, CompletionStats] = {}
        for entry in self.history:
            task_stats = stats.setdefault(entry.task_id, CompletionStats())
            task_stats.overall.record(entry.status)

            hour = hour_of(entry.start_time)
            if hour is not None:
                task_stats.by_hour.setdefault(hour, Tally()).record(entry.status)

            day = weekday_of(entry.date)
            if day is not None:
                task_stats.by_day.setdefault(day, Tally()).record(entry.status)

        return stats
