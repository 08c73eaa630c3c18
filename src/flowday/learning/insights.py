"""Insight generation from analyzer output.

Maps each analyzer's patterns to ranked, human-readable insights:
- Time insights: habitual start times (overall and per weekday)
- Duration insights: under- and overestimated durations
- Frequency insights: preferred weekdays
- Sequence insights: habitual task chains
- Completion insights: better hour/day for often-skipped tasks, achievements
- Optimization insights: schedule dead time, peak hour, weekday vs. weekend

Every generator applies its own noise thresholds; below them it simply
emits nothing. Priorities are comparable across generators so the pooled
list can be ranked with ``rank_insights``.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from flowday.core.constants import (
    COMPLETION_ACHIEVEMENT_PRIORITY,
    COMPLETION_BETTER_DAY_MARGIN,
    COMPLETION_BETTER_DAY_PRIORITY,
    COMPLETION_BETTER_HOUR_MARGIN,
    COMPLETION_BETTER_HOUR_PRIORITY,
    COMPLETION_BUCKET_MIN_TOTAL,
    COMPLETION_HIGH_MIN_TOTAL,
    COMPLETION_HIGH_RATE,
    COMPLETION_LOW_MIN_TOTAL,
    COMPLETION_LOW_RATE,
    COMPLETION_MIN_TOTAL,
    DURATION_INSIGHT_MIN_PERCENT,
    DURATION_INSIGHT_MIN_SAMPLES,
    DURATION_OVERESTIMATE_MAX_PRIORITY,
    DURATION_OVERESTIMATE_MIN_MINUTES,
    DURATION_UNDERESTIMATE_MAX_PRIORITY,
    FREQUENCY_INSIGHT_LIST_SHARE,
    FREQUENCY_INSIGHT_PRIORITY_WEIGHT,
    FREQUENCY_INSIGHT_TOP_SHARE,
    INFO_GATE_PRIORITY,
    INFO_PERIOD_PRIORITY,
    MAX_INSIGHTS,
    PEAK_HOUR_MIN_COMPLETIONS,
    PEAK_HOUR_PRIORITY,
    SCHEDULE_DEAD_TIME_MINUTES,
    SCHEDULE_DEAD_TIME_PRIORITY,
    SCHEDULE_GAP_MAX_MINUTES,
    SEQUENCE_IMMEDIATE_GAP_MINUTES,
    SEQUENCE_INSIGHT_LIMIT,
    SEQUENCE_INSIGHT_MIN_CONFIDENCE,
    SEQUENCE_INSIGHT_PRIORITY_WEIGHT,
    TIME_DAY_INSIGHT_MIN_CONFIDENCE,
    TIME_DAY_INSIGHT_PRIORITY_WEIGHT,
    TIME_INSIGHT_MIN_CONFIDENCE,
    TIME_INSIGHT_PRIORITY_WEIGHT,
    WEEKEND_DIFF_THRESHOLD,
    WEEKEND_INSIGHT_PRIORITY,
    WEEKEND_MIN_WEEKDAY_SAMPLES,
    WEEKEND_MIN_WEEKEND_SAMPLES,
)
from flowday.learning.models import (
    CompletionStats,
    DurationPattern,
    FrequencyPattern,
    HistoryEntry,
    Insight,
    InsightAction,
    InsightType,
    ScheduledInstance,
    SequencePattern,
    Tally,
    Task,
    TimeDayPattern,
    TimePattern,
)
from flowday.utils.time import (
    WEEKEND_DAYS,
    day_name,
    hour_of,
    mean,
    round_half_up,
    time_to_minutes,
    weekday_of,
)


def _percent(rate: float) -> int:
    return round_half_up(rate * 100)


def rank_insights(insights: Iterable[Insight], limit: int = MAX_INSIGHTS) -> list[Insight]:
    """Sort by priority (highest first, stable for ties) and keep the top ``limit``."""
    return sorted(insights, key=lambda i: i.priority, reverse=True)[:limit]


def insufficient_history_insight(count: int, required: int) -> Insight:
    """The single insight returned while history is below the global minimum."""
    return Insight(
        type=InsightType.INFO,
        title="Collecting data",
        text=(
            f"Keep using the planner! At least {required} completed tasks are needed "
            f"before suggestions start. Currently: {count}"
        ),
        priority=INFO_GATE_PRIORITY,
    )


def period_history_insight(count: int) -> Insight:
    """Report how many entries were set aside as special-period history."""
    return Insight(
        type=InsightType.INFO,
        title="Special periods",
        text=f"{count} tasks completed during special periods (excluded from normal statistics)",
        priority=INFO_PERIOD_PRIORITY,
    )


# =============================================================================
# Schedule and history helpers
# =============================================================================


def average_schedule_gap(schedule: Iterable[ScheduledInstance]) -> float:
    """Mean idle minutes between consecutive scheduled instances of a day.

    A gap is the next start minus (previous start + previous duration);
    only gaps strictly between 0 and 480 minutes count.

    Returns:
        Average gap in minutes, 0.0 when there are none.
    """
    by_date: dict[str, list[tuple[int, int]]] = {}
    for item in schedule:
        start = time_to_minutes(item.start_time)
        if start is None:
            continue
        by_date.setdefault(item.date, []).append((start, item.duration or 0))

    gaps: list[int] = []
    for items in by_date.values():
        items.sort(key=lambda pair: pair[0])
        for (prev_start, prev_duration), (start, _) in zip(items, items[1:]):
            gap = start - (prev_start + prev_duration)
            if 0 < gap < SCHEDULE_GAP_MAX_MINUTES:
                gaps.append(gap)

    return mean(gaps)


def peak_completion_hour(history: Iterable[HistoryEntry]) -> int | None:
    """Hour of day with the most completions (earliest hour wins ties).

    Returns:
        The hour, or None when the busiest hour has fewer than 5 completions.
    """
    counts: Counter[int] = Counter()
    for entry in history:
        if not entry.is_completed:
            continue
        hour = hour_of(entry.start_time)
        if hour is not None:
            counts[hour] += 1

    best_hour: int | None = None
    max_count = 0
    for hour in sorted(counts):
        if counts[hour] > max_count:
            max_count = counts[hour]
            best_hour = hour

    return best_hour if max_count >= PEAK_HOUR_MIN_COMPLETIONS else None


@dataclass
class WeekSplit:
    """Completion tallies on weekdays vs. weekends."""

    weekday: Tally
    weekend: Tally

    @property
    def difference(self) -> float:
        return self.weekday.rate - self.weekend.rate

    @property
    def significant(self) -> bool:
        return (
            abs(self.difference) > WEEKEND_DIFF_THRESHOLD
            and self.weekday.total >= WEEKEND_MIN_WEEKDAY_SAMPLES
            and self.weekend.total >= WEEKEND_MIN_WEEKEND_SAMPLES
        )


def split_weekday_weekend(history: Iterable[HistoryEntry]) -> WeekSplit:
    split = WeekSplit(weekday=Tally(), weekend=Tally())
    for entry in history:
        day = weekday_of(entry.date)
        if day is None:
            continue
        bucket = split.weekend if day in WEEKEND_DAYS else split.weekday
        bucket.record(entry.status)
    return split


def _best_bucket(buckets: dict[int, Tally]) -> tuple[int | None, float]:
    """Bucket with the highest completion rate among those with 2+ samples."""
    best_key: int | None = None
    best_rate = 0.0
    for key in sorted(buckets):
        tally = buckets[key]
        if tally.total >= COMPLETION_BUCKET_MIN_TOTAL and tally.rate > best_rate:
            best_rate = tally.rate
            best_key = key
    return best_key, best_rate


# =============================================================================
# Generators
# =============================================================================


class InsightGenerator:
    """Turns analyzer output into Insight records.

    Stateless apart from the task catalog used to name tasks in messages.
    """

    def __init__(self, tasks: Iterable[Task]) -> None:
        self.tasks = {t.id: t for t in tasks}

    def from_time_patterns(self, patterns: Iterable[TimePattern]) -> list[Insight]:
        insights: list[Insight] = []
        for pattern in patterns:
            if isinstance(pattern, TimeDayPattern):
                if pattern.confidence <= TIME_DAY_INSIGHT_MIN_CONFIDENCE:
                    continue
                insights.append(
                    Insight(
                        type=InsightType.PATTERN,
                        title="Weekly pattern",
                        text=(
                            f'On {day_name(pattern.day_of_week)}s you usually do '
                            f'"{pattern.task_name}" at {pattern.average_time}.'
                        ),
                        task_id=pattern.task_id,
                        priority=pattern.confidence * TIME_DAY_INSIGHT_PRIORITY_WEIGHT,
                        actionable=True,
                        action=InsightAction(
                            "suggest_time",
                            {"time": pattern.average_time, "day_of_week": pattern.day_of_week},
                        ),
                    )
                )
            elif pattern.confidence > TIME_INSIGHT_MIN_CONFIDENCE:
                insights.append(
                    Insight(
                        type=InsightType.PATTERN,
                        title="Habitual time",
                        text=(
                            f'You usually do "{pattern.task_name}" at {pattern.average_time}. '
                            "Pre-schedule it at this time?"
                        ),
                        task_id=pattern.task_id,
                        priority=pattern.confidence * TIME_INSIGHT_PRIORITY_WEIGHT,
                        actionable=True,
                        action=InsightAction("suggest_time", {"time": pattern.average_time}),
                    )
                )
        return insights

    def from_duration_patterns(self, patterns: Iterable[DurationPattern]) -> list[Insight]:
        insights: list[Insight] = []
        for pattern in patterns:
            percent = abs(pattern.percent_difference)
            if percent <= DURATION_INSIGHT_MIN_PERCENT:
                continue
            if pattern.sample_size < DURATION_INSIGHT_MIN_SAMPLES:
                continue

            if pattern.difference > 0:
                insights.append(
                    Insight(
                        type=InsightType.OPTIMIZATION,
                        title="Duration underestimated",
                        text=(
                            f'"{pattern.task_name}" takes you {pattern.average_actual} min on '
                            f"average, but you plan {pattern.average_planned} min. "
                            "Consider allocating more time."
                        ),
                        task_id=pattern.task_id,
                        priority=min(percent / 10, DURATION_UNDERESTIMATE_MAX_PRIORITY),
                        actionable=True,
                        action=InsightAction(
                            "adjust_duration",
                            {"suggested_duration": pattern.average_actual},
                        ),
                    )
                )
            elif pattern.difference < -DURATION_OVERESTIMATE_MIN_MINUTES:
                insights.append(
                    Insight(
                        type=InsightType.OPTIMIZATION,
                        title="Duration overestimated",
                        text=(
                            f'You finish "{pattern.task_name}" in {pattern.average_actual} min '
                            f"instead of the planned {pattern.average_planned}. "
                            f"That is {abs(pattern.difference)} min to spare!"
                        ),
                        task_id=pattern.task_id,
                        priority=min(percent / 15, DURATION_OVERESTIMATE_MAX_PRIORITY),
                        actionable=False,
                    )
                )
        return insights

    def from_frequency_patterns(self, patterns: Iterable[FrequencyPattern]) -> list[Insight]:
        insights: list[Insight] = []
        for pattern in patterns:
            if not pattern.preferred_days:
                continue
            if pattern.preferred_days[0].percentage <= FREQUENCY_INSIGHT_TOP_SHARE:
                continue
            days = ", ".join(
                day_name(d.day)
                for d in pattern.preferred_days
                if d.percentage > FREQUENCY_INSIGHT_LIST_SHARE
            )
            insights.append(
                Insight(
                    type=InsightType.PATTERN,
                    title="Preferred days",
                    text=(
                        f'You mostly do "{pattern.task_name}" on: {days} '
                        f"({round_half_up(pattern.times_per_week)}x per week)."
                    ),
                    task_id=pattern.task_id,
                    priority=pattern.confidence * FREQUENCY_INSIGHT_PRIORITY_WEIGHT,
                )
            )
        return insights

    def from_sequence_patterns(self, patterns: Sequence[SequencePattern]) -> list[Insight]:
        """Phrase the strongest sequences; expects patterns sorted by count."""
        top = [p for p in patterns if p.confidence > SEQUENCE_INSIGHT_MIN_CONFIDENCE]
        insights: list[Insight] = []
        for seq in top[:SEQUENCE_INSIGHT_LIMIT]:
            text = f'After "{seq.from_task_name}" you usually do "{seq.to_task_name}"'
            if seq.average_gap is None:
                text += "."
            elif seq.average_gap < SEQUENCE_IMMEDIATE_GAP_MINUTES:
                text += " right after."
            else:
                text += f" (~{seq.average_gap} min later)."

            insights.append(
                Insight(
                    type=InsightType.PATTERN,
                    title="Habitual sequence",
                    text=text,
                    priority=seq.confidence * SEQUENCE_INSIGHT_PRIORITY_WEIGHT,
                    actionable=True,
                    action=InsightAction(
                        "suggest_sequence",
                        {
                            "from_task_id": seq.from_task_id,
                            "to_task_id": seq.to_task_id,
                            "gap": seq.average_gap,
                        },
                    ),
                )
            )
        return insights

    def from_completion_stats(self, stats: dict[str, CompletionStats]) -> list[Insight]:
        insights: list[Insight] = []
        for task_id, task_stats in stats.items():
            overall = task_stats.overall
            if overall.total < COMPLETION_MIN_TOTAL:
                continue
            task = self.tasks.get(task_id)
            if task is None:
                continue

            rate = overall.rate
            if rate < COMPLETION_LOW_RATE and overall.total >= COMPLETION_LOW_MIN_TOTAL:
                best_hour, best_hour_rate = _best_bucket(task_stats.by_hour)
                if best_hour is not None and best_hour_rate > rate + COMPLETION_BETTER_HOUR_MARGIN:
                    insights.append(
                        Insight(
                            type=InsightType.OPTIMIZATION,
                            title="Better time",
                            text=(
                                f'You complete "{task.name}" only {_percent(rate)}% of the time, '
                                f"but at {best_hour}:00 the rate rises to "
                                f"{_percent(best_hour_rate)}%."
                            ),
                            task_id=task_id,
                            priority=COMPLETION_BETTER_HOUR_PRIORITY,
                            actionable=True,
                            action=InsightAction("suggest_better_time", {"hour": best_hour}),
                        )
                    )

                best_day, best_day_rate = _best_bucket(task_stats.by_day)
                if best_day is not None and best_day_rate > rate + COMPLETION_BETTER_DAY_MARGIN:
                    insights.append(
                        Insight(
                            type=InsightType.OPTIMIZATION,
                            title="Better day",
                            text=(
                                f'"{task.name}": on {day_name(best_day)}s you complete it '
                                f"{_percent(best_day_rate)}% of the time vs "
                                f"{_percent(rate)}% overall."
                            ),
                            task_id=task_id,
                            priority=COMPLETION_BETTER_DAY_PRIORITY,
                        )
                    )

            if rate > COMPLETION_HIGH_RATE and overall.total >= COMPLETION_HIGH_MIN_TOTAL:
                insights.append(
                    Insight(
                        type=InsightType.ACHIEVEMENT,
                        title="Great job!",
                        text=(
                            f'You completed "{task.name}" {_percent(rate)}% of the time. '
                            "Keep it up!"
                        ),
                        task_id=task_id,
                        priority=COMPLETION_ACHIEVEMENT_PRIORITY,
                    )
                )
        return insights

    def optimization_insights(
        self,
        history: Sequence[HistoryEntry],
        schedule: Sequence[ScheduledInstance],
    ) -> list[Insight]:
        """Global, non-per-task insights about the schedule and history."""
        insights: list[Insight] = []

        gap = average_schedule_gap(schedule)
        if gap > SCHEDULE_DEAD_TIME_MINUTES:
            insights.append(
                Insight(
                    type=InsightType.OPTIMIZATION,
                    title="Dead time",
                    text=(
                        f"You average {round_half_up(gap)} minutes of gap between tasks. "
                        "Try grouping similar activities."
                    ),
                    priority=SCHEDULE_DEAD_TIME_PRIORITY,
                )
            )

        peak = peak_completion_hour(history)
        if peak is not None:
            insights.append(
                Insight(
                    type=InsightType.INSIGHT,
                    title="Most productive window",
                    text=(
                        f"You are most productive between {peak}:00 and {(peak + 2) % 24}:00. "
                        "Plan important tasks in this window!"
                    ),
                    priority=PEAK_HOUR_PRIORITY,
                )
            )

        split = split_weekday_weekend(history)
        if split.significant:
            if split.difference > 0:
                text = (
                    f"You complete {_percent(split.difference)}% more tasks on weekdays."
                )
            else:
                text = (
                    f"You are more productive at weekends "
                    f"(+{_percent(-split.difference)}% completions)."
                )
            insights.append(
                Insight(
                    type=InsightType.INSIGHT,
                    title="Weekly rhythm",
                    text=text,
                    priority=WEEKEND_INSIGHT_PRIORITY,
                )
            )

        return insights
