"""Data models for the insight engine.

This module contains the dataclasses and enums shared by the analyzers,
insight generators, routine suggester and planner stores. Inputs (tasks,
history, schedule, periods) are read-only records owned by the planner;
patterns are the derived, persisted facts; insights and routine
suggestions are ephemeral outputs of a single run.

Patterns are a tagged union: one dataclass per ``PatternType``, each with a
typed ``PatternKey`` that determines its storage id.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar


class TaskCategory(str, Enum):
    """Fixed task categories offered by the planner."""

    WORK = "work"
    HEALTH = "health"
    HOME = "home"
    PERSONAL = "personal"
    SOCIAL = "social"
    OTHER = "other"


class HistoryStatus(str, Enum):
    """Outcome of a scheduled task instance."""

    COMPLETED = "completed"
    SKIPPED = "skipped"


class PatternType(str, Enum):
    """Kinds of persisted statistical patterns."""

    TIME = "time"
    """Usual start time of a task."""

    TIME_DAY = "time_day"
    """Usual start time of a task on one specific weekday."""

    DURATION = "duration"
    """Drift between planned and actual duration."""

    FREQUENCY = "frequency"
    """Weekly rate and preferred weekdays."""

    SEQUENCE = "sequence"
    """One task habitually following another on the same day."""


class InsightType(str, Enum):
    """Presentation category of an insight."""

    PATTERN = "pattern"
    OPTIMIZATION = "optimization"
    ACHIEVEMENT = "achievement"
    INSIGHT = "insight"
    INFO = "info"


# =============================================================================
# Planner inputs
# =============================================================================


@dataclass
class Task:
    """A reusable activity template."""

    id: str
    name: str
    category: TaskCategory = TaskCategory.OTHER
    default_duration: int = 30

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "default_duration": self.default_duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=data["id"],
            name=data["name"],
            category=TaskCategory(data.get("category", TaskCategory.OTHER.value)),
            default_duration=data.get("default_duration", 30),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """One completed or skipped task instance.

    ``start_time``/``end_time`` are actual times when completed.
    ``actual_duration`` is present only for completions where the user
    entered it.
    """

    id: str
    task_id: str
    date: str
    status: HistoryStatus
    start_time: str | None = None
    end_time: str | None = None
    planned_duration: int | None = None
    actual_duration: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == HistoryStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "task_id": self.task_id,
            "date": self.date,
            "status": self.status.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "planned_duration": self.planned_duration,
            "actual_duration": self.actual_duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        return cls(
            id=data["id"],
            task_id=data["task_id"],
            date=data["date"],
            status=HistoryStatus(data["status"]),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            planned_duration=data.get("planned_duration"),
            actual_duration=data.get("actual_duration"),
        )


@dataclass
class ScheduledInstance:
    """A task placed on the calendar grid for a given date and time."""

    id: str
    task_id: str
    date: str
    start_time: str
    duration: int
    status: str = "pending"

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduledInstance:
        return cls(
            id=data["id"],
            task_id=data["task_id"],
            date=data["date"],
            start_time=data["start_time"],
            duration=data["duration"],
            status=data.get("status", "pending"),
        )


@dataclass(frozen=True)
class SpecialPeriod:
    """A labeled date range (vacation, illness) excluded from routine statistics."""

    start_date: str
    end_date: str
    category_id: str

    def contains(self, day: str) -> bool:
        # Zero-padded ISO dates order lexicographically
        return self.start_date <= day <= self.end_date

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpecialPeriod:
        return cls(
            start_date=data["start_date"],
            end_date=data["end_date"],
            category_id=data["category_id"],
        )


@dataclass(frozen=True)
class PeriodCategory:
    """Display metadata for a special-period category."""

    id: str
    name: str
    color: str = "#6b7280"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PeriodCategory:
        return cls(id=data["id"], name=data["name"], color=data.get("color", "#6b7280"))


# =============================================================================
# Patterns
# =============================================================================


@dataclass(frozen=True)
class PatternKey:
    """Composite identity of a persisted pattern.

    Two patterns with equal keys describe the same fact; saving one replaces
    the other.
    """

    type: PatternType
    task_id: str
    day_of_week: int | None = None
    to_task_id: str | None = None
    period_category: str | None = None

    def as_id(self) -> str:
        """Render the storage id, e.g. ``time_t1_day2_period_vacation``."""
        if self.type == PatternType.SEQUENCE:
            base = f"sequence_{self.task_id}_{self.to_task_id}"
        elif self.type == PatternType.TIME_DAY:
            base = f"time_{self.task_id}_day{self.day_of_week}"
        else:
            base = f"{self.type.value}_{self.task_id}"
        if self.period_category is not None:
            base += f"_period_{self.period_category}"
        return base


@dataclass(kw_only=True)
class PreferredDay:
    """A weekday on which a task is often done."""

    day: int
    count: int
    percentage: float


@dataclass(kw_only=True)
class Pattern:
    """Base of all persisted patterns.

    Confidence is derived from the sample size, saturates at 1.0 and is
    validated on construction.
    """

    pattern_type: ClassVar[PatternType]

    sample_size: int
    confidence: float
    period_category: str | None = None
    period_category_name: str | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("Confidence must be between 0.0 and 1.0")

    @property
    def key(self) -> PatternKey:
        raise NotImplementedError

    @property
    def id(self) -> str:
        return self.key.as_id()

    def for_period(self, category_id: str, category_name: str) -> Pattern:
        """Copy of this pattern tagged as describing a special period."""
        return dataclasses.replace(
            self, period_category=category_id, period_category_name=category_name
        )

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["id"] = self.id
        data["type"] = self.pattern_type.value
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Pattern:
        names = {f.name for f in dataclasses.fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in names}
        if kwargs.get("updated_at"):
            kwargs["updated_at"] = datetime.fromisoformat(kwargs["updated_at"])
        return cls(**kwargs)


@dataclass(kw_only=True)
class TimePattern(Pattern):
    """A task's usual start time."""

    pattern_type: ClassVar[PatternType] = PatternType.TIME

    task_id: str
    task_name: str
    average_time: str
    variance: float
    """Standard deviation of start times, in minutes."""

    @property
    def key(self) -> PatternKey:
        return PatternKey(self.pattern_type, self.task_id, period_category=self.period_category)


@dataclass(kw_only=True)
class TimeDayPattern(TimePattern):
    """A task's usual start time on a specific weekday (0 = Sunday)."""

    pattern_type: ClassVar[PatternType] = PatternType.TIME_DAY

    day_of_week: int

    @property
    def key(self) -> PatternKey:
        return PatternKey(
            self.pattern_type,
            self.task_id,
            day_of_week=self.day_of_week,
            period_category=self.period_category,
        )


@dataclass(kw_only=True)
class DurationPattern(Pattern):
    """Average planned vs. actual duration of a task, in minutes."""

    pattern_type: ClassVar[PatternType] = PatternType.DURATION

    task_id: str
    task_name: str
    average_actual: int
    average_planned: int
    difference: int
    percent_difference: int

    @property
    def key(self) -> PatternKey:
        return PatternKey(self.pattern_type, self.task_id, period_category=self.period_category)


@dataclass(kw_only=True)
class FrequencyPattern(Pattern):
    """How often and on which weekdays a task gets done."""

    pattern_type: ClassVar[PatternType] = PatternType.FREQUENCY

    task_id: str
    task_name: str
    total_occurrences: int
    unique_days: int
    times_per_week: float
    preferred_days: list[PreferredDay] = field(default_factory=list)

    @property
    def key(self) -> PatternKey:
        return PatternKey(self.pattern_type, self.task_id, period_category=self.period_category)

    def share_on(self, day: int) -> PreferredDay | None:
        """Preferred-day entry for a weekday, if it is among the top days."""
        return next((d for d in self.preferred_days if d.day == day), None)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FrequencyPattern:
        data = {
            **data,
            "preferred_days": [PreferredDay(**d) for d in data.get("preferred_days", [])],
        }
        return super().from_dict(data)  # type: ignore[return-value]


@dataclass(kw_only=True)
class SequencePattern(Pattern):
    """``to_task`` habitually follows ``from_task`` on the same day."""

    pattern_type: ClassVar[PatternType] = PatternType.SEQUENCE

    from_task_id: str
    from_task_name: str
    to_task_id: str
    to_task_name: str
    count: int
    average_gap: int | None = None
    """Mean minutes between the end of one and the start of the next."""

    @property
    def key(self) -> PatternKey:
        return PatternKey(
            self.pattern_type,
            self.from_task_id,
            to_task_id=self.to_task_id,
            period_category=self.period_category,
        )


PATTERN_CLASSES: dict[PatternType, type[Pattern]] = {
    PatternType.TIME: TimePattern,
    PatternType.TIME_DAY: TimeDayPattern,
    PatternType.DURATION: DurationPattern,
    PatternType.FREQUENCY: FrequencyPattern,
    PatternType.SEQUENCE: SequencePattern,
}


def pattern_from_dict(data: dict[str, Any]) -> Pattern:
    """Rebuild a pattern from its ``to_dict`` form, dispatching on ``type``.

    Raises:
        ValueError: If the type is unknown.
        KeyError: If a required field is missing.
    """
    pattern_cls = PATTERN_CLASSES[PatternType(data["type"])]
    return pattern_cls.from_dict(data)


# =============================================================================
# Completion statistics
# =============================================================================


@dataclass
class Tally:
    """Completed vs. skipped counter."""

    completed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.completed + self.skipped

    @property
    def rate(self) -> float:
        return self.completed / self.total if self.total else 0.0

    def record(self, status: HistoryStatus) -> None:
        if status == HistoryStatus.COMPLETED:
            self.completed += 1
        elif status == HistoryStatus.SKIPPED:
            self.skipped += 1


@dataclass
class CompletionStats:
    """Completion tallies of one task, overall and per hour/weekday."""

    overall: Tally = field(default_factory=Tally)
    by_hour: dict[int, Tally] = field(default_factory=dict)
    by_day: dict[int, Tally] = field(default_factory=dict)


# =============================================================================
# Outputs
# =============================================================================


@dataclass
class InsightAction:
    """Machine-readable suggestion attached to an actionable insight."""

    type: str
    params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, **self.params}


@dataclass
class Insight:
    """A ranked, human-readable suggestion. Never persisted."""

    type: InsightType
    title: str
    text: str
    priority: float
    task_id: str | None = None
    actionable: bool = False
    action: InsightAction | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "text": self.text,
            "priority": self.priority,
            "task_id": self.task_id,
            "actionable": self.actionable,
            "action": self.action.to_dict() if self.action else None,
        }


@dataclass
class RoutineSuggestion:
    """A proposed (task, time) pair for pre-filling a day."""

    task_id: str
    task_name: str
    category: TaskCategory
    suggested_time: str
    duration: int
    confidence: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["category"] = self.category.value
        return data


@dataclass
class AnalysisResult:
    """Outcome of one analysis run."""

    insights: list[Insight] = field(default_factory=list)
    patterns: list[Pattern] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "insights": [i.to_dict() for i in self.insights],
            "patterns": [p.to_dict() for p in self.patterns],
        }
