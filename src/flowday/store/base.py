"""Abstract base for planner stores."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

from flowday.core.errors import StoreError
from flowday.learning.models import (
    HistoryEntry,
    Pattern,
    PeriodCategory,
    ScheduledInstance,
    SpecialPeriod,
    Task,
)

SPECIAL_PERIODS_KEY = "special_periods"
PERIOD_CATEGORIES_KEY = "period_categories"

T = TypeVar("T")


def _parse_setting(key: str, raw: Any, parse: Callable[[Any], T]) -> list[T]:
    """Parse a list-valued setting, raising StoreError when malformed."""
    if not raw:
        return []
    if not isinstance(raw, list):
        raise StoreError(f"Setting '{key}' must be a list")
    try:
        return [parse(item) for item in raw]
    except (KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Malformed '{key}' setting: {e!r}") from e


class PlannerStore(ABC):
    """Abstract base class for planner data access.

    The insight engine reads tasks, history, schedule and settings through
    this interface and writes only derived patterns. Failures surface as
    ``StoreError`` and are never retried here.
    """

    @abstractmethod
    async def get_all_tasks(self) -> list[Task]:
        """Return the task catalog."""
        ...

    @abstractmethod
    async def get_all_history(self) -> list[HistoryEntry]:
        """Return every history entry, oldest first."""
        ...

    @abstractmethod
    async def get_all_scheduled_instances(self) -> list[ScheduledInstance]:
        """Return every scheduled instance."""
        ...

    @abstractmethod
    async def get_all_patterns(self) -> list[Pattern]:
        """Return every persisted pattern."""
        ...

    @abstractmethod
    async def save_pattern(self, pattern: Pattern) -> Pattern:
        """Upsert a pattern keyed by its derived id.

        Args:
            pattern: Pattern to persist; replaces any stored pattern with
                the same key.

        Returns:
            The stored pattern, with ``updated_at`` set.
        """
        ...

    @abstractmethod
    async def get_setting(self, key: str, default: Any = None) -> Any:
        """Read a setting value, or ``default`` when unset."""
        ...

    @abstractmethod
    async def set_setting(self, key: str, value: Any) -> None:
        """Write a setting value."""
        ...

    @abstractmethod
    async def add_task(self, task: Task) -> Task:
        """Insert or replace a task in the catalog."""
        ...

    @abstractmethod
    async def add_history_entry(self, entry: HistoryEntry) -> HistoryEntry:
        """Append a history entry.

        Returns:
            The stored entry; a fresh id is assigned when ``entry.id`` is empty.
        """
        ...

    @abstractmethod
    async def add_scheduled_instance(self, instance: ScheduledInstance) -> ScheduledInstance:
        """Add an instance to the schedule."""
        ...

    async def get_special_periods(self) -> list[SpecialPeriod]:
        """Special periods from the ``special_periods`` setting."""
        raw = await self.get_setting(SPECIAL_PERIODS_KEY, [])
        return _parse_setting(SPECIAL_PERIODS_KEY, raw, SpecialPeriod.from_dict)

    async def get_period_categories(self) -> list[PeriodCategory]:
        """Period categories from the ``period_categories`` setting."""
        raw = await self.get_setting(PERIOD_CATEGORIES_KEY, [])
        return _parse_setting(PERIOD_CATEGORIES_KEY, raw, PeriodCategory.from_dict)
