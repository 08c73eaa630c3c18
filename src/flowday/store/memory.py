"""In-memory planner store for testing.

Keeps everything in plain lists and dicts without filesystem I/O. Useful
for unit tests and for embedding the engine in a host that manages its
own persistence.
"""

from __future__ import annotations

import copy
import dataclasses
import uuid
from typing import Any

from flowday.learning.models import HistoryEntry, Pattern, ScheduledInstance, Task
from flowday.store.base import PlannerStore
from flowday.utils.time import utc_now


class InMemoryPlannerStore(PlannerStore):
    """In-memory planner store.

    Attributes are public so tests can seed and inspect them directly.
    """

    def __init__(
        self,
        tasks: list[Task] | None = None,
        history: list[HistoryEntry] | None = None,
        schedule: list[ScheduledInstance] | None = None,
        settings: dict[str, Any] | None = None,
    ) -> None:
        self.tasks: dict[str, Task] = {t.id: t for t in tasks or []}
        self.history: list[HistoryEntry] = list(history or [])
        self.schedule: list[ScheduledInstance] = list(schedule or [])
        self.patterns: dict[str, Pattern] = {}
        self.settings: dict[str, Any] = dict(settings or {})
        self.save_count = 0

    async def get_all_tasks(self) -> list[Task]:
        return list(self.tasks.values())

    async def get_all_history(self) -> list[HistoryEntry]:
        return list(self.history)

    async def get_all_scheduled_instances(self) -> list[ScheduledInstance]:
        return list(self.schedule)

    async def get_all_patterns(self) -> list[Pattern]:
        return list(self.patterns.values())

    async def save_pattern(self, pattern: Pattern) -> Pattern:
        pattern.updated_at = utc_now()
        self.patterns[pattern.id] = pattern
        self.save_count += 1
        return pattern

    async def get_setting(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self.settings.get(key, default))

    async def set_setting(self, key: str, value: Any) -> None:
        self.settings[key] = copy.deepcopy(value)

    async def add_task(self, task: Task) -> Task:
        self.tasks[task.id] = task
        return task

    async def add_history_entry(self, entry: HistoryEntry) -> HistoryEntry:
        if not entry.id:
            entry = dataclasses.replace(entry, id=uuid.uuid4().hex)
        self.history.append(entry)
        return entry

    async def add_scheduled_instance(self, instance: ScheduledInstance) -> ScheduledInstance:
        if not instance.id:
            instance.id = uuid.uuid4().hex
        self.schedule.append(instance)
        return instance
