"""JSON file-based planner store.

All planner data lives in one JSON document:

    {"tasks": [...], "history": [...], "schedule": [...],
     "patterns": {"<id>": {...}}, "settings": {...}}

The document is re-read on every call and rewritten atomically (temp file
plus rename) on every write, so concurrent processes see whole documents
and the last writer wins.
"""

from __future__ import annotations

import dataclasses
import json
import uuid
from pathlib import Path
from typing import Any

from flowday.core.errors import StoreError
from flowday.core.logging import get_logger
from flowday.learning.models import (
    HistoryEntry,
    Pattern,
    ScheduledInstance,
    Task,
    pattern_from_dict,
)
from flowday.store.base import PlannerStore
from flowday.utils.time import utc_now

_logger = get_logger("store.json")

_SECTIONS: dict[str, type] = {
    "tasks": list,
    "history": list,
    "schedule": list,
    "patterns": dict,
    "settings": dict,
}


def _empty_document() -> dict[str, Any]:
    return {name: kind() for name, kind in _SECTIONS.items()}


class JsonPlannerStore(PlannerStore):
    """Planner store backed by a single JSON file.

    A missing file reads as an empty planner. A file that cannot be read or
    parsed raises StoreError instead of being silently reset.
    """

    def __init__(self, path: Path):
        """Initialize JSON store.

        Args:
            path: Location of the JSON document; parent directories are created.
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return _empty_document()

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            _logger.error("store_read_failed", path=str(self.path), error=str(e))
            raise StoreError(f"Cannot read planner data from {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"Malformed planner data in {self.path}: root is not an object")

        document = _empty_document()
        for name, kind in _SECTIONS.items():
            value = data.get(name, kind())
            if not isinstance(value, kind):
                raise StoreError(
                    f"Malformed planner data in {self.path}: '{name}' must be a {kind.__name__}"
                )
            document[name] = value
        return document

    def _write(self, document: dict[str, Any]) -> None:
        # Write atomically using temp file + rename
        temp_file = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, default=str)
            temp_file.replace(self.path)
        except OSError as e:
            _logger.error("store_write_failed", path=str(self.path), error=str(e))
            raise StoreError(f"Cannot write planner data to {self.path}: {e}") from e

    def _load_records(self, section: str, parse: Any) -> list[Any]:
        items = self._read()[section]
        try:
            return [parse(item) for item in items]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed {section} record in {self.path}: {e}") from e

    async def get_all_tasks(self) -> list[Task]:
        return self._load_records("tasks", Task.from_dict)

    async def get_all_history(self) -> list[HistoryEntry]:
        return self._load_records("history", HistoryEntry.from_dict)

    async def get_all_scheduled_instances(self) -> list[ScheduledInstance]:
        return self._load_records("schedule", ScheduledInstance.from_dict)

    async def get_all_patterns(self) -> list[Pattern]:
        patterns = self._read()["patterns"]
        try:
            return [pattern_from_dict(data) for data in patterns.values()]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed pattern record in {self.path}: {e}") from e

    async def save_pattern(self, pattern: Pattern) -> Pattern:
        """Upsert a pattern under its derived id."""
        pattern.updated_at = utc_now()
        document = self._read()
        document["patterns"][pattern.id] = pattern.to_dict()
        self._write(document)
        return pattern

    async def get_setting(self, key: str, default: Any = None) -> Any:
        return self._read()["settings"].get(key, default)

    async def set_setting(self, key: str, value: Any) -> None:
        document = self._read()
        document["settings"][key] = value
        self._write(document)

    async def add_task(self, task: Task) -> Task:
        document = self._read()
        document["tasks"] = [t for t in document["tasks"] if t.get("id") != task.id]
        document["tasks"].append(task.to_dict())
        self._write(document)
        return task

    async def add_history_entry(self, entry: HistoryEntry) -> HistoryEntry:
        if not entry.id:
            entry = dataclasses.replace(entry, id=uuid.uuid4().hex)
        document = self._read()
        document["history"].append(entry.to_dict())
        self._write(document)
        _logger.debug("history_entry_added", entry_id=entry.id, task_id=entry.task_id)
        return entry

    async def add_scheduled_instance(self, instance: ScheduledInstance) -> ScheduledInstance:
        if not instance.id:
            instance.id = uuid.uuid4().hex
        document = self._read()
        document["schedule"].append(instance.to_dict())
        self._write(document)
        return instance
