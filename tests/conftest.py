"""Pytest fixtures for FlowDay tests."""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from flowday.learning.models import HistoryEntry, HistoryStatus, Task, TaskCategory
from flowday.store.memory import InMemoryPlannerStore

HistoryFactory = Callable[..., HistoryEntry]


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging state before and after each test.

    This ensures test isolation for logging configuration.
    """
    import flowday.cli as cli_module

    cli_module.reset_cli_state()
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    cli_module.reset_cli_state()
    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


@pytest.fixture
def tasks() -> list[Task]:
    """A small task catalog."""
    return [
        Task(id="gym", name="Gym", category=TaskCategory.HEALTH, default_duration=60),
        Task(id="email", name="Email", category=TaskCategory.WORK, default_duration=30),
        Task(id="read", name="Reading", category=TaskCategory.PERSONAL, default_duration=45),
        Task(id="cook", name="Cooking", category=TaskCategory.HOME, default_duration=40),
    ]


@pytest.fixture
def make_entry() -> HistoryFactory:
    """Build history entries with sequential ids.

    Defaults to a completed entry; pass ``status="skipped"`` for skips.
    """
    counter = iter(range(1, 1_000_000))

    def _make(
        task_id: str,
        day: str,
        start: str | None = "09:00",
        *,
        status: str = "completed",
        end: str | None = None,
        planned: int | None = None,
        actual: int | None = None,
    ) -> HistoryEntry:
        return HistoryEntry(
            id=f"h{next(counter)}",
            task_id=task_id,
            date=day,
            status=HistoryStatus(status),
            start_time=start,
            end_time=end,
            planned_duration=planned,
            actual_duration=actual,
        )

    return _make


@pytest.fixture
def memory_store(tasks: list[Task]) -> InMemoryPlannerStore:
    """An in-memory store seeded with the task catalog and no history."""
    return InMemoryPlannerStore(tasks=tasks)


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Location for a JSON planner store inside the test's temp dir."""
    return tmp_path / "planner" / "flowday.json"
