"""Tests for the planner stores."""

import json
from pathlib import Path

import pytest

from flowday.core.errors import StoreError
from flowday.learning.models import (
    FrequencyPattern,
    HistoryEntry,
    HistoryStatus,
    PreferredDay,
    ScheduledInstance,
    SequencePattern,
    SpecialPeriod,
    Task,
    TaskCategory,
    TimeDayPattern,
    pattern_from_dict,
)
from flowday.store.json_store import JsonPlannerStore
from flowday.store.memory import InMemoryPlannerStore


@pytest.fixture
def json_store(store_path: Path) -> JsonPlannerStore:
    return JsonPlannerStore(store_path)


def _frequency() -> FrequencyPattern:
    return FrequencyPattern(
        task_id="gym",
        task_name="Gym",
        total_occurrences=6,
        unique_days=6,
        times_per_week=2.0,
        preferred_days=[PreferredDay(day=1, count=4, percentage=66.7)],
        sample_size=6,
        confidence=0.4,
    )


class TestJsonPlannerStore:
    @pytest.mark.asyncio
    async def test_missing_file_reads_empty(self, json_store) -> None:
        assert await json_store.get_all_tasks() == []
        assert await json_store.get_all_history() == []
        assert await json_store.get_all_patterns() == []
        assert await json_store.get_setting("special_periods", []) == []
        assert not json_store.path.exists()

    def test_creates_parent_directory(self, store_path: Path) -> None:
        JsonPlannerStore(store_path)

        assert store_path.parent.is_dir()

    @pytest.mark.asyncio
    async def test_task_roundtrip_and_replace(self, json_store) -> None:
        await json_store.add_task(Task(id="gym", name="Gym", category=TaskCategory.HEALTH))
        await json_store.add_task(Task(id="gym", name="Gym (evening)", default_duration=45))

        (task,) = await json_store.get_all_tasks()

        assert task.name == "Gym (evening)"
        assert task.category == TaskCategory.OTHER
        assert task.default_duration == 45

    @pytest.mark.asyncio
    async def test_history_is_appended_with_generated_id(self, json_store) -> None:
        entry = HistoryEntry(
            id="",
            task_id="gym",
            date="2026-10-05",
            status=HistoryStatus.COMPLETED,
            start_time="07:00",
            planned_duration=60,
            actual_duration=70,
        )

        stored = await json_store.add_history_entry(entry)
        await json_store.add_history_entry(stored)

        history = await json_store.get_all_history()
        assert stored.id
        assert len(history) == 2
        assert history[0] == stored

    @pytest.mark.asyncio
    async def test_schedule_roundtrip(self, json_store) -> None:
        instance = ScheduledInstance(
            id="", task_id="gym", date="2026-10-05", start_time="07:00", duration=60
        )

        await json_store.add_scheduled_instance(instance)

        (loaded,) = await json_store.get_all_scheduled_instances()
        assert loaded.id
        assert loaded.status == "pending"
        assert loaded.start_time == "07:00"

    @pytest.mark.asyncio
    async def test_save_pattern_upserts_by_key(self, json_store) -> None:
        await json_store.save_pattern(_frequency())
        updated = _frequency()
        updated.total_occurrences = 9
        await json_store.save_pattern(updated)

        (loaded,) = await json_store.get_all_patterns()

        assert isinstance(loaded, FrequencyPattern)
        assert loaded.total_occurrences == 9
        assert loaded.preferred_days == [PreferredDay(day=1, count=4, percentage=66.7)]
        assert loaded.updated_at is not None

    @pytest.mark.asyncio
    async def test_patterns_keyed_by_derived_id(self, json_store) -> None:
        day_pattern = TimeDayPattern(
            task_id="gym", task_name="Gym", average_time="07:00", variance=3.0,
            day_of_week=2, sample_size=3, confidence=0.6,
        )
        sequence = SequencePattern(
            from_task_id="email", from_task_name="Email", to_task_id="read",
            to_task_name="Reading", count=4, sample_size=4, confidence=0.4,
        )
        await json_store.save_pattern(day_pattern)
        await json_store.save_pattern(sequence)
        await json_store.save_pattern(day_pattern.for_period("sick", "Sick"))

        document = json.loads(json_store.path.read_text())

        assert set(document["patterns"]) == {
            "time_gym_day2",
            "sequence_email_read",
            "time_gym_day2_period_sick",
        }
        assert document["patterns"]["time_gym_day2"]["type"] == "time_day"

    @pytest.mark.asyncio
    async def test_settings(self, json_store) -> None:
        periods = [{"start_date": "2026-08-01", "end_date": "2026-08-15", "category_id": "vac"}]

        await json_store.set_setting("special_periods", periods)

        assert await json_store.get_setting("special_periods") == periods
        assert await json_store.get_special_periods() == [
            SpecialPeriod(start_date="2026-08-01", end_date="2026-08-15", category_id="vac")
        ]
        assert await json_store.get_setting("missing", "fallback") == "fallback"

    @pytest.mark.asyncio
    async def test_write_leaves_no_temp_file(self, json_store) -> None:
        await json_store.set_setting("k", 1)

        assert [p.name for p in json_store.path.parent.iterdir()] == [json_store.path.name]

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self, json_store) -> None:
        json_store.path.write_text("{not json")

        with pytest.raises(StoreError):
            await json_store.get_all_tasks()

    @pytest.mark.asyncio
    async def test_wrong_section_type_raises(self, json_store) -> None:
        json_store.path.write_text(json.dumps({"tasks": {"gym": {}}}))

        with pytest.raises(StoreError, match="'tasks' must be a list"):
            await json_store.get_all_tasks()

    @pytest.mark.asyncio
    async def test_malformed_record_raises(self, json_store) -> None:
        json_store.path.write_text(json.dumps({"history": [{"task_id": "gym"}]}))

        with pytest.raises(StoreError):
            await json_store.get_all_history()

    @pytest.mark.asyncio
    async def test_unknown_pattern_type_raises(self, json_store) -> None:
        json_store.path.write_text(json.dumps({"patterns": {"x": {"type": "mood"}}}))

        with pytest.raises(StoreError):
            await json_store.get_all_patterns()


class TestInMemoryPlannerStore:
    @pytest.mark.asyncio
    async def test_settings_are_copied(self) -> None:
        store = InMemoryPlannerStore()
        periods = [{"start_date": "2026-08-01", "end_date": "2026-08-15", "category_id": "v"}]
        await store.set_setting("special_periods", periods)

        periods.clear()

        assert len(await store.get_setting("special_periods")) == 1

    @pytest.mark.asyncio
    async def test_save_pattern_counts_and_upserts(self) -> None:
        store = InMemoryPlannerStore()

        await store.save_pattern(_frequency())
        await store.save_pattern(_frequency())

        assert store.save_count == 2
        assert list(store.patterns) == ["frequency_gym"]

    @pytest.mark.asyncio
    async def test_period_categories(self) -> None:
        store = InMemoryPlannerStore(
            settings={"period_categories": [{"id": "vac", "name": "Vacation"}]}
        )

        (category,) = await store.get_period_categories()

        assert category.name == "Vacation"
        assert category.color == "#6b7280"


class TestPatternSerialization:
    def test_to_dict_roundtrip_keeps_type(self) -> None:
        pattern = _frequency().for_period("vac", "Vacation")

        data = pattern.to_dict()
        restored = pattern_from_dict(data)

        assert data["id"] == "frequency_gym_period_vac"
        assert data["type"] == "frequency"
        assert restored == pattern

    def test_confidence_validated(self) -> None:
        with pytest.raises(ValueError):
            FrequencyPattern(
                task_id="gym", task_name="Gym", total_occurrences=1, unique_days=1,
                times_per_week=1.0, sample_size=1, confidence=1.5,
            )


class TestPeriodSettings:
    @pytest.mark.asyncio
    async def test_malformed_special_periods_raise_store_error(self) -> None:
        store = InMemoryPlannerStore(
            settings={
                "special_periods": [
                    {"startDate": "2026-08-01", "endDate": "2026-08-15", "categoryId": "v"}
                ]
            }
        )

        with pytest.raises(StoreError, match="special_periods"):
            await store.get_special_periods()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [{"id": "vac"}, ["vac"], [{"name": "Vacation"}]])
    async def test_malformed_period_categories_raise_store_error(self, value) -> None:
        store = InMemoryPlannerStore(settings={"period_categories": value})

        with pytest.raises(StoreError, match="period_categories"):
            await store.get_period_categories()
