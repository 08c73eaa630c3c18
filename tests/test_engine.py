"""Tests for the insight engine orchestration."""

import pytest
from structlog.testing import capture_logs

from flowday.core.config import InsightConfig
from flowday.core.errors import StoreError
from flowday.learning.engine import InsightEngine
from flowday.learning.models import HistoryEntry, InsightType, Pattern, TimePattern
from flowday.store.memory import InMemoryPlannerStore
from tests.helpers import iso_days

# Three full working weeks, Monday 2026-10-05 to Friday 2026-10-23
WEEKENDS = {"2026-10-10", "2026-10-11", "2026-10-17", "2026-10-18"}
WORKDAYS = [d for d in iso_days("2026-10-05", 19) if d not in WEEKENDS]
LAST_WEEK = ("2026-10-19", "2026-10-23")


def _routine_history(make_entry) -> list[HistoryEntry]:
    history = []
    for day in WORKDAYS:
        history.append(
            make_entry("email", day, "09:00", end="09:30", planned=30, actual=45)
        )
        history.append(make_entry("read", day, "09:40", end="10:10"))
    return history


def _pattern_by_id(patterns: list[Pattern], pattern_id: str) -> Pattern:
    return next(p for p in patterns if p.id == pattern_id)


class FailingStore(InMemoryPlannerStore):
    """Store whose writes start failing after a number of successful saves."""

    def __init__(self, fail_after: int, **kw) -> None:
        super().__init__(**kw)
        self.fail_after = fail_after

    async def save_pattern(self, pattern: Pattern) -> Pattern:
        if self.save_count >= self.fail_after:
            raise StoreError("disk full")
        return await super().save_pattern(pattern)


class TestHistoryGate:
    @pytest.mark.asyncio
    async def test_short_history_returns_single_info(self, memory_store, make_entry) -> None:
        existing = TimePattern(
            task_id="gym", task_name="Gym", average_time="07:00", variance=0.0,
            sample_size=10, confidence=1.0,
        )
        await memory_store.save_pattern(existing)
        memory_store.history = [make_entry("gym", d, "07:00") for d in WORKDAYS[:4]]

        result = await InsightEngine(memory_store).analyze()

        assert len(result.insights) == 1
        assert result.insights[0].type == InsightType.INFO
        assert result.insights[0].priority == 0
        assert "Currently: 4" in result.insights[0].text
        assert result.patterns == [existing]
        assert memory_store.save_count == 1

    @pytest.mark.asyncio
    async def test_gate_is_configurable(self, memory_store, make_entry) -> None:
        memory_store.history = _routine_history(make_entry)

        result = await InsightEngine(memory_store, InsightConfig(min_history=100)).analyze()

        assert [i.type for i in result.insights] == [InsightType.INFO]
        assert memory_store.save_count == 0

    @pytest.mark.asyncio
    async def test_gate_logged(self, memory_store, make_entry) -> None:
        memory_store.history = [make_entry("gym", WORKDAYS[0])]

        with capture_logs() as logs:
            await InsightEngine(memory_store).analyze()

        events = [entry["event"] for entry in logs]
        assert "analysis_skipped_insufficient_history" in events


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_full_run(self, memory_store, make_entry) -> None:
        memory_store.history = _routine_history(make_entry)

        result = await InsightEngine(memory_store).analyze()

        ids = {p.id for p in result.patterns}
        assert {
            "time_email",
            "time_read",
            "duration_email",
            "frequency_email",
            "frequency_read",
            "sequence_email_read",
            "time_email_day1",
        } <= ids
        assert set(memory_store.patterns) == ids

        priorities = [i.priority for i in result.insights]
        assert priorities == sorted(priorities, reverse=True)
        assert 0 < len(result.insights) <= 10
        titles = {i.title for i in result.insights}
        assert {"Habitual time", "Duration underestimated", "Habitual sequence"} <= titles
        assert "Most productive window" in titles

    @pytest.mark.asyncio
    async def test_confidence_bounded(self, memory_store, make_entry) -> None:
        memory_store.history = _routine_history(make_entry) * 4

        result = await InsightEngine(memory_store).analyze()

        assert result.patterns
        assert all(0.0 <= p.confidence <= 1.0 for p in result.patterns)

    @pytest.mark.asyncio
    async def test_insight_limit_from_config(self, memory_store, make_entry) -> None:
        memory_store.history = _routine_history(make_entry)

        result = await InsightEngine(memory_store, InsightConfig(max_insights=2)).analyze()

        assert len(result.insights) == 2

    @pytest.mark.asyncio
    async def test_idempotent(self, memory_store, make_entry) -> None:
        memory_store.history = _routine_history(make_entry)
        engine = InsightEngine(memory_store)

        first = await engine.analyze()
        second = await engine.analyze()

        assert {p.id for p in first.patterns} == {p.id for p in second.patterns}
        assert [(i.title, i.text, i.priority) for i in first.insights] == [
            (i.title, i.text, i.priority) for i in second.insights
        ]
        assert len(memory_store.patterns) == len(first.patterns)

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, tasks, make_entry) -> None:
        store = FailingStore(fail_after=2, tasks=tasks, history=_routine_history(make_entry))

        with pytest.raises(StoreError):
            await InsightEngine(store).analyze()

        assert len(store.patterns) == 2


class TestSpecialPeriods:
    @pytest.fixture
    def vacation_store(self, memory_store, make_entry) -> InMemoryPlannerStore:
        memory_store.history = _routine_history(make_entry)
        memory_store.settings = {
            "special_periods": [
                {"start_date": LAST_WEEK[0], "end_date": LAST_WEEK[1], "category_id": "vacation"}
            ],
            "period_categories": [{"id": "vacation", "name": "Vacation", "color": "#22c55e"}],
        }
        return memory_store

    @pytest.mark.asyncio
    async def test_period_entries_excluded_from_routine(self, vacation_store) -> None:
        result = await InsightEngine(vacation_store).analyze()

        assert _pattern_by_id(result.patterns, "time_email").sample_size == 10
        info = [i for i in result.insights if i.title == "Special periods"]
        assert len(info) == 1
        assert info[0].text.startswith("10 tasks")
        assert info[0].priority == 1

    @pytest.mark.asyncio
    async def test_period_patterns_are_tagged(self, vacation_store) -> None:
        result = await InsightEngine(vacation_store).analyze()

        period = _pattern_by_id(result.patterns, "time_email_period_vacation")
        assert period.period_category == "vacation"
        assert period.period_category_name == "Vacation"
        assert period.sample_size == 5
        assert "time_email_period_vacation" in vacation_store.patterns
        assert "time_email" in vacation_store.patterns

    @pytest.mark.asyncio
    async def test_unknown_category_gets_default_name(self, vacation_store) -> None:
        vacation_store.settings["period_categories"] = []

        result = await InsightEngine(vacation_store).analyze()

        period = _pattern_by_id(result.patterns, "time_read_period_vacation")
        assert period.period_category_name == "Special period"

    @pytest.mark.asyncio
    async def test_removing_period_restores_samples(self, vacation_store) -> None:
        engine = InsightEngine(vacation_store)
        with_period = await engine.analyze()

        await vacation_store.set_setting("special_periods", [])
        without_period = await engine.analyze()

        assert _pattern_by_id(with_period.patterns, "time_email").sample_size == 10
        assert _pattern_by_id(without_period.patterns, "time_email").sample_size == 15
        assert not any(i.title == "Special periods" for i in without_period.insights)


class TestRoutineSuggestion:
    @pytest.mark.asyncio
    async def test_suggests_from_persisted_patterns(self, memory_store, make_entry) -> None:
        memory_store.history = _routine_history(make_entry)
        engine = InsightEngine(memory_store)
        await engine.analyze()

        suggestions = await engine.generate_routine_suggestion("2026-10-26")

        assert [(s.task_id, s.suggested_time) for s in suggestions] == [
            ("email", "09:00"),
            ("read", "09:40"),
        ]
        assert suggestions[0].reason == "Usually done on Monday at 09:00"
        assert suggestions[0].confidence == pytest.approx(1.2)

    @pytest.mark.asyncio
    async def test_nothing_on_weekend(self, memory_store, make_entry) -> None:
        memory_store.history = _routine_history(make_entry)
        engine = InsightEngine(memory_store)
        await engine.analyze()

        assert await engine.generate_routine_suggestion(0) == []

    @pytest.mark.asyncio
    async def test_explicit_task_catalog(self, memory_store, make_entry, tasks) -> None:
        memory_store.history = _routine_history(make_entry)
        engine = InsightEngine(memory_store)
        await engine.analyze()

        only_read = [t for t in tasks if t.id == "read"]
        suggestions = await engine.generate_routine_suggestion(1, only_read)

        assert [s.task_id for s in suggestions] == ["read"]
