"""Insight engine orchestration.

Runs the full analysis pipeline against a planner store:

    load -> gate on history size -> segment by special period ->
    analyze -> generate insights -> persist patterns -> rank

Only the store reads and writes are awaited; segmentation, analysis and
insight generation are synchronous computation over in-memory lists.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from flowday.core.config import InsightConfig
from flowday.core.constants import DEFAULT_PERIOD_NAME, MIN_PERIOD_HISTORY
from flowday.core.logging import AnalysisContext, get_logger, with_context
from flowday.learning.analyzers import PatternAnalyzer
from flowday.learning.insights import (
    InsightGenerator,
    insufficient_history_insight,
    period_history_insight,
    rank_insights,
)
from flowday.learning.models import (
    AnalysisResult,
    Insight,
    Pattern,
    PeriodCategory,
    RoutineSuggestion,
    Task,
)
from flowday.learning.segmenter import SegmentedHistory, segment_history
from flowday.learning.suggestions import RoutineSuggester

if TYPE_CHECKING:
    from flowday.store.base import PlannerStore

_logger = get_logger("learning.engine")


class InsightEngine:
    """Learns patterns from planner history and turns them into insights.

    The engine holds no state between runs: every ``analyze()`` recomputes
    all patterns from the full history and upserts them by key.

    Example:
        engine = InsightEngine(JsonPlannerStore(path))
        result = await engine.analyze()
        for insight in result.insights:
            print(insight.title, insight.text)
    """

    def __init__(self, store: PlannerStore, config: InsightConfig | None = None) -> None:
        """Initialize the engine.

        Args:
            store: Data-access collaborator for tasks, history and patterns.
            config: Gate and ranking knobs; defaults when omitted.
        """
        self.store = store
        self.config = config or InsightConfig()

    async def analyze(self, trigger: str = "manual") -> AnalysisResult:
        """Run the analysis pipeline once.

        Args:
            trigger: What started the run, attached to every log entry.

        Returns:
            The top-ranked insights and the patterns computed by this run.
            Below the history gate, a single informational insight and the
            previously persisted patterns.

        Raises:
            StoreError: If the store cannot be read or a pattern cannot be
                saved. Patterns saved before the failure stay saved.
        """
        with with_context(AnalysisContext(trigger=trigger)):
            tasks = await self.store.get_all_tasks()
            history = await self.store.get_all_history()
            schedule = await self.store.get_all_scheduled_instances()
            existing = await self.store.get_all_patterns()
            periods = await self.store.get_special_periods()
            categories = await self.store.get_period_categories()

            if len(history) < self.config.min_history:
                _logger.info(
                    "analysis_skipped_insufficient_history",
                    history=len(history),
                    required=self.config.min_history,
                )
                return AnalysisResult(
                    insights=[insufficient_history_insight(len(history), self.config.min_history)],
                    patterns=existing,
                )

            segmented = segment_history(history, periods)
            _logger.debug(
                "history_segmented",
                normal=len(segmented.normal),
                period=len(segmented.period),
                categories=len(segmented.by_category),
            )

            analyzer = PatternAnalyzer(segmented.normal, tasks)
            time_patterns = analyzer.analyze_time_patterns()
            duration_patterns = analyzer.analyze_duration_patterns()
            frequency_patterns = analyzer.analyze_frequency_patterns()
            sequence_patterns = analyzer.analyze_sequence_patterns()
            completion = analyzer.analyze_completion()
            _logger.debug(
                "patterns_detected",
                time=len(time_patterns),
                duration=len(duration_patterns),
                frequency=len(frequency_patterns),
                sequence=len(sequence_patterns),
                completion_tasks=len(completion),
            )

            generator = InsightGenerator(tasks)
            insights: list[Insight] = []
            insights.extend(generator.from_time_patterns(time_patterns))
            insights.extend(generator.from_duration_patterns(duration_patterns))
            insights.extend(generator.from_frequency_patterns(frequency_patterns))
            insights.extend(generator.from_sequence_patterns(sequence_patterns))
            insights.extend(generator.from_completion_stats(completion))
            insights.extend(generator.optimization_insights(segmented.normal, schedule))

            if segmented.period:
                insights.append(period_history_insight(len(segmented.period)))

            patterns: list[Pattern] = [
                *time_patterns,
                *duration_patterns,
                *frequency_patterns,
                *sequence_patterns,
                *self._analyze_periods(segmented, tasks, categories),
            ]

            for pattern in patterns:
                await self.store.save_pattern(pattern)
            _logger.debug("patterns_saved", count=len(patterns))

            ranked = rank_insights(insights, self.config.max_insights)
            _logger.info(
                "analysis_completed",
                insights=len(ranked),
                candidates=len(insights),
                patterns=len(patterns),
            )
            return AnalysisResult(insights=ranked, patterns=patterns)

    def _analyze_periods(
        self,
        segmented: SegmentedHistory,
        tasks: list[Task],
        categories: list[PeriodCategory],
    ) -> list[Pattern]:
        """Time patterns per special-period category, tagged with the category."""
        names = {c.id: c.name for c in categories}
        patterns: list[Pattern] = []
        for category_id, entries in segmented.by_category.items():
            if len(entries) < MIN_PERIOD_HISTORY:
                continue
            name = names.get(category_id) or DEFAULT_PERIOD_NAME
            found = PatternAnalyzer(entries, tasks).analyze_time_patterns()
            patterns.extend(p.for_period(category_id, name) for p in found)
            _logger.debug("period_patterns_detected", category=category_id, count=len(found))
        return patterns

    async def generate_routine_suggestion(
        self,
        day: int | date | str,
        tasks: list[Task] | None = None,
    ) -> list[RoutineSuggestion]:
        """Propose tasks and times for a weekday from persisted patterns.

        Args:
            day: Weekday index (0 = Sunday), a date, or a ``YYYY-MM-DD`` string.
            tasks: Task catalog; loaded from the store when omitted.

        Returns:
            Suggestions sorted by time, then by confidence (highest first).

        Raises:
            ValueError: If ``day`` is neither a weekday index nor a valid date.
        """
        if tasks is None:
            tasks = await self.store.get_all_tasks()
        patterns = await self.store.get_all_patterns()

        suggestions = RoutineSuggester(patterns, tasks).suggest(day)
        _logger.info("routine_suggested", day=str(day), suggestions=len(suggestions))
        return suggestions
