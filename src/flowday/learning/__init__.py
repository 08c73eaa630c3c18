"""Learning module for pattern analysis, insights, and routine suggestions."""

from flowday.learning.analyzers import PatternAnalyzer
from flowday.learning.engine import InsightEngine
from flowday.learning.insights import InsightGenerator, rank_insights
from flowday.learning.models import (
    AnalysisResult,
    DurationPattern,
    FrequencyPattern,
    HistoryEntry,
    HistoryStatus,
    Insight,
    InsightAction,
    InsightType,
    Pattern,
    PatternKey,
    PatternType,
    PeriodCategory,
    RoutineSuggestion,
    ScheduledInstance,
    SequencePattern,
    SpecialPeriod,
    Task,
    TaskCategory,
    TimeDayPattern,
    TimePattern,
)
from flowday.learning.segmenter import SegmentedHistory, segment_history
from flowday.learning.suggestions import RoutineSuggester

__all__ = [
    # Inputs
    "Task",
    "TaskCategory",
    "HistoryEntry",
    "HistoryStatus",
    "ScheduledInstance",
    "SpecialPeriod",
    "PeriodCategory",
    # Patterns
    "PatternType",
    "PatternKey",
    "Pattern",
    "TimePattern",
    "TimeDayPattern",
    "DurationPattern",
    "FrequencyPattern",
    "SequencePattern",
    # Outputs
    "InsightType",
    "Insight",
    "InsightAction",
    "RoutineSuggestion",
    "AnalysisResult",
    # Pipeline
    "SegmentedHistory",
    "segment_history",
    "PatternAnalyzer",
    "InsightGenerator",
    "rank_insights",
    "RoutineSuggester",
    "InsightEngine",
]
