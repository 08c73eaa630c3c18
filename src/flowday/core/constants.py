"""Global constants for FlowDay.

Centralizes the thresholds used by the pattern analyzers and insight
generators, making them discoverable and consistent across modules.
"""

# =============================================================================
# Orchestrator Limits
# =============================================================================

MIN_HISTORY_FOR_PATTERNS = 5
"""History entries required before any analyzer runs."""

MAX_INSIGHTS = 10
"""Insights returned by a single analysis run, highest priority first."""

MIN_PERIOD_HISTORY = 3
"""Entries a special-period category needs before it gets its own time patterns."""

DEFAULT_PERIOD_NAME = "Special period"
"""Display name used when a period category id has no matching definition."""

# =============================================================================
# Time-of-Day Analyzer
# =============================================================================

TIME_MIN_SAMPLES = 3
"""Completions of a task required to consider a usual start time."""

TIME_MAX_STDDEV_MINUTES = 60.0
"""Start-time spread (population stddev) below which a `time` pattern exists."""

TIME_DAY_MIN_SAMPLES = 2
"""Same-weekday completions required to consider a `time_day` pattern."""

TIME_DAY_MAX_STDDEV_MINUTES = 45.0
"""Stricter spread threshold for weekday-specific start times."""

TIME_CONFIDENCE_SAMPLES = 10
"""Samples at which a `time` pattern reaches full confidence."""

TIME_DAY_CONFIDENCE_SAMPLES = 5
"""Samples at which a `time_day` pattern reaches full confidence."""

# =============================================================================
# Duration / Frequency / Sequence Analyzers
# =============================================================================

DURATION_MIN_SAMPLES = 3
"""Completions with an actual duration required for a `duration` pattern."""

DURATION_CONFIDENCE_SAMPLES = 10
"""Samples at which a `duration` pattern reaches full confidence."""

FREQUENCY_MIN_DATES = 2
"""Distinct history dates needed to compute a weekly rate."""

FREQUENCY_CONFIDENCE_SAMPLES = 15
"""Occurrences at which a `frequency` pattern reaches full confidence."""

FREQUENCY_TOP_DAYS = 3
"""Preferred weekdays kept per task."""

SEQUENCE_MIN_COUNT = 3
"""Occurrences of a transition required for a `sequence` pattern."""

SEQUENCE_MAX_GAP_MINUTES = 240
"""Gaps at or above this are treated as unrelated tasks."""

SEQUENCE_CONFIDENCE_SAMPLES = 10
"""Transitions at which a `sequence` pattern reaches full confidence."""

SEQUENCE_MAX_PATTERNS = 20
"""Sequence patterns kept per run, most frequent first."""

# =============================================================================
# Insight Generators
# =============================================================================

TIME_INSIGHT_MIN_CONFIDENCE = 0.6
TIME_INSIGHT_PRIORITY_WEIGHT = 5
TIME_DAY_INSIGHT_MIN_CONFIDENCE = 0.7
TIME_DAY_INSIGHT_PRIORITY_WEIGHT = 6

DURATION_INSIGHT_MIN_PERCENT = 20
"""Absolute percent difference between planned and actual to report."""

DURATION_INSIGHT_MIN_SAMPLES = 5
DURATION_OVERESTIMATE_MIN_MINUTES = 15
"""Minutes saved before an overestimate is worth mentioning."""

DURATION_UNDERESTIMATE_MAX_PRIORITY = 8
DURATION_OVERESTIMATE_MAX_PRIORITY = 6

FREQUENCY_INSIGHT_TOP_SHARE = 40
"""Percent share the top weekday needs before preferred days are reported."""

FREQUENCY_INSIGHT_LIST_SHARE = 25
"""Percent share a weekday needs to be listed in the message."""

FREQUENCY_INSIGHT_PRIORITY_WEIGHT = 4

SEQUENCE_INSIGHT_MIN_CONFIDENCE = 0.5
SEQUENCE_INSIGHT_LIMIT = 3
SEQUENCE_INSIGHT_PRIORITY_WEIGHT = 5
SEQUENCE_IMMEDIATE_GAP_MINUTES = 15
"""Average gaps below this read as "right after"."""

COMPLETION_MIN_TOTAL = 5
COMPLETION_LOW_RATE = 0.5
COMPLETION_LOW_MIN_TOTAL = 8
COMPLETION_BUCKET_MIN_TOTAL = 2
COMPLETION_BETTER_HOUR_MARGIN = 0.2
COMPLETION_BETTER_HOUR_PRIORITY = 7
COMPLETION_BETTER_DAY_MARGIN = 0.25
COMPLETION_BETTER_DAY_PRIORITY = 6
COMPLETION_HIGH_RATE = 0.9
COMPLETION_HIGH_MIN_TOTAL = 10
COMPLETION_ACHIEVEMENT_PRIORITY = 3

SCHEDULE_GAP_MAX_MINUTES = 480
"""Gaps between scheduled instances at or above this are ignored."""

SCHEDULE_DEAD_TIME_MINUTES = 45
SCHEDULE_DEAD_TIME_PRIORITY = 5

PEAK_HOUR_MIN_COMPLETIONS = 5
PEAK_HOUR_PRIORITY = 6

WEEKEND_DIFF_THRESHOLD = 0.15
WEEKEND_MIN_WEEKDAY_SAMPLES = 10
WEEKEND_MIN_WEEKEND_SAMPLES = 5
WEEKEND_INSIGHT_PRIORITY = 4

INFO_PERIOD_PRIORITY = 1
INFO_GATE_PRIORITY = 0

# =============================================================================
# Routine Suggestions
# =============================================================================

ROUTINE_MIN_DAY_SHARE = 20
"""Percent share a weekday needs in a task's preferred days to be suggested."""

ROUTINE_DAY_PATTERN_BOOST = 1.2
"""Confidence multiplier when a weekday-specific time pattern was used."""
