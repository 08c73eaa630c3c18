"""Split history into everyday routine and special periods.

Entries dated inside a special period (vacation, illness, ...) would skew
everyday statistics, so the engine analyzes them apart from the routine.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from flowday.learning.models import HistoryEntry, SpecialPeriod


@dataclass
class SegmentedHistory:
    """History partitioned by special periods.

    Attributes:
        normal: Entries outside every special period.
        period: Entries inside some special period, in input order.
        by_category: ``period`` entries grouped by period category id.
    """

    normal: list[HistoryEntry] = field(default_factory=list)
    period: list[HistoryEntry] = field(default_factory=list)
    by_category: dict[str, list[HistoryEntry]] = field(default_factory=dict)


def find_period(day: str, periods: Iterable[SpecialPeriod]) -> SpecialPeriod | None:
    """First period containing ``day``.

    Periods are expected not to overlap; when they do, list order decides.
    """
    for period in periods:
        if period.contains(day):
            return period
    return None


def segment_history(
    history: Iterable[HistoryEntry],
    periods: list[SpecialPeriod],
) -> SegmentedHistory:
    """Partition history entries into normal and special-period buckets.

    Pure function: inputs are not modified.

    Args:
        history: All history entries.
        periods: Special periods, scanned in order for each entry.

    Returns:
        SegmentedHistory with every entry in exactly one of normal/period.
    """
    result = SegmentedHistory()
    for entry in history:
        period = find_period(entry.date, periods)
        if period is None:
            result.normal.append(entry)
            continue
        result.period.append(entry)
        result.by_category.setdefault(period.category_id, []).append(entry)
    return result
