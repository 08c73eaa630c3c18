"""Shared test helpers for FlowDay tests."""

from datetime import date, timedelta


def iso_days(start: str, count: int, step: int = 1) -> list[str]:
    """``count`` ISO dates starting at ``start``, ``step`` days apart."""
    first = date.fromisoformat(start)
    return [(first + timedelta(days=i * step)).isoformat() for i in range(count)]


# 2026-10-04 is a Sunday; WEEK[i] has weekday index i (0 = Sunday)
WEEK = iso_days("2026-10-04", 7)
