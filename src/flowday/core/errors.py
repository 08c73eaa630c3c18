"""Exception hierarchy for FlowDay.

All FlowDay exceptions inherit from FlowdayError, enabling callers to catch
broad (FlowdayError) or narrow (e.g., StoreError). Analyzers never raise on
missing optional data; these errors cover I/O, configuration and strict
parsing only.
"""

from __future__ import annotations


class FlowdayError(Exception):
    """Base exception for all FlowDay errors."""


class StoreError(FlowdayError):
    """Raised when the planner store cannot be read or written.

    Examples: unreadable JSON document, malformed top-level structure,
    failed atomic rename while persisting a pattern.
    """


class ConfigError(FlowdayError):
    """Raised when a configuration file cannot be parsed or validated."""


class InvalidTimeError(FlowdayError, ValueError):
    """Raised by strict parsers when text is not a valid ``HH:MM`` time."""
