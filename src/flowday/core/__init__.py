"""Core infrastructure: configuration, constants, errors and logging."""

from flowday.core.config import FlowdayConfig, InsightConfig, LogConfig, StoreConfig
from flowday.core.errors import ConfigError, FlowdayError, InvalidTimeError, StoreError

__all__ = [
    "FlowdayConfig",
    "InsightConfig",
    "LogConfig",
    "StoreConfig",
    "ConfigError",
    "FlowdayError",
    "InvalidTimeError",
    "StoreError",
]
