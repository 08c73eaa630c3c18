"""Planner data-access backends."""

from flowday.store.base import PlannerStore
from flowday.store.json_store import JsonPlannerStore
from flowday.store.memory import InMemoryPlannerStore

__all__ = ["PlannerStore", "JsonPlannerStore", "InMemoryPlannerStore"]
