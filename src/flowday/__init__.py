"""FlowDay - weekly planning with a learning insight engine."""

__version__ = "0.4.0"

from flowday.learning import AnalysisResult, InsightEngine
from flowday.store import InMemoryPlannerStore, JsonPlannerStore, PlannerStore

__all__ = [
    "__version__",
    "AnalysisResult",
    "InsightEngine",
    "PlannerStore",
    "InMemoryPlannerStore",
    "JsonPlannerStore",
]
