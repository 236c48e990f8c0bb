"""Store and action DSL analysis."""

from .collector import ActionCollector, Scope
from .conditions import ConditionBuilder
from .handlers import HandlerAnalyzer

__all__ = [
    "ActionCollector",
    "ConditionBuilder",
    "HandlerAnalyzer",
    "Scope",
]
